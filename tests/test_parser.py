"""Tests for the marker-based request tokenizer."""

from petrel.parser import (
    MISSING,
    Token,
    decode_text,
    encode_text,
    find_between,
    get_body,
    get_method,
    get_path,
    get_user_agent,
    parse_request,
    printable,
)

CURL_GET = (
    b"GET /user-agent HTTP/1.1\r\n"
    b"Host: localhost:4221\r\n"
    b"User-Agent: curl/8.4.0\r\n"
    b"Accept: */*\r\n"
    b"\r\n"
)


class TestFindBetween:
    def test_returns_text_between_markers(self) -> None:
        assert find_between("a[b]c", "[", "]") == Token(True, "b")

    def test_empty_start_anchors_at_beginning(self) -> None:
        assert find_between("GET /x", "", " ") == Token(True, "GET")

    def test_missing_start_marker(self) -> None:
        """A missing marker is a typed miss with an empty value."""
        result = find_between("abc", "[", "]")
        assert result is MISSING
        assert result.value == ""

    def test_missing_end_marker(self) -> None:
        assert find_between("a[bc", "[", "]") == MISSING

    def test_end_marker_searched_after_start(self) -> None:
        assert find_between("] [x]", "[", "]") == Token(True, "x")

    def test_adjacent_markers_give_found_empty_value(self) -> None:
        assert find_between("[]", "[", "]") == Token(True, "")


class TestRequestLine:
    def test_method(self) -> None:
        assert get_method("POST /files/a HTTP/1.1\r\n\r\n").value == "POST"

    def test_method_of_garbage_without_space(self) -> None:
        assert get_method("garbage").found is False

    def test_path_without_leading_slash(self) -> None:
        assert get_path("GET /echo/abc HTTP/1.1\r\n\r\n").value == "echo/abc"

    def test_root_path_is_found_and_empty(self) -> None:
        assert get_path("GET / HTTP/1.1\r\n\r\n") == Token(True, "")

    def test_absolute_form_target_has_no_path_marker(self) -> None:
        assert get_path("GET http://host/ HTTP/1.1\r\n\r\n").found is False

    def test_percent_encoding_is_not_decoded(self) -> None:
        assert get_path("GET /echo/a%20b HTTP/1.1\r\n\r\n").value == "echo/a%20b"


class TestHeadersAndBody:
    def test_user_agent(self) -> None:
        assert get_user_agent(CURL_GET.decode()).value == "curl/8.4.0"

    def test_user_agent_is_case_sensitive(self) -> None:
        text = "GET /user-agent HTTP/1.1\r\nuser-agent: curl\r\n\r\n"
        assert get_user_agent(text).found is False

    def test_body_after_blank_line(self) -> None:
        raw = b"POST /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"
        assert get_body(raw) == b"hello"

    def test_body_keeps_binary_bytes(self) -> None:
        raw = b"POST /files/a HTTP/1.1\r\n\r\n\x00\xff\r\n"
        assert get_body(raw) == b"\x00\xff\r\n"

    def test_no_blank_line_means_no_body(self) -> None:
        assert get_body(b"POST /files/a HTTP/1.1\r\n") == b""


class TestParseRequest:
    def test_full_request(self) -> None:
        request = parse_request(CURL_GET)
        assert request.method == "GET"
        assert request.path == "user-agent"
        assert request.path_found is True
        assert request.user_agent == "curl/8.4.0"
        assert request.headers == {"User-Agent": "curl/8.4.0"}
        assert request.body == b""

    def test_absent_user_agent_is_empty(self) -> None:
        request = parse_request(b"GET /user-agent HTTP/1.1\r\n\r\n")
        assert request.user_agent == ""
        assert request.headers == {}

    def test_empty_buffer_never_raises(self) -> None:
        request = parse_request(b"")
        assert request.method == ""
        assert request.path == ""
        assert request.path_found is False

    def test_undecodable_bytes_survive(self) -> None:
        request = parse_request(b"GET /echo/\xff\xfe HTTP/1.1\r\n\r\n")
        assert encode_text(request.path) == b"echo/\xff\xfe"

    def test_utf8_path_decodes_to_text(self) -> None:
        request = parse_request("GET /echo/héllo HTTP/1.1\r\n\r\n".encode("utf-8"))
        assert request.path == "echo/héllo"

    def test_non_utf8_user_agent_survives(self) -> None:
        request = parse_request(b"GET /user-agent HTTP/1.1\r\nUser-Agent: agent\xe9\r\n\r\n")
        assert encode_text(request.user_agent) == b"agent\xe9"

    def test_control_bytes_stay_in_path(self) -> None:
        request = parse_request(b"GET /files/a\x00b HTTP/1.1\r\n\r\n")
        assert request.path == "files/a\x00b"


class TestPrintable:
    def test_plain_text_unchanged(self) -> None:
        assert printable("echo/héllo") == "echo/héllo"

    def test_undecodable_bytes_escaped(self) -> None:
        assert printable(decode_text(b"echo/\xff")) == "echo/\\xff"

    def test_control_characters_escaped(self) -> None:
        assert printable("a\x00b\r") == "a\\x00b\\r"
