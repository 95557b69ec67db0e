"""Tests for canned response serialization."""

import pytest

from petrel import responses


class TestStatusResponses:
    @pytest.mark.parametrize(
        ("builder", "expected"),
        [
            (responses.root_response, b"HTTP/1.1 200 OK\r\n\r\n"),
            (responses.created_response, b"HTTP/1.1 201 Created\r\n\r\n"),
            (responses.bad_request_response, b"HTTP/1.1 400 Bad Request\r\n\r\n"),
            (responses.not_found_response, b"HTTP/1.1 404 Not Found\r\n\r\n"),
            (responses.uri_too_long_response, b"HTTP/1.1 414 URI Too Long\r\n\r\n"),
            (responses.server_error_response, b"HTTP/1.1 500 Internal Server Error\r\n\r\n"),
            (responses.not_implemented_response, b"HTTP/1.1 501 Not Implemented\r\n\r\n"),
        ],
    )
    def test_bare_status_line(self, builder, expected: bytes) -> None:
        assert builder() == expected


class TestBodyResponses:
    def test_echo(self) -> None:
        assert responses.echo_response("echo/abc") == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_echo_of_nothing(self) -> None:
        assert responses.echo_response("echo/").endswith(b"Content-Length: 0\r\n\r\n")

    def test_content_length_counts_bytes(self) -> None:
        out = responses.text_response("héllo")
        assert b"Content-Length: 6\r\n" in out
        assert out.endswith("héllo".encode("utf-8"))

    def test_user_agent(self) -> None:
        out = responses.user_agent_response("curl/8.4.0")
        assert out.startswith(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n")
        assert out.endswith(b"\r\n\r\ncurl/8.4.0")

    def test_file_defaults_to_octet_stream(self) -> None:
        out = responses.file_response(b"\x00\x01")
        assert b"Content-Type: application/octet-stream\r\n" in out
        assert b"Content-Length: 2\r\n" in out
        assert out.endswith(b"\r\n\r\n\x00\x01")

    def test_file_with_content_type(self) -> None:
        out = responses.file_response(b"{}", "application/json")
        assert b"Content-Type: application/json\r\n" in out
