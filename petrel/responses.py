"""
petrel/responses.py — Canned HTTP/1.1 responses.
Every response is a status line, an optional header block, a blank line
and an optional body.  Error responses carry no headers and no body.
"""

from typing import Optional

from petrel.content_types import DEFAULT_CONTENT_TYPE
from petrel.parser import encode_text

CRLF = "\r\n"
TEXT_PLAIN = "text/plain"

STATUS_PHRASES = {
    200: "OK",
    201: "Created",
    400: "Bad Request",
    404: "Not Found",
    414: "URI Too Long",
    500: "Internal Server Error",
    501: "Not Implemented",
}


def status_line(status_code: int) -> str:
    return f"HTTP/1.1 {status_code} {STATUS_PHRASES[status_code]}{CRLF}"


def build_response(
    status_code: int,
    body: bytes = b"",
    content_type: Optional[str] = None,
) -> bytes:
    """
    Serialize a response.  Content-Type and Content-Length are only written
    when *content_type* is given; Content-Length is the byte length of *body*.
    """
    head = status_line(status_code)
    if content_type is not None:
        head += f"Content-Type: {content_type}{CRLF}"
        head += f"Content-Length: {len(body)}{CRLF}"
    return (head + CRLF).encode("utf-8") + body


def status_response(status_code: int) -> bytes:
    """Bare status line and blank line."""
    return build_response(status_code)


def root_response() -> bytes:
    return status_response(200)


def text_response(text: str) -> bytes:
    return build_response(200, encode_text(text), TEXT_PLAIN)


def echo_response(path: str, prefix: str = "echo/") -> bytes:
    """Body is the path after the echo prefix, exactly as received."""
    return text_response(path[len(prefix):])


def user_agent_response(user_agent: str) -> bytes:
    return text_response(user_agent)


def file_response(data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> bytes:
    return build_response(200, data, content_type)


def created_response() -> bytes:
    return status_response(201)


def bad_request_response() -> bytes:
    return status_response(400)


def not_found_response() -> bytes:
    return status_response(404)


def uri_too_long_response() -> bytes:
    return status_response(414)


def server_error_response() -> bytes:
    return status_response(500)


def not_implemented_response() -> bytes:
    return status_response(501)
