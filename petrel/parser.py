"""
petrel/parser.py — Marker-based request tokenizer.
Extracts the method, path, User-Agent header and body from the raw bytes of
a single receive.  This is deliberately narrow: it is not a general header
parser, and every lookup reports whether its markers were present.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

CRLF = "\r\n"
HEADER_END = b"\r\n\r\n"
PATH_MARKER = " /"
USER_AGENT_MARKER = CRLF + "User-Agent: "
USER_AGENT = "User-Agent"

# Bytes that are not valid UTF-8 survive decoding as lone surrogates and are
# restored by encode_text(), the same mapping os uses for file names.
ENCODING = "utf-8"
ERRORS = "surrogateescape"


def decode_text(raw: bytes) -> str:
    return raw.decode(ENCODING, errors=ERRORS)


def encode_text(text: str) -> bytes:
    return text.encode(ENCODING, errors=ERRORS)


def printable(text: str) -> str:
    """*text* with undecodable bytes and control characters escaped, for logs."""
    escaped = encode_text(text).decode(ENCODING, errors="backslashreplace")
    return "".join(
        c if c.isprintable() else c.encode("unicode_escape").decode("ascii")
        for c in escaped
    )


class Token(NamedTuple):
    """Outcome of one marker search: *value* is "" whenever *found* is False."""
    found: bool
    value: str = ""


MISSING = Token(False)


def find_between(text: str, start: str, end: str) -> Token:
    """
    Return the text between the first *start* and the next *end* after it.
    An empty *start* anchors at the beginning of *text*.
    """
    begin = text.find(start)
    if begin < 0:
        return MISSING
    begin += len(start)
    stop = text.find(end, begin)
    if stop < 0:
        return MISSING
    return Token(True, text[begin:stop])


def get_method(text: str) -> Token:
    """Everything before the first space."""
    return find_between(text, "", " ")


def get_path(text: str) -> Token:
    """The request target between " /" and the next space, without its slash."""
    return find_between(text, PATH_MARKER, " ")


def get_user_agent(text: str) -> Token:
    return find_between(text, USER_AGENT_MARKER, CRLF)


def get_body(raw: bytes) -> bytes:
    """Bytes after the first blank line; empty when there is none."""
    index = raw.find(HEADER_END)
    if index < 0:
        return b""
    return raw[index + len(HEADER_END):]


@dataclass(frozen=True)
class ParsedRequest:
    """
    One request as seen by the dispatcher.
    Attributes:
        method: Request method ("" when the buffer has no space at all)
        path: Target without the leading slash
        path_found: False when the request line had no " /" marker
        headers: Only the headers that were found (User-Agent)
        body: Raw bytes after the header block
    """
    method: str
    path: str
    path_found: bool = True
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def user_agent(self) -> str:
        return self.headers.get(USER_AGENT, "")


def parse_request(raw: bytes) -> ParsedRequest:
    """Build a ParsedRequest from raw bytes.  Never raises."""
    text = decode_text(raw)
    method = get_method(text)
    path = get_path(text)
    headers = {}
    user_agent = get_user_agent(text)
    if user_agent.found:
        headers[USER_AGENT] = user_agent.value
    return ParsedRequest(
        method=method.value,
        path=path.value,
        path_found=path.found,
        headers=headers,
        body=get_body(raw),
    )
