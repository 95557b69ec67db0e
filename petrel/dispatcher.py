"""
petrel/dispatcher.py — Routing from (method, path prefix) to a canned response.
"""

import logging
from enum import Enum
from typing import Callable, NamedTuple, Optional

from petrel import responses
from petrel.content_types import content_type_for
from petrel.filestore import FileStore, is_servable
from petrel.parser import ParsedRequest, parse_request

ECHO_PREFIX = "echo/"
USER_AGENT_PREFIX = "user-agent"
FILES_PREFIX = "files/"

log = logging.getLogger("petrel")


class RouteKind(Enum):
    ROOT = "root"
    ECHO = "echo"
    USER_AGENT = "user-agent"
    DIRECTORY_FILE = "directory file"
    GENERIC_FILE = "generic file"
    STORE_FILE = "store file"
    NOT_FOUND = "not found"
    NOT_IMPLEMENTED = "not implemented"
    BAD_REQUEST = "bad request"


class Dispatch(NamedTuple):
    """What the dispatcher decided and sent for one request."""
    request: ParsedRequest
    kind: Optional[RouteKind]
    status_code: int
    response: bytes


def route(
    request: ParsedRequest,
    is_file: Callable[[str], bool] = is_servable,
) -> RouteKind:
    """
    Select exactly one RouteKind.  *is_file* decides whether a GET path that
    matches no prefix names a servable file under the working directory.
    """
    method, path = request.method, request.path
    if method not in ("GET", "POST"):
        return RouteKind.NOT_IMPLEMENTED
    if not request.path_found:
        return RouteKind.BAD_REQUEST

    if method == "GET":
        if path == "":
            return RouteKind.ROOT
        if path.startswith(ECHO_PREFIX):
            return RouteKind.ECHO
        if path.startswith(USER_AGENT_PREFIX):
            return RouteKind.USER_AGENT
        if path.startswith(FILES_PREFIX):
            return RouteKind.DIRECTORY_FILE
        if is_file(path):
            return RouteKind.GENERIC_FILE
        return RouteKind.NOT_FOUND

    if path.startswith(FILES_PREFIX):
        return RouteKind.STORE_FILE
    return RouteKind.NOT_IMPLEMENTED


class Dispatcher:
    """
    Turns raw request bytes into response bytes.
    Attributes:
        store: FileStore rooted at the configured directory
    """

    def __init__(self, store: FileStore):
        self.store = store
        self._handlers = {
            RouteKind.ROOT: self._root,
            RouteKind.ECHO: self._echo,
            RouteKind.USER_AGENT: self._user_agent,
            RouteKind.DIRECTORY_FILE: self._directory_file,
            RouteKind.GENERIC_FILE: self._generic_file,
            RouteKind.STORE_FILE: self._store_file,
            RouteKind.NOT_FOUND: self._not_found,
            RouteKind.NOT_IMPLEMENTED: self._not_implemented,
            RouteKind.BAD_REQUEST: self._bad_request,
        }

    def dispatch(self, raw: bytes, overflow: bool = False) -> Dispatch:
        """
        Parse and answer one request.  An *overflow* receive is answered
        414 without routing.
        """
        request = parse_request(raw)
        if overflow:
            return Dispatch(request, None, 414, responses.uri_too_long_response())

        kind = route(request, self.store.exists)
        status_code, response = self._handlers[kind](request)
        return Dispatch(request, kind, status_code, response)

    def __call__(self, raw: bytes, overflow: bool = False) -> bytes:
        return self.dispatch(raw, overflow).response

    # ── Handlers: each returns (status code, response bytes) ──

    def _root(self, request: ParsedRequest):
        return 200, responses.root_response()

    def _echo(self, request: ParsedRequest):
        return 200, responses.echo_response(request.path, ECHO_PREFIX)

    def _user_agent(self, request: ParsedRequest):
        return 200, responses.user_agent_response(request.user_agent)

    def _directory_file(self, request: ParsedRequest):
        result = self.store.fetch_stored(request.path)
        if not result.ok:
            log.debug("File %s unavailable: %s", result.path, result.outcome.value)
            return 404, responses.not_found_response()
        return 200, responses.file_response(result.data)

    def _generic_file(self, request: ParsedRequest):
        result = self.store.fetch(request.path)
        if not result.ok:
            return 404, responses.not_found_response()
        return 200, responses.file_response(result.data, content_type_for(request.path))

    def _store_file(self, request: ParsedRequest):
        result = self.store.store(request.path, request.body)
        if not result.ok:
            log.error(
                "Error saving file %s (%s): %s",
                result.path, result.outcome.value, result.error,
            )
            return 500, responses.server_error_response()
        log.info("File saved: %s", result.path)
        return 201, responses.created_response()

    def _not_found(self, request: ParsedRequest):
        return 404, responses.not_found_response()

    def _not_implemented(self, request: ParsedRequest):
        return 501, responses.not_implemented_response()

    def _bad_request(self, request: ParsedRequest):
        return 400, responses.bad_request_response()
