import re
from typing import Callable

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from app.api import responses
from app.deadline import Deadline
from app.exceptions import (InvalidRequestException, PostApiException,
                            RouteNotFoundException)
from app.models.envelope import IncomingRequest, OutgoingResponse
from app.schemas.post_schema import PostRequest
from app.services.post_service import PostService

POSTS_PATH = "/posts"
POSTS_PREFIX = "/posts/"

ERROR_INTERNAL = "internal server error"
ERROR_INVALID_BODY = "invalid request body"
ERROR_INVALID_FIELDS = "title and content are required"
ERROR_INVALID_ID = "invalid post ID"
ERROR_ROUTE_NOT_FOUND = "route not found"

MALFORMED_BODY_ERROR_TYPES = ("json_invalid", "json_type", "model_type")

_ID_PATTERN = re.compile(r"[0-9]+")

Handler = Callable[[IncomingRequest, str, Deadline], OutgoingResponse]


def parse_post_id(segment: str) -> int:
    if not _ID_PATTERN.fullmatch(segment):
        raise InvalidRequestException(ERROR_INVALID_ID)
    try:
        post_id = int(segment)
    except ValueError as error:
        # digit strings past the interpreter's int conversion limit
        raise InvalidRequestException(ERROR_INVALID_ID) from error
    if post_id < 1:
        raise InvalidRequestException(ERROR_INVALID_ID)
    return post_id


def parse_post_request(body: str) -> PostRequest:
    try:
        return PostRequest.model_validate_json(body or "")
    except ValidationError as error:
        if any(e["type"] in MALFORMED_BODY_ERROR_TYPES for e in error.errors()):
            raise InvalidRequestException(ERROR_INVALID_BODY) from error
        raise InvalidRequestException(ERROR_INVALID_FIELDS) from error


class PostDispatcher:
    """Maps ``(method, path, body)`` onto exactly one post operation.

    Exact paths are matched before the ``/posts/`` prefix; whatever follows
    the prefix is taken as the post id segment. Every ``PostApiException``
    raised below is turned into a ``{"error": ...}`` response here.
    """

    def __init__(self, post_service: PostService, debug: bool = False):
        self._logger = Logger(utc=True)
        self._post_service = post_service
        self._debug = debug
        self._exact_routes: dict[tuple[str, str], Handler] = {
            ("GET", POSTS_PATH): self._get_posts,
            ("POST", POSTS_PATH): self._create_post,
        }
        self._prefix_routes: list[tuple[str, str, Handler]] = [
            ("GET", POSTS_PREFIX, self._get_post),
            ("PUT", POSTS_PREFIX, self._update_post),
            ("DELETE", POSTS_PREFIX, self._delete_post),
        ]

    def dispatch(
        self, request: IncomingRequest, deadline: Deadline | None = None
    ) -> OutgoingResponse:
        method = request.method.upper()
        self._logger.info(f"Dispatching request {method=} path={request.path}")
        try:
            handler, segment = self._match(method, request.path)
            return handler(request, segment, deadline or Deadline.never())
        except PostApiException as error:
            return self._error_response(error)

    def _match(self, method: str, path: str) -> tuple[Handler, str]:
        handler = self._exact_routes.get((method, path))
        if handler:
            return handler, ""
        for route_method, prefix, handler in self._prefix_routes:
            if route_method == method and path.startswith(prefix):
                return handler, path[len(prefix):]
        self._logger.warning(f"No route for {method=} {path=}")
        raise RouteNotFoundException(ERROR_ROUTE_NOT_FOUND)

    def _error_response(self, error: PostApiException) -> OutgoingResponse:
        if error.status_code >= 500:
            self._logger.error(
                f"Request failed status_code={error.status_code} detail={error.detail}"
            )
            message = str(error.detail) if self._debug else ERROR_INTERNAL
        else:
            self._logger.warning(
                f"Request rejected status_code={error.status_code} detail={error.detail}"
            )
            message = str(error.detail)
        return responses.error(error.status_code, message)

    def _create_post(
        self, request: IncomingRequest, segment: str, deadline: Deadline
    ) -> OutgoingResponse:
        post_request = parse_post_request(request.body)
        return responses.created(self._post_service.create_post(post_request, deadline))

    def _delete_post(
        self, request: IncomingRequest, segment: str, deadline: Deadline
    ) -> OutgoingResponse:
        self._post_service.delete_post(parse_post_id(segment), deadline)
        return responses.no_content()

    def _get_post(
        self, request: IncomingRequest, segment: str, deadline: Deadline
    ) -> OutgoingResponse:
        post_id = parse_post_id(segment)
        return responses.success(self._post_service.get_post(post_id, deadline))

    def _get_posts(
        self, request: IncomingRequest, segment: str, deadline: Deadline
    ) -> OutgoingResponse:
        return responses.success(self._post_service.get_posts(deadline))

    def _update_post(
        self, request: IncomingRequest, segment: str, deadline: Deadline
    ) -> OutgoingResponse:
        post_id = parse_post_id(segment)
        post_request = parse_post_request(request.body)
        return responses.success(
            self._post_service.update_post(post_id, post_request, deadline)
        )
