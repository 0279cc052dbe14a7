from typing import Any

from fastapi import HTTPException, status


class PostApiException(HTTPException):
    pass


class InvalidRequestException(PostApiException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail=detail)


class PostNotFoundException(PostApiException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail=detail)


class RouteNotFoundException(PostApiException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail=detail)


class StorageException(PostApiException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class DeadlineExceededException(StorageException):
    pass


class PostDecodeException(PostApiException):
    def __init__(self, detail: Any = None) -> None:
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class ObjectNotFoundException(Exception):
    def __init__(self, key: str) -> None:
        super().__init__(f"Object key={key} not found")
        self.key = key
