from typing import Any

import ujson
from aws_lambda_powertools import Logger
from fastapi import status
from fastapi.encoders import jsonable_encoder

from app.models.envelope import OutgoingResponse

CONTENT_TYPE_JSON = "application/json"
FALLBACK_BODY = '{"error":"internal server error"}'

logger = Logger(utc=True)


def _json_response(status_code: int, data: Any) -> OutgoingResponse:
    try:
        body = ujson.dumps(
            jsonable_encoder(data), ensure_ascii=False, escape_forward_slashes=False
        )
    except (OverflowError, TypeError, ValueError):
        logger.exception(f"Failed to serialize response body for {status_code=}")
        status_code, body = status.HTTP_500_INTERNAL_SERVER_ERROR, FALLBACK_BODY
    return OutgoingResponse(
        status_code=status_code,
        body=body,
        headers={"Content-Type": CONTENT_TYPE_JSON},
    )


def success(data: Any) -> OutgoingResponse:
    return _json_response(status.HTTP_200_OK, data)


def created(data: Any) -> OutgoingResponse:
    return _json_response(status.HTTP_201_CREATED, data)


def no_content() -> OutgoingResponse:
    return OutgoingResponse(status_code=status.HTTP_204_NO_CONTENT)


def error(status_code: int, message: str) -> OutgoingResponse:
    return _json_response(status_code, {"error": message})
