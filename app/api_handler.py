import uuid
from functools import lru_cache
from typing import Callable

import boto3
import uvicorn
from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.logging.logger import set_package_logger
from aws_lambda_powertools.metrics import MetricUnit
from botocore.config import Config
from fastapi import FastAPI, Request, status
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import Response
from mangum import Mangum
from mypy_boto3_s3.client import S3Client
from starlette.concurrency import run_in_threadpool

from app import settings
from app.api import responses
from app.api.dispatcher import ERROR_INVALID_BODY, PostDispatcher
from app.deadline import Deadline
from app.middlewares import CorrelationIdMiddleware
from app.models.envelope import IncomingRequest, OutgoingResponse
from app.repositories.post_repository import PostRepository
from app.services.post_service import PostService
from app.services.storage_service import StorageService
from app.settings import Settings

GATEWAY_METHODS = ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"]

if settings.debug:
    set_package_logger()

logger = Logger(utc=True)
metrics = Metrics(namespace=settings.app_name, service=settings.app_name)
metrics.set_default_dimensions(environment=settings.stage)
tracer = Tracer()


def create_s3_client(config: Settings) -> S3Client:
    return boto3.session.Session().client(
        "s3",
        region_name=config.aws_region,
        endpoint_url=config.s3_endpoint_url,
        config=Config(
            connect_timeout=config.s3_connect_timeout,
            read_timeout=config.s3_read_timeout,
            retries={"max_attempts": config.s3_max_attempts, "mode": "standard"},
        ),
    )


def build_dispatcher(config: Settings, client: S3Client | None = None) -> PostDispatcher:
    storage = StorageService(client or create_s3_client(config), config.posts_bucket_name)
    repository = PostRepository(storage, config.posts_prefix, config.list_workers)
    return PostDispatcher(PostService(repository), debug=config.debug)


@lru_cache(maxsize=1)
def get_dispatcher() -> PostDispatcher:
    logger.info(f"Initializing dispatcher for bucket={settings.posts_bucket_name}")
    return build_dispatcher(settings)


def request_deadline(request: Request) -> Deadline:
    aws_context = request.scope.get("aws.context")
    if aws_context:
        return Deadline.from_lambda_context(aws_context, settings.deadline_margin_ms)
    return Deadline(settings.request_timeout_seconds)


def to_response(outgoing: OutgoingResponse) -> Response:
    return Response(
        content=outgoing.body,
        status_code=outgoing.status_code,
        headers=outgoing.headers,
    )


def create_app(
    dispatcher_provider: Callable[[], PostDispatcher] = get_dispatcher,
) -> FastAPI:
    app = FastAPI(debug=settings.debug, title="BlogApi", version="1.0.0")
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(GZipMiddleware)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, error: Exception) -> Response:
        error_id = uuid.uuid4()
        logger.exception(f"Received unexpected error {error_id=}")
        metrics.add_metric(name="UnexpectedErrorHandler", unit=MetricUnit.Count, value=1)
        return Response(
            content=responses.FALLBACK_BODY,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            media_type=responses.CONTENT_TYPE_JSON,
        )

    @app.api_route("/{path:path}", methods=GATEWAY_METHODS, include_in_schema=False)
    async def gateway(request: Request) -> Response:
        try:
            body = (await request.body()).decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Request body is not valid UTF-8")
            return to_response(
                responses.error(status.HTTP_400_BAD_REQUEST, ERROR_INVALID_BODY)
            )
        incoming = IncomingRequest(
            method=request.method,
            path=request.url.path,
            body=body,
            headers=dict(request.headers),
        )
        outgoing = await run_in_threadpool(
            dispatcher_provider().dispatch, incoming, request_deadline(request)
        )
        return to_response(outgoing)

    return app


app = create_app()

handler = Mangum(app, api_gateway_base_path=settings.api_base_path)
handler.__name__ = "handler"
handler = tracer.capture_lambda_handler(handler)
handler = logger.inject_lambda_context(handler, clear_state=True, log_event=True)
handler = metrics.log_metrics(handler, capture_cold_start_metric=True)


if __name__ == "__main__":
    uvicorn.run("app.api_handler:app", host="localhost", port=8080, reload=True)
