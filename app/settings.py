from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    debug: bool = False
    app_name: str = "blog-api"
    api_base_path: str = "/"
    aws_region: str = Field(default="eu-central-1", alias="AWS_DEFAULT_REGION")
    deadline_margin_ms: int = 500
    list_workers: int = Field(default=1, ge=1)
    posts_bucket_name: str = Field(alias="POSTS_BUCKET")
    posts_prefix: str = "posts/"
    request_timeout_seconds: float = 10.0
    s3_connect_timeout: float = 2.0
    s3_endpoint_url: str | None = None
    s3_max_attempts: int = 3
    s3_read_timeout: float = 5.0
    stage: str = "dev"
