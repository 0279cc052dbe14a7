import boto3
import pendulum
import pytest
from moto import mock_aws

from app.api.dispatcher import PostDispatcher
from app.models.post import Post
from app.repositories.post_repository import PostRepository
from app.services.post_service import PostService
from app.services.storage_service import StorageService
from app.settings import Settings


def pytest_configure():
    pytest.aws_default_region = "eu-central-1"


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def s3_client(settings: Settings):
    with mock_aws():
        yield boto3.session.Session().client("s3", region_name=settings.aws_region)


@pytest.fixture
def posts_bucket(s3_client, settings: Settings) -> str:
    s3_client.create_bucket(
        Bucket=settings.posts_bucket_name,
        CreateBucketConfiguration={"LocationConstraint": pytest.aws_default_region},
    )
    return settings.posts_bucket_name


@pytest.fixture
def storage_service(s3_client, posts_bucket: str) -> StorageService:
    return StorageService(s3_client, posts_bucket)


@pytest.fixture
def post_repository(storage_service: StorageService) -> PostRepository:
    return PostRepository(storage_service)


@pytest.fixture
def post_service(post_repository: PostRepository) -> PostService:
    return PostService(post_repository)


@pytest.fixture
def dispatcher(post_service: PostService) -> PostDispatcher:
    return PostDispatcher(post_service)


@pytest.fixture
def make_post(faker):
    def make(post_id: int) -> Post:
        now = pendulum.now("UTC").to_iso8601_string()
        return Post(
            id=post_id,
            title=faker.sentence(),
            content=faker.text(),
            created_at=now,
            updated_at=now,
        )

    return make


@pytest.fixture
def put_raw_object(s3_client, posts_bucket: str):
    def put(key: str, body: bytes):
        s3_client.put_object(
            Bucket=posts_bucket, Key=key, Body=body, ContentType="application/json"
        )

    return put


@pytest.fixture
def posts(make_post, put_raw_object) -> list[Post]:
    posts = [make_post(post_id) for post_id in range(1, 6)]
    for post in posts:
        put_raw_object(f"posts/{post.id}.json", post.model_dump_json().encode("utf-8"))
    return posts
