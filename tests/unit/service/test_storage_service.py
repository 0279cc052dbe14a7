import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from pytest_mock import MockerFixture

from app.exceptions import ObjectNotFoundException, StorageException
from app.services.storage_service import StorageService

OBJECT_BODY = b'{"id": 1, "title": "Hello", "content": "World"}'
OBJECT_KEY = "posts/1.json"


class TestStorageService:
    def test_successfully_put_object(self, s3_client, storage_service: StorageService):
        storage_service.put_object(OBJECT_KEY, OBJECT_BODY)

        response = s3_client.get_object(Bucket=storage_service.bucket, Key=OBJECT_KEY)
        assert response["Body"].read() == OBJECT_BODY
        assert response["ContentType"] == "application/json"

    def test_successfully_get_object(self, put_raw_object, storage_service: StorageService):
        put_raw_object(OBJECT_KEY, OBJECT_BODY)

        assert storage_service.get_object(OBJECT_KEY) == OBJECT_BODY

    def test_fail_to_get_object_due_to_not_found(self, storage_service: StorageService):
        with pytest.raises(ObjectNotFoundException) as exc_info:
            storage_service.get_object("posts/404.json")

        assert exc_info.value.key == "posts/404.json"

    def test_fail_to_get_object_due_to_missing_bucket(self, s3_client):
        storage_service = StorageService(s3_client, "missing-bucket")

        with pytest.raises(StorageException) as exc_info:
            storage_service.get_object(OBJECT_KEY)

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == f"Failed to get object key={OBJECT_KEY}"

    def test_fail_to_get_object_due_to_connection_error(
        self, mocker: MockerFixture, s3_client, storage_service: StorageService
    ):
        mocker.patch.object(
            s3_client,
            "get_object",
            side_effect=EndpointConnectionError(endpoint_url="https://s3.local"),
        )

        with pytest.raises(StorageException):
            storage_service.get_object(OBJECT_KEY)

    def test_successfully_list_keys_by_prefix(
        self, put_raw_object, storage_service: StorageService
    ):
        put_raw_object("posts/1.json", OBJECT_BODY)
        put_raw_object("posts/2.json", OBJECT_BODY)
        put_raw_object("drafts/3.json", OBJECT_BODY)

        assert sorted(storage_service.list_keys("posts/")) == [
            "posts/1.json",
            "posts/2.json",
        ]

    def test_successfully_list_keys_of_empty_bucket(self, storage_service: StorageService):
        assert storage_service.list_keys("posts/") == []

    def test_fail_to_list_keys_due_to_missing_bucket(self, s3_client):
        storage_service = StorageService(s3_client, "missing-bucket")

        with pytest.raises(StorageException):
            storage_service.list_keys("posts/")

    def test_successfully_delete_object(
        self, s3_client, put_raw_object, storage_service: StorageService
    ):
        put_raw_object(OBJECT_KEY, OBJECT_BODY)

        storage_service.delete_object(OBJECT_KEY)

        with pytest.raises(ClientError) as exc_info:
            s3_client.get_object(Bucket=storage_service.bucket, Key=OBJECT_KEY)
        assert exc_info.value.response["Error"]["Code"] == "NoSuchKey"

    def test_successfully_delete_missing_object(self, storage_service: StorageService):
        storage_service.delete_object("posts/404.json")

    def test_fail_to_put_object_due_to_access_denied(
        self, mocker: MockerFixture, s3_client, storage_service: StorageService
    ):
        mocker.patch.object(
            s3_client,
            "put_object",
            side_effect=ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
                "PutObject",
            ),
        )

        with pytest.raises(StorageException) as exc_info:
            storage_service.put_object(OBJECT_KEY, OBJECT_BODY)

        assert exc_info.value.detail == f"Failed to put object key={OBJECT_KEY}"

    def test_successfully_check_object_exists(
        self, put_raw_object, storage_service: StorageService
    ):
        put_raw_object(OBJECT_KEY, OBJECT_BODY)

        assert storage_service.object_exists(OBJECT_KEY) is True
        assert storage_service.object_exists("posts/404.json") is False

    def test_fail_to_check_object_exists_due_to_access_denied(
        self, mocker: MockerFixture, s3_client, storage_service: StorageService
    ):
        mocker.patch.object(
            s3_client,
            "head_object",
            side_effect=ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
                "HeadObject",
            ),
        )

        with pytest.raises(StorageException) as exc_info:
            storage_service.object_exists(OBJECT_KEY)

        assert exc_info.value.detail == f"Failed to check object key={OBJECT_KEY}"
