from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_s3.client import S3Client

from app.exceptions import ObjectNotFoundException, StorageException

CONTENT_TYPE_JSON = "application/json"
NOT_FOUND_ERROR_CODES = ("404", "NoSuchKey")


class StorageService:
    """Raw object access to a single S3 bucket.

    Translates botocore failures into ``ObjectNotFoundException`` for missing
    keys and ``StorageException`` for everything else, so callers never have
    to inspect S3 error codes.
    """

    def __init__(self, client: S3Client, bucket: str):
        self._logger = Logger(utc=True)
        self._client = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def delete_object(self, key: str) -> None:
        self._logger.info(f"Deleting object key={key} from bucket={self._bucket}")
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as error:
            raise self._storage_error(f"Failed to delete object key={key}") from error

    def get_object(self, key: str) -> bytes:
        self._logger.info(f"Fetching object key={key} from bucket={self._bucket}")
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as error:
            if error.response.get("Error", {}).get("Code") in NOT_FOUND_ERROR_CODES:
                self._logger.warning(
                    f"Object key={key} not found in bucket={self._bucket}"
                )
                raise ObjectNotFoundException(key) from error
            raise self._storage_error(f"Failed to get object key={key}") from error
        except BotoCoreError as error:
            raise self._storage_error(f"Failed to get object key={key}") from error

    def object_exists(self, key: str) -> bool:
        self._logger.info(f"Checking object key={key} in bucket={self._bucket}")
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as error:
            if error.response.get("Error", {}).get("Code") in NOT_FOUND_ERROR_CODES:
                return False
            raise self._storage_error(f"Failed to check object key={key}") from error
        except BotoCoreError as error:
            raise self._storage_error(f"Failed to check object key={key}") from error
        return True

    def list_keys(self, prefix: str) -> list[str]:
        self._logger.info(f"Listing objects with {prefix=} in bucket={self._bucket}")
        keys = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as error:
            raise self._storage_error(f"Failed to list objects {prefix=}") from error
        return keys

    def put_object(
        self, key: str, data: bytes, content_type: str = CONTENT_TYPE_JSON
    ) -> None:
        self._logger.info(f"Uploading object key={key} to bucket={self._bucket}")
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=data, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as error:
            raise self._storage_error(f"Failed to put object key={key}") from error

    def _storage_error(self, message: str) -> StorageException:
        self._logger.exception(f"{message} in bucket={self._bucket}")
        return StorageException(message)
