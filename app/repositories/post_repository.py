import re
import threading
from concurrent.futures import ThreadPoolExecutor

from aws_lambda_powertools import Logger
from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from app.deadline import Deadline
from app.exceptions import (ObjectNotFoundException, PostDecodeException,
                            PostNotFoundException, StorageException)
from app.models.post import Post
from app.services.storage_service import StorageService

KEY_SUFFIX = ".json"


class PostRepository:
    """Stores one JSON object per post at ``<prefix><id>.json``."""

    ERROR_POST_NOT_FOUND = "post not found"

    def __init__(
        self, storage: StorageService, prefix: str = "posts/", list_workers: int = 1
    ):
        self._logger = Logger(utc=True)
        self._storage = storage
        self._prefix = prefix
        self._list_workers = max(list_workers, 1)
        self._key_pattern = re.compile(
            rf"^{re.escape(prefix)}([0-9]+){re.escape(KEY_SUFFIX)}$"
        )

    def key_for(self, post_id: int) -> str:
        return f"{self._prefix}{post_id}{KEY_SUFFIX}"

    def create_post(self, post: Post, deadline: Deadline | None = None):
        self._logger.info(f"Creating post id={post.id} title={post.title!r}")
        self._save_post(post, deadline or Deadline.never())

    def delete_post(self, post_id: int, deadline: Deadline | None = None):
        self._logger.info(f"Deleting post id={post_id}")
        (deadline or Deadline.never()).check("delete")
        self._storage.delete_object(self.key_for(post_id))
        self._logger.info(f"Successfully deleted post id={post_id}")

    def get_post(self, post_id: int, deadline: Deadline | None = None) -> Post:
        self._logger.info(f"Getting post id={post_id}")
        (deadline or Deadline.never()).check("get")
        return self._get_post_by_key(self.key_for(post_id))

    def list_post_ids(self, deadline: Deadline | None = None) -> list[int]:
        ids = []
        for key in self._list_post_keys(deadline or Deadline.never()):
            post_id = self._id_from_key(key)
            if post_id:
                ids.append(post_id)
        return ids

    def post_exists(self, post_id: int, deadline: Deadline | None = None) -> bool:
        (deadline or Deadline.never()).check("head")
        return self._storage.object_exists(self.key_for(post_id))

    def list_posts(self, deadline: Deadline | None = None) -> list[Post]:
        deadline = deadline or Deadline.never()
        keys = self._list_post_keys(deadline)
        posts: list[Post] = []
        lock = threading.Lock()
        if self._list_workers == 1 or len(keys) < 2:
            for key in keys:
                self._fetch_into(key, posts, lock, deadline)
        else:
            with ThreadPoolExecutor(max_workers=self._list_workers) as executor:
                futures = [
                    executor.submit(self._fetch_into, key, posts, lock, deadline)
                    for key in keys
                ]
                for future in futures:
                    future.result()
        self._logger.info(f"Successfully listed posts count={len(posts)}")
        return posts

    def update_post(self, post_id: int, post: Post, deadline: Deadline | None = None):
        self._logger.info(f"Updating post id={post_id} title={post.title!r}")
        post.id = post_id
        self._save_post(post, deadline or Deadline.never())

    def _fetch_into(
        self, key: str, posts: list[Post], lock: threading.Lock, deadline: Deadline
    ):
        deadline.check("list fetch")
        try:
            post = self._get_post_by_key(key)
        except (PostDecodeException, PostNotFoundException, StorageException) as error:
            self._logger.error(f"Skipping post {key=}: {error.detail}")
            return
        with lock:
            posts.append(post)

    def _get_post_by_key(self, key: str) -> Post:
        try:
            data = self._storage.get_object(key)
        except ObjectNotFoundException as error:
            raise PostNotFoundException(self.ERROR_POST_NOT_FOUND) from error
        try:
            post = Post.model_validate_json(data)
        except ValidationError as error:
            self._logger.error(f"Failed to decode post {key=}: {error}")
            raise PostDecodeException(f"Failed to decode post {key=}") from error
        if post.id != self._id_from_key(key):
            self._logger.error(f"Post id={post.id} does not match {key=}")
            raise PostDecodeException(f"Post id does not match {key=}")
        return post

    def _id_from_key(self, key: str) -> int | None:
        match = self._key_pattern.match(key)
        if not match:
            return None
        try:
            post_id = int(match.group(1))
        except ValueError:
            return None
        return post_id if post_id > 0 else None

    def _list_post_keys(self, deadline: Deadline) -> list[str]:
        self._logger.info(f"Listing posts with prefix={self._prefix}")
        deadline.check("list")
        return [
            key
            for key in self._storage.list_keys(self._prefix)
            if key.endswith(KEY_SUFFIX)
        ]

    def _save_post(self, post: Post, deadline: Deadline):
        try:
            data = post.model_dump_json().encode("utf-8")
        except PydanticSerializationError as error:
            self._logger.exception(f"Failed to marshal post id={post.id}")
            raise StorageException("failed to marshal post") from error
        deadline.check("put")
        self._storage.put_object(self.key_for(post.id), data)
        self._logger.info(f"Successfully saved post key={self.key_for(post.id)}")
