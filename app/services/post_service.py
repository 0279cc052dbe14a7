import pendulum
from aws_lambda_powertools import Logger

from app.deadline import Deadline
from app.exceptions import PostNotFoundException
from app.models.post import Post
from app.models.response import PostListResponse
from app.repositories.post_repository import PostRepository
from app.schemas.post_schema import PostRequest


def _now() -> str:
    return pendulum.now("UTC").to_iso8601_string()


class PostService:
    def __init__(self, repository: PostRepository):
        self._logger = Logger(utc=True)
        self._repo = repository

    def create_post(self, request: PostRequest, deadline: Deadline | None = None) -> Post:
        # max + 1 is not safe under concurrent creates; two requests may pick the same id
        post_id = max(self._repo.list_post_ids(deadline), default=0) + 1
        now = _now()
        post = Post(
            id=post_id,
            title=request.title,
            content=request.content,
            created_at=now,
            updated_at=now,
        )
        self._repo.create_post(post, deadline)
        self._logger.info(f"Post created: {post_id=}")
        return post

    def delete_post(self, post_id: int, deadline: Deadline | None = None):
        if not self._repo.post_exists(post_id, deadline):
            self._logger.warning(f"Post not found: {post_id=}")
            raise PostNotFoundException(PostRepository.ERROR_POST_NOT_FOUND)
        self._repo.delete_post(post_id, deadline)
        self._logger.info(f"Post deleted: {post_id=}")

    def get_post(self, post_id: int, deadline: Deadline | None = None) -> Post:
        return self._repo.get_post(post_id, deadline)

    def get_posts(self, deadline: Deadline | None = None) -> PostListResponse:
        return PostListResponse.of(self._repo.list_posts(deadline))

    def update_post(
        self, post_id: int, request: PostRequest, deadline: Deadline | None = None
    ) -> Post:
        post = self._repo.get_post(post_id, deadline)
        post = post.model_copy(
            update={
                "title": request.title,
                "content": request.content,
                "updated_at": _now(),
            }
        )
        self._repo.update_post(post_id, post, deadline)
        self._logger.info(f"Post updated: {post_id=}")
        return post
