from pydantic import BaseModel

from app.models.post import Post


class PostListResponse(BaseModel):
    posts: list[Post]
    total: int

    @classmethod
    def of(cls, posts: list[Post]) -> "PostListResponse":
        return cls(posts=posts, total=len(posts))
