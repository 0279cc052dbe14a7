from pydantic import BaseModel, PositiveInt


class Post(BaseModel):
    id: PositiveInt
    title: str
    content: str
    created_at: str | None = None
    updated_at: str | None = None
