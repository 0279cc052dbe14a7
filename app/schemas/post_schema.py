from pydantic import BaseModel, ConfigDict, field_validator


class PostRequest(BaseModel):
    title: str
    content: str

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value
