from pydantic import BaseModel, Field


class IncomingRequest(BaseModel):
    method: str
    path: str
    body: str = ""
    headers: dict[str, str] = Field(default_factory=dict)


class OutgoingResponse(BaseModel):
    status_code: int
    body: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
