from datetime import datetime

from pydantic import BaseModel, Field


class BookRequest(BaseModel):
    """创建 / 更新共用；必填校验在 book_service 中进行"""

    title: str | None = Field(None, examples=["Dune"])
    author: str | None = Field(None, examples=["Frank Herbert"])
    year: int | None = Field(None, examples=[1965])


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    year: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookWithOwnerResponse(BaseModel):
    id: int
    title: str
    author: str
    year: int
    created_at: datetime
    updated_at: datetime
    owner_id: int
    owner_username: str


class BookMessageResponse(BaseModel):
    message: str
    book: BookResponse
