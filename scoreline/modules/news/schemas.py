from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class NewsItemCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("News item content cannot be empty.")
        return v


class NewsAuthor(BaseModel):
    name: str


class NewsItemResponse(BaseModel):
    news_item_id: int
    content: str
    created_at: Optional[datetime] = None
    posted_by: Optional[NewsAuthor] = None
