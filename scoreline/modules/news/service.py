import logging
from typing import Any, Dict, List

from fastapi import HTTPException
from supabase import Client

from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.news.schemas import NewsItemCreate, NewsItemResponse, NewsAuthor

logger = logging.getLogger(__name__)

DEFAULT_NEWS_LIMIT = 5


class NewsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _with_authors(self, items: List[Dict[str, Any]]) -> List[NewsItemResponse]:
        author_ids = list({i["posted_by_user_id"] for i in items if i.get("posted_by_user_id")})
        authors = {}
        if author_ids:
            result = self.supabase.table("users")\
                .select("user_id, name")\
                .in_("user_id", author_ids)\
                .execute()
            authors = {row["user_id"]: NewsAuthor(name=row["name"]) for row in result.data or []}
        return [
            NewsItemResponse(
                news_item_id=item["news_item_id"],
                content=item["content"],
                created_at=item.get("created_at"),
                posted_by=authors.get(item.get("posted_by_user_id")),
            )
            for item in items
        ]

    def list_news(self, limit: int = DEFAULT_NEWS_LIMIT) -> List[NewsItemResponse]:
        """Latest news items, newest first"""
        if limit <= 0:
            limit = DEFAULT_NEWS_LIMIT
        result = self.supabase.table("news_items")\
            .select("*")\
            .order("created_at", desc=True)\
            .order("news_item_id", desc=True)\
            .limit(limit)\
            .execute()
        return self._with_authors(result.data or [])

    def create_news_item(self, news_data: NewsItemCreate, user_id: int) -> NewsItemResponse:
        result = self.supabase.table("news_items").insert({
            "content": news_data.content,
            "posted_by_user_id": user_id,
        }).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create news item")
        logger.info(f"News item {result.data[0]['news_item_id']} posted by user {user_id}")
        return self._with_authors(result.data)[0]

    def delete_news_item(self, news_item_id: int) -> MessageResponse:
        existing = self.supabase.table("news_items")\
            .select("news_item_id")\
            .eq("news_item_id", news_item_id)\
            .limit(1)\
            .execute()
        if not existing.data:
            raise HTTPException(status_code=404, detail="News item not found.")
        self.supabase.table("news_items").delete().eq("news_item_id", news_item_id).execute()
        return MessageResponse(message="News item deleted successfully.")
