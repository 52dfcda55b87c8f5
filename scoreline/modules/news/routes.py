from fastapi import APIRouter, Depends
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.news.schemas import NewsItemResponse
from scoreline.modules.news.service import NewsService, DEFAULT_NEWS_LIMIT
from supabase import Client
from typing import List

router = APIRouter(prefix="/news", tags=["news"])


def get_news_service(supabase: Client = Depends(get_supabase)) -> NewsService:
    return NewsService(supabase)


@router.get("", response_model=List[NewsItemResponse])
async def list_news(
    limit: int = DEFAULT_NEWS_LIMIT,
    service: NewsService = Depends(get_news_service)
):
    """Latest announcements (public)"""
    return service.list_news(limit)
