from scoreline.config.settings import settings

__all__ = ["settings"]
