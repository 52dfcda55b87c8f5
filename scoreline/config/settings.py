from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Used by seed scripts that bypass RLS
    supabase_max_rows: int = 1000  # PostgREST db-max-rows; bulk reads page by this size

    # Postgres connection string, only used to apply sql/schema.sql
    database_url: Optional[str] = None

    # Auth
    jwt_secret: str = "dev_secret"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24
    bcrypt_rounds: int = 10
    password_min_length: int = 6
    password_reset_ttl_minutes: int = 60

    # Email (Brevo transactional API)
    brevo_api_key: Optional[str] = None
    brevo_sender_email: str = "no-reply@scoreline.local"
    brevo_sender_name: str = "Scoreline"
    frontend_url: str = "http://localhost:3000"

    # football-data.org fixture import
    football_data_api_key: Optional[str] = None
    football_data_base_url: str = "https://api.football-data.org/v4"

    # App
    app_name: str = "scoreline-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True
    display_timezone: str = "UTC"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
