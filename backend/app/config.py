from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Database (PostgreSQL in production, SQLite for local runs)
    database_url: str = "sqlite+aiosqlite:///./blog.db"
    database_echo: bool = False

    # Redis Configuration
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 3600
    enable_cache: bool = True

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # CORS Configuration
    frontend_url: str = "http://localhost:5173"
    cors_origins: Optional[str] = None  # Defaults to frontend_url

    # Authentication
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7
    cookie_name: str = "access_token"
    cookie_secure: bool = False

    # Content rules
    category_request_min_length: int = 3
    related_blogs_limit: int = 5
    report_top_blogs: int = 5

    @property
    def cors_origins_list(self) -> List[str]:
        if not self.cors_origins:
            return [self.frontend_url]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
