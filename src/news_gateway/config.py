from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    guardian_api_key: str | None = None
    guardian_base_url: str = "https://content.guardianapis.com"
    request_timeout_seconds: float = 10.0
    # Hosts whose article URLs map onto Guardian content ids
    guardian_web_hosts: str = "www.theguardian.com,theguardian.com"

    # Guardian free tier allows 500 calls per day
    daily_request_limit: int = 500
    default_page_size: int = 20
    max_page_size: int = 50

    category_cache_ttl_seconds: float = 900.0
    search_cache_ttl_seconds: float = 900.0
    article_cache_ttl_seconds: float = 1800.0
    cache_sweep_interval_seconds: float = 300.0

    # Comma-separated; empty means no allow-list is configured
    admin_emails: str = ""
    admin_allow_when_unconfigured: bool = True
    default_categories: str = "general,technology"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def admin_email_list(self) -> List[str]:
        return _split_csv(self.admin_emails)

    @property
    def guardian_web_host_list(self) -> List[str]:
        return _split_csv(self.guardian_web_hosts)

    @property
    def default_category_list(self) -> List[str]:
        return _split_csv(self.default_categories)


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


settings = Settings()
