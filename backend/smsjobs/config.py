from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Job store (PostgREST-compatible, e.g. Supabase)
    job_store_url: str = ""
    job_store_key: str = ""

    # Vision model for photo scoping
    openai_api_key: str = ""
    vision_model: str = "gpt-4o"
    vision_max_tokens: int = 150

    # Ceiling for every upstream call so the gateway always gets a reply
    upstream_timeout_seconds: float = 5.0

    # Session store: "memory" or "redis"
    session_backend: str = "memory"
    redis_url: str = "redis://localhost:6379"
    session_ttl_seconds: int = 10 * 60
    # Background sweep in addition to the per-message sweep (0 disables)
    session_sweep_interval_seconds: int = 0

    # Reply copy
    brand_name: str = "FTW"
    site_url: str = "fairtradeworker.com"

    log_level: str = "INFO"
    metrics_enabled: bool = True

    class Config:
        env_file = ".env"

    @property
    def has_job_store(self) -> bool:
        return bool(self.job_store_url and self.job_store_key)

    @property
    def has_vision_model(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
