"""Application settings for the whoami API."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "whoami-api"
    environment: str = "local"
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = 3000
    port_attempts: int = 10

    trust_proxy: bool = False
    allowed_origin: str = "*"

    redis_url: str | None = None
    redis_total_key: str = "visits:total"
    redis_clients_key: str = "visits:byIp"
    redis_backoff_step_ms: int = 50
    redis_backoff_max_ms: int = 2000
    redis_heartbeat_seconds: float = 5.0
    redis_socket_timeout: float = 2.0

    visits_file: Path = Path("visits.json")

    rate_limit_enabled: bool = True
    rate_limit_max_requests: int = 120
    rate_limit_window_seconds: int = 60

    geo_provider: str | None = None
    geo_api_key: str | None = None
    geo_cache_ttl_seconds: int = 300
    geo_timeout_seconds: float = 3.0
    geoip_db_path: Path | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
