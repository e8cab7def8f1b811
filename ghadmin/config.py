from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # GitHub API
    github_api_url: str = "https://api.github.com"
    per_page: int = 100
    request_timeout: int = 15

    # Rate limiting (applied by the gateway's retry policy)
    rate_limit_max_retries: int = 10
    rate_limit_max_wait: float = 60.0
    seconds_between_requests: float = 0.25
    seconds_between_writes: float = 1.0

    # Sync engine
    poll_interval_seconds: float = 30 * 60
    team_lookup_concurrency: int = 10
    event_backlog_size: int = 500

    # Persisted desktop settings file
    config_path: str = str(Path.home() / ".config" / "github-admin" / "config.json")

    # Logging
    log_level: str = "info"

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "GHADMIN_"}


settings = Settings()
