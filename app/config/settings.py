from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "rewrites"
    db_username: str = "rewrites"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_apply_schema: bool = False

    generation_provider: str = "openai"
    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 120
    openai_compatible_base_url: str | None = None

    prompts_dir: Path | None = None

    rewrite_credit_cost: int = 3
    draft_credit_cost: int = 5
    bullet_rewrite_credit_cost: int = 1

    fan_out_max_workers: int = 3

    api_host: str = "0.0.0.0"
    api_port: int = 8000
