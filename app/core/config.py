from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "sitecraft-generator"
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    log_level: str = "INFO"

    database_url: str = "sqlite:///./sitecraft.db"
    redis_url: str = "redis://localhost:6379/0"
    generation_queue: str = "sitecraft-generation"
    generation_result_ttl: int = 3600

    anthropic_api_key: str | None = None
    generation_model: str = "claude-sonnet-4-20250514"

    # Token limits per stage
    design_system_max_tokens: int = 4096
    blueprint_max_tokens: int = 8192
    component_max_tokens: int = 32768
    edit_max_tokens: int = 16000

    # Model client retry policy
    model_max_retries: int = 3
    model_retry_base_delay: float = 1.0
    model_retry_max_delay: float = 30.0

    default_generation_credits: int = 5

    # Reconnect polling after a dropped stream
    status_poll_attempts: int = 60
    status_poll_interval: float = 5.0

settings = Settings()
