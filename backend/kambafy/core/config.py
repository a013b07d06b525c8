from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "kambafy-webhooks"
    version: str = "1.0.0"
    DEBUG: bool = False
    APP_DATABASE_DSN: str = "sqlite:////tmp/kambafy.db"
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Outbound webhook deliveries (tenant registrations)
    webhook_user_agent: str = "Kambafy-Webhook/1.0"
    webhook_envelope_version: str = "1.0"
    webhook_default_timeout_seconds: int = 30
    webhook_response_excerpt_chars: int = 1000

    # Partner payment notifications
    partner_webhook_max_attempts: int = 3
    partner_webhook_base_delay_seconds: float = 2.0
    partner_webhook_timeout_seconds: float = 30.0

    # Public origin used in sample payload links
    public_site_url: str = "https://kambafy.com"


settings = Settings()
