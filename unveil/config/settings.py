from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase (accepts the NEXT_PUBLIC_ names shared with the web client)
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    )
    supabase_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "SUPABASE_ANON_KEY", "SUPABASE_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"
        ),
    )
    supabase_service_role_key: Optional[str] = None  # Required for cron, webhooks and admin routes

    # Storage
    media_bucket: str = "event-media"
    avatar_bucket: str = "avatars"
    max_upload_mb: int = 10
    signed_url_ttl_sec: int = 3600

    # Twilio
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    twilio_messaging_service_sid: Optional[str] = None  # preferred over phone number when set
    twilio_api_base_url: str = "https://api.twilio.com/2010-04-01"
    twilio_timeout_sec: float = 10.0
    sms_send_delay_ms: int = 100
    sms_rate_limit: str = "10/minute"

    # Scheduler
    cron_secret: Optional[str] = None
    scheduled_batch_size: int = 50
    processor_timeout_sec: float = 60.0

    # App
    app_name: str = "unveil-backend"
    app_base_url: str = "https://unveil.app"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def twilio_configured(self) -> bool:
        has_sender = bool(self.twilio_messaging_service_sid or self.twilio_phone_number)
        return bool(self.twilio_account_sid and self.twilio_auth_token and has_sender)

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
