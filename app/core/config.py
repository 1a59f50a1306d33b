"""
PropSmart Application Configuration
Environment / .env driven settings (pydantic-settings)
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "PropSmart API"
    PROJECT_DESCRIPTION: str = "Property management: maintenance dispatch, utility billing and payments"
    VERSION: str = "1.0.0"

    # ==================== Database ====================
    # In-memory SQLite: nothing survives a restart
    DATABASE_URL: str = "sqlite://"

    # ==================== Security & Sessions ====================
    SECRET_KEY: str = "your-super-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 1 day
    SESSION_COOKIE_NAME: str = "propsmart_session"
    SESSION_COOKIE_SECURE: bool = False

    # Optional admin bootstrap
    ADMIN_USERNAME: str = ""
    ADMIN_PASSWORD: str = ""
    ADMIN_EMAIL: str = "admin@propsmart.local"

    # ==================== CORS & Frontend ====================
    APP_URL: str = "http://localhost:5000"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # ==================== Email Configuration ====================
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "noreply@propsmart.app"

    # ==================== Africa's Talking (SMS + mobile checkout) ====================
    AT_API_KEY: str = ""
    AT_USERNAME: str = "sandbox"
    AT_SENDER_ID: str = ""
    AT_SMS_URL: str = "https://api.africastalking.com/version1/messaging"
    AT_PAYMENTS_URL: str = "https://payments.africastalking.com/mobile/checkout/request"
    AT_PRODUCT_NAME: str = "PropSmart"

    # ==================== Stripe ====================
    STRIPE_SECRET_KEY: str = ""
    STRIPE_CURRENCY: str = "usd"

    # ==================== OpenAI (urgency scoring) ====================
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"

    # ==================== Billing ====================
    INVOICE_DUE_DAYS: int = 14
    EMAIL_REMINDER_DAYS: int = 3
    SMS_REMINDER_DAYS: int = 2

    # ==================== Maintenance ====================
    URGENT_RATING_THRESHOLD: int = 2

    # ==================== Features ====================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",  # Allow extra environment variables
        validate_default=True,
    )

    # ==================== Properties ====================
    @property
    def email_configured(self) -> bool:
        """Check if email is properly configured"""
        return bool(self.SMTP_SERVER and self.SMTP_USER and self.SMTP_PASSWORD)

    @property
    def sms_configured(self) -> bool:
        return bool(self.AT_API_KEY)

    @property
    def is_in_memory_db(self) -> bool:
        return self.DATABASE_URL in ("sqlite://", "sqlite:///:memory:")


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Module-level instance used across the app
settings = get_settings()
