from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"

    RATE_LIMIT: int = 200
    RATE_LIMIT_WINDOW: int = 60  # 1 minute
    CALCULATION_RATE_LIMIT: int = 100
    CALCULATION_RATE_LIMIT_WINDOW: int = 60
    LEAD_RATE_LIMIT: int = 20
    LEAD_RATE_LIMIT_WINDOW: int = 300  # 5 minutes
    TOLLS_RATE_LIMIT: int = 150
    TOLLS_RATE_LIMIT_WINDOW: int = 60
    EMAIL_RATE_LIMIT: int = 20
    EMAIL_RATE_LIMIT_WINDOW: int = 300

    PRICE_CACHE_TTL: int = 60   # 60 seconds
    PRICING_SESSION_TTL: int = 1800  # 30 minutes

    PRICING_CONFIG_KEY: str = "pricing-config"
    PRICING_CONFIG_HISTORY_KEY: str = "pricing-config-history"
    PRICING_CONFIG_HISTORY_LIMIT: int = 50

    LEAD_HASH_CACHE_SIZE: int = 100

    CRM_LEAD_URL: str = ""
    CRM_TIMEOUT: int = 10
    CRM_RETRIES: int = 1

    EMAILJS_URL: str = "https://api.emailjs.com/api/v1.0/email/send"
    EMAILJS_SERVICE_ID: str = ""
    EMAILJS_TEMPLATE_ID: str = ""
    EMAILJS_PUBLIC_KEY: str = ""
    EMAIL_TIMEOUT: int = 10

    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_BACKEND: str = "redis://localhost:6379/2"

    API_TITLE: str = "Vehicle Shipping Calculator"
    API_DESCRIPTION: str = "Vehicle transport price estimation, toll estimates and lead submission"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
