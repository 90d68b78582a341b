# pipdesk/config.py
import logging
from pathlib import Path
from decouple import config

BASE_DIR = Path(__file__).parent.parent

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "your-secret-key-here-change-in-production"


class Settings:
    # App
    APP_NAME = "PipDesk Signals"
    VERSION = "1.0.0"
    SECRET_KEY = config("SECRET_KEY", default=DEFAULT_SECRET_KEY)
    ALGORITHM = config("ALGORITHM", default="HS256")
    DEBUG = config("DEBUG", default=True, cast=bool)
    ENVIRONMENT = config("ENVIRONMENT", default="development")
    LOG_LEVEL = config("LOG_LEVEL", default="INFO")

    # Database
    DATABASE_URL = config("DATABASE_URL", default=f"sqlite:///{BASE_DIR}/pipdesk.db")

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES = config("ACCESS_TOKEN_EXPIRE_MINUTES", default=60 * 24, cast=int)

    # Admin seed account
    ADMIN_EMAIL = config("ADMIN_EMAIL", default="admin@pipdesk.local")
    ADMIN_PASSWORD = config("ADMIN_PASSWORD", default="admin123")

    # Subscriptions
    SUBSCRIPTION_PERIOD_DAYS = config("SUBSCRIPTION_PERIOD_DAYS", default=30, cast=int)
    FREE_PLAN = config("FREE_PLAN", default="free")

    # Trading journal
    DEFAULT_LOT_SIZE = config("DEFAULT_LOT_SIZE", default="0.01")
    # Extra symbols for the instrument registry, e.g. "US500:0,UKOIL:2"
    EXTRA_INSTRUMENTS = config("EXTRA_INSTRUMENTS", default="")

    # Session
    SESSION_COOKIE_SECURE = config("SESSION_COOKIE_SECURE", default=False, cast=bool)
    SESSION_COOKIE_SAMESITE = config("SESSION_COOKIE_SAMESITE", default="lax")

    # CORS
    CORS_ORIGINS = config("CORS_ORIGINS", default="http://localhost:5173,http://localhost:3000").split(",")

    # Security
    PASSWORD_MIN_LENGTH = config("PASSWORD_MIN_LENGTH", default=6, cast=int)

    @property
    def is_development(self):
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self):
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins_list(self):
        return [o.strip() for o in self.CORS_ORIGINS if o.strip()]

    def validate_settings(self):
        """Validate critical settings"""
        errors = []

        if not self.DATABASE_URL:
            errors.append("DATABASE_URL is not configured")

        if self.is_production and self.SECRET_KEY == DEFAULT_SECRET_KEY:
            errors.append("SECRET_KEY must be changed in production")

        if self.is_production and self.ADMIN_PASSWORD == "admin123":
            errors.append("ADMIN_PASSWORD must be changed in production")

        if self.SUBSCRIPTION_PERIOD_DAYS <= 0:
            errors.append("SUBSCRIPTION_PERIOD_DAYS must be positive")

        if errors:
            raise ValueError(f"Configuration errors: {'; '.join(errors)}")

    def print_config_summary(self):
        """Log a summary of the current configuration"""
        logger.info("=" * 60)
        logger.info(f"{self.APP_NAME} v{self.VERSION} - Configuration Summary")
        logger.info("=" * 60)
        logger.info(f"Environment: {self.ENVIRONMENT}")
        logger.info(f"Debug Mode: {self.DEBUG}")
        logger.info(f"Database: {self.DATABASE_URL}")
        logger.info(f"Subscription period: {self.SUBSCRIPTION_PERIOD_DAYS} days")
        logger.info(f"Extra instruments: {self.EXTRA_INSTRUMENTS or 'none'}")
        logger.info("=" * 60)


# Initialize settings
settings = Settings()
