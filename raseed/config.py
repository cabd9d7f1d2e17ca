"""
Configuration module for the Raseed pipeline workers.

Loads environment variables and validates required settings.
"""
import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings:
    """Worker settings loaded from environment variables."""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    # Background workers write across users, so they use the secret key
    SUPABASE_SECRET_KEY: str = os.getenv("SUPABASE_SECRET_KEY", "")

    # Google Gemini API
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    EXTRACTION_TIMEOUT_SECONDS: float = float(os.getenv("EXTRACTION_TIMEOUT_SECONDS", "60"))

    # Receipt images are downloaded before being sent to the model
    IMAGE_DOWNLOAD_TIMEOUT_SECONDS: float = float(os.getenv("IMAGE_DOWNLOAD_TIMEOUT_SECONDS", "30"))

    # Event transport (dramatiq over Redis)
    DRAMATIQ_BROKER_URL: str = os.getenv("DRAMATIQ_BROKER_URL", "redis://localhost:6379/0")
    WORKER_MAX_RETRIES: int = int(os.getenv("WORKER_MAX_RETRIES", "5"))
    WORKER_TIME_LIMIT_MS: int = int(os.getenv("WORKER_TIME_LIMIT_MS", "300000"))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        required_settings = {
            "SUPABASE_URL": cls.SUPABASE_URL,
            "SUPABASE_SECRET_KEY": cls.SUPABASE_SECRET_KEY,
            "GOOGLE_API_KEY": cls.GOOGLE_API_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"Warning: {e}")
            print("   The workers may not run correctly until you configure your .env file.")
        else:
            raise
