"""Configuration management for the AskEBL application."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"

if env_path.exists():
    load_dotenv(env_path)


class Config:
    """Application configuration loaded from environment variables."""

    # Logging Configuration
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    STREAMLIT_LOG_LEVEL: str = os.getenv("STREAMLIT_LOG_LEVEL", "WARNING").upper()

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Storage Configuration
    DATABASE_PATH: Path = Path(os.getenv("DATABASE_PATH", "data/askebl.db"))
    KNOWLEDGE_BASE_PATH: Path | None = (
        Path(os.environ["KNOWLEDGE_BASE_PATH"])
        if os.getenv("KNOWLEDGE_BASE_PATH")
        else None
    )

    # Chat Configuration
    MATCH_THRESHOLD: int = int(os.getenv("MATCH_THRESHOLD", "3"))
    RESPONSE_DELAY_SECONDS: float = float(os.getenv("RESPONSE_DELAY_SECONDS", "0.0"))
    POPULAR_QUESTION_LIMIT: int = int(os.getenv("POPULAR_QUESTION_LIMIT", "9"))

    # Dashboard Configuration
    TRANSACTION_LIMIT: int = int(os.getenv("TRANSACTION_LIMIT", "10"))
    DEMO_PASSWORD: str = os.getenv("DEMO_PASSWORD", "demo123")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a numeric setting is out of range or the demo
                password is empty.
        """
        if cls.MATCH_THRESHOLD < 0:
            msg = f"MATCH_THRESHOLD must be >= 0, got {cls.MATCH_THRESHOLD}."
            raise ValueError(msg)
        if cls.TRANSACTION_LIMIT <= 0:
            msg = f"TRANSACTION_LIMIT must be > 0, got {cls.TRANSACTION_LIMIT}."
            raise ValueError(msg)
        if not cls.DEMO_PASSWORD:
            msg = "DEMO_PASSWORD is required. Please set it in .env file or environment."
            raise ValueError(msg)

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment.

        Returns:
            True if environment is development.
        """
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment.

        Returns:
            True if environment is production.
        """
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def setup_logging(cls) -> None:
        """Setup basic logging configuration.

        Configure logging once at application startup with:
        - Console output for all levels
        - Simple, readable format
        - Configurable level via environment variable
        """
        logging.basicConfig(
            level=getattr(logging, cls.LOG_LEVEL, logging.INFO),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )

        logging.getLogger("streamlit").setLevel(
            getattr(logging, cls.STREAMLIT_LOG_LEVEL, logging.WARNING)
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger with the specified name.

        Args:
            name: Logger name (typically __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)


config = Config()
