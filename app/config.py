"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Storage
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "scorebook.db")

    # Comma-separated, added to the localhost defaults
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Size of a full side; wicket margins are counted against it
    BATTING_SIDE_SIZE: int = int(os.getenv("BATTING_SIDE_SIZE", "11"))


settings = Settings()
