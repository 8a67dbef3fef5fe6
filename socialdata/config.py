from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Environment
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"

    # Project
    PROJECT_NAME: str = "socialdata"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Document store
    STORE_URL: str = "sqlite+aiosqlite:///./socialdata.db"
    STORE_POOL_SIZE: int = 20
    STORE_MAX_OVERFLOW: int = 40

    # SQLite for testing
    TEST_STORE_URL: str = "sqlite+aiosqlite:///:memory:"

    # Change feed for live queries
    CHANGE_FEED: Literal["local", "redis"] = "local"
    CHANGE_FEED_CHANNEL: str = "socialdata:changes"
    CHANGE_FEED_RECONNECT_DELAY: float = 1.0  # seconds, doubled per failed attempt
    CHANGE_FEED_MAX_RECONNECT_DELAY: float = 30.0

    # Redis
    REDIS_URL: str = "redis://localhost:6379"

    # Test Redis
    TEST_REDIS_URL: str = "redis://localhost:6379/1"  # Use DB 1 for testing

    # ID tokens issued by the local identity provider
    SECRET_KEY: str = "your-secret-key-here-change-in-production"
    ALGORITHM: str = "HS256"
    ID_TOKEN_EXPIRE_MINUTES: int = 60

    # Test JWT Secret (different from production)
    TEST_SECRET_KEY: str = "test-secret-key"

    # Embedded images
    MAX_IMAGE_DATA_LENGTH: int = 100_000  # characters of encoded payload
    IMAGE_MAX_WIDTH: int = 300
    IMAGE_QUALITY: float = 0.7
    IMAGE_FETCH_TIMEOUT: float = 10.0

    # Listing
    DEFAULT_PAGE_SIZE: int = 20
    NOTIFICATIONS_LIMIT: int = 50

    # Testing
    TESTING: bool = False

    @property
    def is_testing(self) -> bool:
        return self.TESTING or self.ENVIRONMENT == "testing"

    @property
    def store_url(self) -> str:
        """Get appropriate store URL based on environment"""
        if self.is_testing:
            return self.TEST_STORE_URL
        return self.STORE_URL

    @property
    def redis_url(self) -> str:
        """Get appropriate Redis URL based on environment"""
        if self.is_testing:
            return self.TEST_REDIS_URL
        return self.REDIS_URL

    @property
    def secret_key(self) -> str:
        """Get appropriate secret key based on environment"""
        if self.is_testing:
            return self.TEST_SECRET_KEY
        return self.SECRET_KEY

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
