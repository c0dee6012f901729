from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Backend API connection
    BACKEND_API_BASE_URL: str = "http://localhost:3002/api"
    BACKEND_TIMEOUT_SECONDS: float = 30.0

    # Session
    SESSION_SECRET_KEY: str = "change-me"
    SESSION_MAX_AGE_SECONDS: int = 3600 * 24 * 30
    # Browsers drop cookies larger than this
    SESSION_COOKIE_MAX_BYTES: int = 4096

    # Shop Configuration
    SHOP_NAME: str = "VoltEdge Electronics"

    # Cart persistence. file and database keep only the session id in the cookie;
    # memory is for development and tests only.
    CART_STORAGE_KEY: str = "voltedge_cart"
    CART_STORAGE_BACKEND: Literal["session", "file", "database", "memory"] = "file"
    CART_STORAGE_DIR: str = "var/carts"

    # Database (only used by the database cart storage)
    DATABASE_URL: str = "sqlite:///./voltedge.db"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
