import os
from typing import List


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    ALLOWED_ORIGINS: List[str] = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    SEED_DEFAULT_POST = _flag(os.getenv("SEED_DEFAULT_POST", "true"))


settings = Settings()
