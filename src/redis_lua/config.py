"""Configuration for redis_lua."""

import os
from typing import List

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

# Environment variables
REDIS_URL_ENV = "REDIS_LUA_URL"
SCAN_PACKAGES_ENV = "REDIS_LUA_SCAN_PACKAGES"
RICH_UI_ENV = "REDIS_LUA_RICH_UI"
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_REDIS_URL = "redis://localhost:6379/0"

# Attribute names used to carry marker metadata
SCRIPT_SPEC_ATTR = "__redis_lua__"
COMPONENT_ATTR = "__redis_lua_component__"


class Settings(BaseModel):
    """Runtime settings resolved from the environment."""

    redis_url: str = DEFAULT_REDIS_URL
    scan_packages: List[str] = Field(default_factory=list)


def _split_packages(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def get_settings() -> Settings:
    """Load settings from environment variables and an optional .env file."""
    load_dotenv(find_dotenv(usecwd=True))

    return Settings(
        redis_url=os.getenv(REDIS_URL_ENV) or DEFAULT_REDIS_URL,
        scan_packages=_split_packages(os.getenv(SCAN_PACKAGES_ENV, "")),
    )
