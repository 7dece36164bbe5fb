"""Configuration management for environment variables and application settings."""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_env_int(var_name: str, default: str) -> int:
    value_str = os.getenv(var_name, default)
    # Attempt to strip comments and whitespace before int conversion
    if "#" in value_str:
        value_str = value_str.split("#", 1)[0]
    return int(value_str.strip())


def get_env_float(var_name: str, default: str) -> float:
    value_str = os.getenv(var_name, default)
    if "#" in value_str:
        value_str = value_str.split("#", 1)[0]
    return float(value_str.strip())


def get_env_bool(var_name: str, default: str) -> bool:
    value_str = os.getenv(var_name, default)
    # Attempt to strip comments and whitespace before bool conversion
    if "#" in value_str:
        value_str = value_str.split("#", 1)[0]
    return value_str.strip().lower() == "true"


# Core configurations
DEBUG = get_env_bool("DEBUG", "False")
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Gateway selection: mock fixtures for local development and tests, live providers otherwise
USE_MOCK_GATEWAYS = get_env_bool("USE_MOCK_GATEWAYS", "False")

# Redis Configuration
REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = get_env_int("REDIS_PORT", "6379")
REDIS_DB = get_env_int("REDIS_DB", "0")
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD") or None
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "")

# Optional: Print config only in debug mode for verification
if DEBUG:
    print(f"✅ Redis Config: {REDIS_HOST}:{REDIS_PORT}, DB={REDIS_DB}, prefix='{REDIS_KEY_PREFIX}'")

# Device rate limiting (fixed window)
RATE_LIMIT_LIMIT = get_env_int("RATE_LIMIT_LIMIT", "5")  # Max requests per device per window
RATE_LIMIT_WINDOW_SECONDS = get_env_int("RATE_LIMIT_WINDOW_SECONDS", "60")

# Search Settings
SEARCH_TIMEOUT_SECONDS = get_env_float("SEARCH_TIMEOUT_SECONDS", "25")  # Deadline for the whole search pipeline
DEFAULT_RESPONSE_LANGUAGE = os.getenv("DEFAULT_RESPONSE_LANGUAGE", "en")

# OpenAI Model Settings
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_CHAT_MODEL = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")  # Default model for intent, enhancement and comparison
OPENAI_TIMEOUT_SECONDS = get_env_float("OPENAI_TIMEOUT_SECONDS", "12")

# Intent defaults enforced on every parsed query
DEFAULT_SHIP_TO_COUNTRY = os.getenv("DEFAULT_SHIP_TO_COUNTRY", "ET")
DEFAULT_TARGET_CURRENCY = os.getenv("DEFAULT_TARGET_CURRENCY", "USD")
DEFAULT_TARGET_LANGUAGE = os.getenv("DEFAULT_TARGET_LANGUAGE", "en")

# AliExpress affiliate catalog
ALIEXPRESS_APP_KEY = os.getenv("ALIEXPRESS_APP_KEY")
ALIEXPRESS_APP_SECRET = os.getenv("ALIEXPRESS_APP_SECRET")
ALIEXPRESS_BASE_URL = os.getenv("ALIEXPRESS_BASE_URL", "https://api-sg.aliexpress.com/sync")
ALIEXPRESS_SIGN_STRATEGY = os.getenv("ALIEXPRESS_SIGN_STRATEGY", "hmac")  # "hmac" or "concat"
CATALOG_TIMEOUT_SECONDS = get_env_float("CATALOG_TIMEOUT_SECONDS", "10")
CATALOG_DEFAULT_PAGE_SIZE = get_env_int("CATALOG_DEFAULT_PAGE_SIZE", "20")

# FX Settings
FX_API_URL = os.getenv("FX_API_URL", "https://api.exchangerate.host/latest")
FX_API_KEY = os.getenv("FX_API_KEY")
FX_CACHE_TTL_SECONDS = get_env_int("FX_CACHE_TTL_SECONDS", "43200")  # 12 hours
FX_TIMEOUT_SECONDS = get_env_float("FX_TIMEOUT_SECONDS", "10")
