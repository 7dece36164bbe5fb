import logging
from logging.handlers import RotatingFileHandler
import os

from .config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Create logs directory if it doesn't exist
os.makedirs(LOG_DIR, exist_ok=True)
LOG_FILE = os.path.join(LOG_DIR, "shopally.log")

# Shared logger for the whole service
logger = logging.getLogger("shopally")
logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))

# Re-importing the module (uvicorn --reload, test collection) must not stack handlers
if not logger.handlers:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

# Per-request noise from the HTTP and OpenAI clients
for noisy in ("httpx", "openai", "aiohttp.access"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
