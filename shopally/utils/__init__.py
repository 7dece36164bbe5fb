"""
Utility functions and configurations for the ShopAlly search core.
"""

from .exceptions import CacheStoreError, CatalogAPIException, FXRateError, LLMServiceError, MissingDeviceIDError
from .logging import logger

__all__ = [
    "logger",
    "LLMServiceError",
    "CatalogAPIException",
    "CacheStoreError",
    "FXRateError",
    "MissingDeviceIDError",
]
