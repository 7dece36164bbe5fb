"""Custom exceptions for the ShopAlly search core."""


class LLMServiceError(Exception):
    """
    Exception raised for language-model API failures.

    Attributes:
        message: Error message
        status_code: Optional HTTP status code
    """

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class CatalogAPIException(Exception):
    """
    Exception raised for product catalog API failures.

    Attributes:
        message: Error message
        provider: Catalog identifier (e.g., 'aliexpress')
        status_code: HTTP status code
    """

    def __init__(self, message: str, provider: str, status_code: int = 503):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"{provider} API error: {message}")


class CacheStoreError(Exception):
    """Raised when the cache store cannot be reached or rejects a command."""

    def __init__(self, message: str, key: str = ""):
        self.message = message
        self.key = key
        super().__init__(f"{message} (key={key})" if key else message)


class FXRateError(Exception):
    """
    Raised when an exchange rate cannot be obtained.

    There is no safe default rate, so callers must propagate this.
    """

    def __init__(self, message: str, pair: str = ""):
        self.message = message
        self.pair = pair
        super().__init__(f"{pair}: {message}" if pair else message)


class MissingDeviceIDError(ValueError):
    """Raised when a rate-limited request carries no device identifier."""
