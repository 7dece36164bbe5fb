"""API clients for external services."""

from shopally.services.clients.openai_client import OpenAIClient

__all__ = ["OpenAIClient"]
