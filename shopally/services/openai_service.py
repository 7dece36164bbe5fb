"""OpenAI service for intent extraction, product enrichment and comparison prompts."""

from typing import Optional

import openai
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from shopally.services.clients.openai_client import OpenAIClient
from shopally.utils import LLMServiceError, logger
from shopally.utils.config import OPENAI_CHAT_MODEL


class OpenAIService:
    """
    Business layer on top of OpenAIClient.

    Adds retries on OpenAI errors and turns every failure into LLMServiceError.
    """

    def __init__(self, api_key: Optional[str] = None, client: Optional[OpenAIClient] = None):
        """
        Initialize OpenAI service with API client.

        Args:
            api_key: Optional API key override
            client: Optional pre-built client
        """
        self.client = client or OpenAIClient(api_key=api_key)

    @retry(
        stop=stop_after_attempt(3),  # Retry 3 times
        wait=wait_fixed(2),  # Wait 2 seconds between retries
        retry=retry_if_exception_type(openai.OpenAIError),  # Retry only OpenAI errors
        reraise=True,
    )
    async def _complete(self, prompt: str, model: str, max_tokens: int, use_json_mode: bool) -> str:
        messages = [self.client.create_message(role="system", content=prompt)]
        response_format = {"type": "json_object"} if use_json_mode else openai.NOT_GIVEN
        response = await self.client.create_chat_completion(messages=messages, model=model, max_tokens=max_tokens, response_format=response_format)
        return response.choices[0].message.content or ""

    async def generate_response(self, prompt: str, model: str = OPENAI_CHAT_MODEL, max_tokens: int = 800, use_json_mode: bool = False) -> str:
        """
        Generate a response from OpenAI. Retries on OpenAI errors.

        Args:
            prompt: Text prompt to send to the model
            model: OpenAI model to use
            max_tokens: Maximum tokens for the response
            use_json_mode: If True, request JSON output from the model

        Returns:
            str: Generated text

        Raises:
            LLMServiceError: If the call fails after retries or returns nothing
        """
        try:
            content = await self._complete(prompt, model, max_tokens, use_json_mode)
        except openai.OpenAIError as e:
            logger.error("❌ OpenAI API returned an error: %s", str(e))
            raise LLMServiceError("OpenAI API error") from e

        if not content.strip():
            raise LLMServiceError("Empty response from OpenAI")
        return content

    async def close(self) -> None:
        await self.client.close()
