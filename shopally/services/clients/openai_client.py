"""Client for interacting with OpenAI APIs."""

from typing import List, Literal, Optional

import openai
from openai.types.chat import ChatCompletion
from openai.types.chat.chat_completion_message_param import ChatCompletionMessageParam
from openai.types.chat.chat_completion_system_message_param import ChatCompletionSystemMessageParam
from openai.types.chat.chat_completion_user_message_param import ChatCompletionUserMessageParam

from shopally.utils import logger
from shopally.utils.config import OPENAI_API_KEY, OPENAI_CHAT_MODEL, OPENAI_TIMEOUT_SECONDS


class OpenAIClient:
    """
    Thin async wrapper around the OpenAI chat completions API.

    Handles authentication and message construction; retries and error
    translation live in OpenAIService.
    """

    def __init__(self, api_key: Optional[str] = None, timeout: float = OPENAI_TIMEOUT_SECONDS):
        """
        Initialize OpenAI API client.

        Args:
            api_key: Optional API key override
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key or OPENAI_API_KEY
        if not self.api_key:
            logger.warning("⚠️ No OpenAI API key provided. API calls will fail.")
        self.client = openai.AsyncOpenAI(api_key=self.api_key or "missing", timeout=timeout)

    @staticmethod
    def create_message(role: Literal["system", "user"], content: str) -> ChatCompletionMessageParam:
        """Create a typed chat message."""
        if role == "system":
            return ChatCompletionSystemMessageParam(role=role, content=content)
        return ChatCompletionUserMessageParam(role="user", content=content)

    async def create_chat_completion(
        self, messages: List[ChatCompletionMessageParam], model: str = OPENAI_CHAT_MODEL, temperature: float = 0.2, max_tokens: int = 800, **kwargs
    ) -> ChatCompletion:
        """
        Create a chat completion.

        Raises:
            openai.OpenAIError: If the API call fails
        """
        try:
            return await self.client.chat.completions.create(model=model, messages=messages, temperature=temperature, max_tokens=max_tokens, **kwargs)
        except openai.OpenAIError as e:
            logger.error("❌ OpenAI chat completion API error: %s", str(e))
            raise

    async def close(self) -> None:
        await self.client.close()
