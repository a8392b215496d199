"""Text-generation service used for language classification and translation."""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional

import openai
from openai import OpenAI

from .exceptions import ConfigurationError, TranslationServiceError
from .models import CompletionRequest, CompletionResponse, TokenUsage

logger = logging.getLogger(__name__)

class TranslationService(ABC):
    """Abstract base class for text-generation services."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """
        Sends one request and returns the generated text with its token usage.

        Args:
            request: Model, instructions, content and generation limits.

        Returns:
            A CompletionResponse; its text may be empty.

        Raises:
            TranslationServiceError: If the request fails.
        """
        pass

class OpenAIChatService(TranslationService):
    """Implements the service with the OpenAI chat completions API."""

    def __init__(self, client: Optional[OpenAI] = None, api_key: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initializes the OpenAIChatService.

        Args:
            client: A ready OpenAI client. When given, api_key and base_url are ignored.
            api_key: API key for a new client.
            base_url: Optional OpenAI-compatible endpoint.
        """
        if client is None:
            kwargs = {}
            if api_key:
                kwargs['api_key'] = api_key
            if base_url:
                kwargs['base_url'] = base_url
            client = OpenAI(**kwargs)
        self.client = client

    @classmethod
    def from_config(cls, config: dict) -> "OpenAIChatService":
        """
        Builds the service from configuration.

        Raises:
            ConfigurationError: If the API key environment variable is not set.
        """
        api_key_env = config.get('openai_api_key_env', 'OPENAI_API_KEY')
        api_key = os.getenv(api_key_env)
        if not api_key:
            raise ConfigurationError(f"OpenAI API key not found. Please set environment variable '{api_key_env}'.")
        logger.info(f"Initializing OpenAI chat service (model: {config.get('openai_model', 'gpt-4o-mini')})")
        return cls(api_key=api_key, base_url=config.get('openai_base_url'))

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        try:
            response = self.client.chat.completions.create(
                model=request.model,
                messages=[
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.user_content},
                ],
                max_tokens=request.max_output_tokens,
                temperature=request.temperature,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise TranslationServiceError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise TranslationServiceError("OpenAI returned no choices")

        text = response.choices[0].message.content or ""
        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )
        return CompletionResponse(text=text, usage=usage)
