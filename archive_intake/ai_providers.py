"""
AI provider interface and factory.
"""

import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .config import AppConfig
from .logging_setup import get_logger
from .models import ImageResponse
from .prompt_templates import QnA, format_metadata_response, get_metadata_prompt
from .utils import extract_json

logger = get_logger(__name__)


class AiProvider(ABC):
    """Abstract base class for metadata-drafting AI providers."""

    @staticmethod
    def get_provider(config: AppConfig) -> 'AiProvider':
        """
        Factory method to get the AI provider named in the configuration.

        Args:
            config: Application configuration

        Returns:
            An instance of the matching AiProvider subclass
        """
        provider_type = config.provider.provider_type.lower()

        if provider_type == 'ollama':
            from .ollama_provider import OllamaProvider
            return OllamaProvider(config)
        if provider_type != 'claude':
            logger.warning(f"Unknown provider type: {provider_type}, using Claude")
        from .claude_provider import ClaudeProvider
        return ClaudeProvider(config)

    def __init__(self, config: AppConfig):
        """
        Initialize the AI provider.

        Args:
            config: Application configuration
        """
        self.config = config
        self.max_retries = config.max_retries
        self.timeout = config.request_timeout

    def call_with_retries(self, request_func: Callable[[], Optional[ImageResponse]]) -> Optional[ImageResponse]:
        """
        Call an API function with exponential backoff.

        Args:
            request_func: Function that returns a response or None

        Returns:
            API response if successful, None otherwise
        """
        for attempt in range(self.max_retries):
            try:
                result = request_func()
                if result:
                    return result
            except Exception as e:
                logger.error(f"Error in API call (attempt {attempt + 1}): {str(e)}")

            if attempt < self.max_retries - 1:
                logger.info(f"Retrying API call in {2 ** attempt} seconds (attempt {attempt + 1}/{self.max_retries})")
                time.sleep(2 ** attempt)

        logger.error(f"Failed to get valid response after {self.max_retries} attempts")
        return None

    def parse_response(self, response_text: str) -> Optional[ImageResponse]:
        """
        Parse the model's text response into an ImageResponse.

        Returns:
            Normalized response, or None if no JSON object could be extracted
        """
        raw = extract_json(response_text, self.config.debug_mode)
        if not isinstance(raw, dict):
            return None
        return format_metadata_response(raw)

    def analyze_image(self, image_b64: str, qna: Optional[QnA] = None) -> Optional[ImageResponse]:
        """
        Draft metadata for an image.

        Args:
            image_b64: Base64-encoded JPEG
            qna: Earlier questions from the model with the user's answers

        Returns:
            ImageResponse if successful, None otherwise
        """
        if image_b64.startswith("data:image"):
            image_b64 = image_b64.split(",", 1)[1]
        prompt = get_metadata_prompt(qna)
        return self.call_with_retries(lambda: self._request(image_b64, prompt))

    @abstractmethod
    def _request(self, image_b64: str, prompt: str) -> Optional[ImageResponse]:
        """Send one request to the provider's API."""
