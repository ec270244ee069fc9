"""
Ollama implementation of the metadata-drafting provider.
"""

import requests
from typing import Optional

from .ai_providers import AiProvider
from .config import AppConfig, OllamaConfig
from .logging_setup import get_logger
from .models import ImageResponse

logger = get_logger(__name__)


class OllamaProvider(AiProvider):
    """Local Ollama vision model implementation of AI provider."""

    def __init__(self, config: AppConfig):
        """
        Initialize the Ollama provider.

        Raises:
            ValueError: If config.provider is not an OllamaConfig object
        """
        super().__init__(config)

        if not isinstance(config.provider, OllamaConfig):
            raise ValueError("Provider must be an OllamaConfig instance")

        self.api_url = config.provider.api_url
        self.model = config.provider.model

    def _request(self, image_b64: str, prompt: str) -> Optional[ImageResponse]:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "images": [image_b64],
            "format": "json",
            "stream": False
        }

        try:
            response = requests.post(self.api_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            logger.error(f"Ollama API network error: {str(e)}")
            return None
        except ValueError as e:
            logger.error(f"Ollama API JSON parsing error: {str(e)}")
            return None

        return self.parse_response(result.get("response", ""))
