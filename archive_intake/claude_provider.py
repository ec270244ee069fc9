"""
Claude implementation of the metadata-drafting provider.
"""

import requests
from typing import Optional

from .ai_providers import AiProvider
from .config import AppConfig, ClaudeConfig
from .logging_setup import get_logger
from .models import ImageResponse

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a metadata assistant for a digital archive. You write accurate, "
    "conservative catalog records and never invent names, dates or places."
)


class ClaudeProvider(AiProvider):
    """Claude Messages API implementation of AI provider."""

    def __init__(self, config: AppConfig):
        """
        Initialize the Claude provider.

        Raises:
            ValueError: If config.provider is not a ClaudeConfig object
        """
        super().__init__(config)

        if not isinstance(config.provider, ClaudeConfig):
            raise ValueError("Provider must be a ClaudeConfig instance")

        self.api_url = config.provider.api_url
        self.api_key = config.provider.api_key
        self.model = config.provider.model
        self.max_tokens = config.provider.max_tokens

    def _request(self, image_b64: str, prompt: str) -> Optional[ImageResponse]:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json"
        }
        payload = {
            "model": self.model,
            "system": SYSTEM_PROMPT,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": "image/jpeg",
                                "data": image_b64
                            }
                        }
                    ]
                }
            ]
        }

        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            logger.error(f"Claude API network error: {str(e)}")
            if getattr(e, 'response', None) is not None:
                logger.error(f"Response details: {e.response.text}")
            return None
        except ValueError as e:
            logger.error(f"Claude API JSON parsing error: {str(e)}")
            return None

        content = result.get("content") or [{}]
        response_text = "".join(block.get("text", "") for block in content if isinstance(block, dict))
        return self.parse_response(response_text)
