"""
Utility functions for archive intake.
"""

import json
import os
import re
from typing import Any, Optional

from .logging_setup import get_logger

logger = get_logger(__name__)


def get_file_extension(filename: str) -> str:
    """Extension after the last dot, without the dot ("" if none)."""
    base = os.path.basename(filename)
    _, dot, extension = base.rpartition('.')
    return extension if dot else ''


def extract_json(response_text: str, debug_mode: bool = False) -> Optional[Any]:
    """
    Extract a JSON object from a model response.

    Tries the whole text, then fenced code blocks, then the outermost pair of
    braces.

    Args:
        response_text: Text containing JSON
        debug_mode: Whether to log debug information

    Returns:
        Parsed JSON or None if extraction failed
    """
    if not response_text:
        return None

    try:
        return json.loads(response_text)
    except json.JSONDecodeError:
        if debug_mode:
            logger.debug("Direct JSON parsing failed, trying alternative methods")

    for match in re.findall(r'```(?:json)?\s*([\s\S]*?)\s*```', response_text):
        try:
            return json.loads(match)
        except json.JSONDecodeError:
            continue

    start = response_text.find("{")
    end = response_text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(response_text[start:end + 1])
        except json.JSONDecodeError:
            if debug_mode:
                logger.debug("Failed to parse JSON object with braces")

    logger.error("Failed to extract JSON block from AI response")
    if debug_mode:
        logger.debug(f"Response text: {response_text[:500]}...")
    return None
