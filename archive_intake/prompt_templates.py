"""
Prompt construction and response normalization for metadata drafting.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from .logging_setup import get_logger
from .models import ImageResponse

logger = get_logger(__name__)

# Metadata fields the model is asked to fill, with a short description of each
METADATA_FIELDS: Dict[str, str] = {
    "fileTitle": "Short title suitable as a file title",
    "title": "Descriptive title of the image content, in square brackets if supplied by the cataloguer",
    "field_linked_agent": "Person or organization linked to the resource (creator, photographer)",
    "field_extent": "Physical extent or dimensions, if known",
    "field_description": "Detailed, objective description of what the image shows",
    "field_rights": "Rights or usage restrictions",
    "field_resource_type": "Resource type, normally 'still image'",
    "field_language": "Language of any text in or about the image",
    "field_note": "Additional notes",
    "field_subject": "Topical subjects, separated by semicolons",
    "field_subjects_name": "Named persons depicted",
    "field_subject_name__organization": "Named organizations depicted",
    "field_geographic_subject": "Geographic location shown",
    "field_coordinates": "Latitude and longitude as decimal numbers",
}

QnA = Sequence[Tuple[str, str]]


def get_metadata_prompt(qna: Optional[QnA] = None) -> str:
    """
    Build the metadata extraction prompt.

    Args:
        qna: Questions previously asked by the model, with the user's answers

    Returns:
        Prompt text
    """
    field_lines = "\n".join(f'  "{name}": {description}' for name, description in METADATA_FIELDS.items())

    prompt = f"""You are an archivist cataloguing a digitized photograph.
Describe only what is visible or what the user has told you. Leave a field as an
empty string when you cannot determine it.

Respond with a single JSON object of this exact shape:
{{
  "is_done": true or false,
  "metadata": {{ one string value per field below }},
  "questions": [ questions for the user that would fill the remaining gaps ]
}}

Metadata fields:
{field_lines}

Set "is_done" to true only when no further question would improve the record."""

    if qna:
        answers = "\n".join(f"Q: {question}\nA: {answer}" for question, answer in qna)
        prompt += f"\n\nThe user has answered these questions:\n{answers}"

    return prompt


def format_metadata_response(raw_result: Dict[str, Any]) -> ImageResponse:
    """
    Normalize a parsed model response into an ImageResponse.

    Unknown metadata keys are dropped, missing ones become empty strings, and
    non-string values are converted to strings.
    """
    raw_metadata = raw_result.get("metadata")
    if not isinstance(raw_metadata, dict):
        logger.warning("AI response has no metadata object")
        raw_metadata = {}

    metadata = {}
    for name in METADATA_FIELDS:
        value = raw_metadata.get(name)
        metadata[name] = "" if value is None else str(value).strip()

    questions: List[str] = []
    raw_questions = raw_result.get("questions") or []
    if isinstance(raw_questions, list):
        questions = [str(q).strip() for q in raw_questions if str(q).strip()]

    is_done = raw_result.get("is_done")
    if isinstance(is_done, str):
        is_done = is_done.strip().lower() == "true"

    return ImageResponse(is_done=bool(is_done), metadata=metadata, questions=questions)
