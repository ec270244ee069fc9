"""
Project creation, loading and clearing.

A project is one Sheet plus its image directory, name and AI results, all
kept in a KeyValueStore.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from tqdm import tqdm

from .ai_providers import AiProvider
from .config import AppConfig
from .csv_codec import CSVParseOptions, parse
from .googlesheet import ParsedSheetData, fetch_from_google_sheets
from .image_processor import ImageProcessor
from .logging_setup import get_logger
from .models import Field, Image, ImageResponse, Sheet, freeze_row
from .prompt_templates import QnA
from .storage import (AI_RESULTS_KEY, IMAGES_KEY, PROJECT_NAME_KEY, SHEET_KEY,
                      KeyValueStore, get_stored_spreadsheet, set_stored_spreadsheet)
from .utils import get_file_extension

logger = get_logger(__name__)

IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'tif', 'tiff', 'gif', 'bmp', 'webp'}

Generator = Callable[[Image, int, Optional[Dict[str, Any]]], Any]

# Guards read-modify-write of the cached AI drafts
_ai_results_lock = threading.Lock()


@dataclass
class FieldConfig:
    """A field plus the generator that fills it for each image."""
    field: Field
    generator: Optional[Generator] = None


def _ai_value(name: str, default: str = "") -> Generator:
    def generate(image: Image, index: int, ai_data: Optional[Dict[str, Any]] = None) -> Any:
        return (ai_data or {}).get(name) or default
    return generate


DEFAULT_FIELDS: List[FieldConfig] = [
    FieldConfig(Field("file", "File names must match exactly with uploaded images."),
                lambda image, index, ai_data=None: image[0]),
    FieldConfig(Field("file_extension", "File extension extracted from the filename."),
                lambda image, index, ai_data=None: get_file_extension(image[0])),
    FieldConfig(Field("accessIdentifier", "Unique identifier for accessing this item."),
                lambda image, index, ai_data=None: ""),
    # AI-generated metadata fields
    FieldConfig(Field("fileTitle", "Title of the file as determined by AI analysis."),
                _ai_value("fileTitle")),
    FieldConfig(Field("title", "Descriptive title of the image content."),
                _ai_value("title")),
    FieldConfig(Field("field_description", "Detailed description of the image content."),
                _ai_value("field_description")),
    FieldConfig(Field("field_subject", "Subject or topic of the image."),
                _ai_value("field_subject")),
    FieldConfig(Field("field_linked_agent", "Person or organization linked to this resource."),
                _ai_value("field_linked_agent")),
    FieldConfig(Field("field_resource_type", "Type of the resource (e.g., still image)."),
                _ai_value("field_resource_type", "still image")),
    FieldConfig(Field("field_rights", "Rights or usage restrictions for the resource."),
                _ai_value("field_rights")),
    FieldConfig(Field("field_geographic_subject", "Geographic location associated with the resource."),
                _ai_value("field_geographic_subject")),
    FieldConfig(Field("field_coordinates", "Geographic coordinates related to the resource."),
                _ai_value("field_coordinates")),
]


def create_field_config(title: str, instructions: Optional[str] = None,
                        generator: Optional[Generator] = None) -> FieldConfig:
    """Create a custom field configuration."""
    return FieldConfig(Field(title, instructions), generator)


def get_default_fields() -> List[FieldConfig]:
    """Copy of the default field configurations, for extending."""
    return list(DEFAULT_FIELDS)


def list_images(directory: str) -> List[Image]:
    """
    List the image files directly inside a directory.

    Returns:
        (filename, path) pairs in directory order
    """
    images = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if not entry.is_file():
                continue
            if get_file_extension(entry.name).lower() not in IMAGE_EXTENSIONS:
                continue
            images.append((entry.name, Path(entry.path)))
    return images


def sort_images(images: Sequence[Image], order: str = "desc") -> List[Image]:
    """Sort images by filename, descending by default."""
    return sorted(images, key=lambda image: image[0], reverse=(order == "desc"))


def generate_template_spreadsheet(images: Sequence[Image], field_configs: Sequence[FieldConfig],
                                  ai_results: Optional[Dict[str, ImageResponse]] = None) -> Sheet:
    """
    Build a sheet with one row per image.

    Each field's generator receives the image, its index and the AI metadata
    drafted for that filename (if any); fields without a generator are empty.
    """
    rows = []
    for index, image in enumerate(images):
        response = (ai_results or {}).get(image[0])
        ai_data = response.metadata if response else None
        rows.append({
            config.field.title: config.generator(image, index, ai_data) if config.generator else ""
            for config in field_configs
        })

    return Sheet(
        fields=tuple(config.field for config in field_configs),
        rows=tuple(rows),
        images=tuple(images),
    )


def project_exists(store: KeyValueStore) -> bool:
    """Fast check whether a project sheet is stored."""
    try:
        return SHEET_KEY in store
    except Exception as e:
        logger.error(f"Failed to check if project exists: {str(e)}")
        return False


def load_project(store: KeyValueStore) -> Optional[Sheet]:
    """Load the stored project sheet, or None."""
    try:
        return get_stored_spreadsheet(store)
    except Exception as e:
        logger.error(f"Failed to load project: {str(e)}")
        return None


def save_project(store: KeyValueStore, sheet: Sheet) -> bool:
    """Store a project sheet; returns False on failure."""
    try:
        set_stored_spreadsheet(store, sheet)
        return True
    except Exception as e:
        logger.error(f"Failed to save project: {str(e)}")
        return False


def clear_project(store: KeyValueStore) -> bool:
    """Remove the current project sheet and name from storage."""
    try:
        store.delete(SHEET_KEY)
        store.delete(PROJECT_NAME_KEY)
        logger.info("Project cleared")
        return True
    except Exception as e:
        logger.error(f"Failed to clear project: {str(e)}")
        return False


def create_from_scratch(store: KeyValueStore, directory: str, name: Optional[str] = None,
                        field_configs: Optional[Sequence[FieldConfig]] = None,
                        sort_order: str = "desc",
                        ai_results: Optional[Dict[str, ImageResponse]] = None) -> Optional[Sheet]:
    """
    Create and store a project from the images in a directory.

    Returns:
        The new sheet, or None if there are no images or it could not be stored
    """
    try:
        images = list_images(directory)
    except OSError as e:
        logger.error(f"Cannot read image directory {directory}: {str(e)}")
        return None

    if not images:
        logger.warning("No images found")
        return None

    sheet = generate_template_spreadsheet(
        sort_images(images, sort_order),
        field_configs or DEFAULT_FIELDS,
        ai_results,
    )

    try:
        store.set(IMAGES_KEY, os.path.abspath(directory))
        set_stored_spreadsheet(store, sheet)
        if ai_results:
            with _ai_results_lock:
                cached = dict(store.get(AI_RESULTS_KEY) or {})
                cached.update({filename: r.to_dict() for filename, r in ai_results.items()})
                store.set(AI_RESULTS_KEY, cached)
        if name:
            store.set(PROJECT_NAME_KEY, name)
    except Exception as e:
        logger.error(f"Failed to create project from scratch: {str(e)}")
        return None

    logger.info(f"Created project with {len(sheet.rows)} items")
    return sheet


def create_with_custom_fields(store: KeyValueStore, directory: str,
                              custom_fields: Sequence[FieldConfig], **options) -> Optional[Sheet]:
    """Create a project using custom field configurations."""
    return create_from_scratch(store, directory, field_configs=custom_fields, **options)


def get_image_response(store: KeyValueStore, provider: AiProvider, filename: str, image_b64: str,
                       qna: Optional[QnA] = None) -> Optional[ImageResponse]:
    """
    Get the AI draft for an image, asking the provider only when needed.

    The draft cached under the filename is returned unless there is none, or
    it is not done and answers to its questions are supplied. In those cases
    the provider is asked again (with the answers) and a successful draft
    replaces the cached one.

    Args:
        store: Store holding the cached drafts
        provider: AI provider to ask
        filename: Image file name, the cache key
        image_b64: Base64-encoded image
        qna: Questions from the previous draft with the user's answers

    Returns:
        ImageResponse, or None if the provider failed
    """
    with _ai_results_lock:
        cached = (store.get(AI_RESULTS_KEY) or {}).get(filename)

    if cached and (cached.get('is_done') or not qna):
        logger.debug(f"Using cached draft for {filename}")
        return ImageResponse.from_dict(cached)

    response = provider.analyze_image(image_b64, qna)
    if response is None:
        return None

    with _ai_results_lock:
        results = dict(store.get(AI_RESULTS_KEY) or {})
        results[filename] = response.to_dict()
        store.set(AI_RESULTS_KEY, results)
    return response


def draft_metadata(images: Sequence[Image], provider: AiProvider, config: AppConfig,
                   on_progress: Optional[Callable[[int, int, str], None]] = None,
                   store: Optional[KeyValueStore] = None) -> Dict[str, ImageResponse]:
    """
    Ask the AI provider for a metadata draft of every image.

    With a store, drafts already cached there are reused and new ones are
    cached. Images that cannot be encoded or analyzed are logged and left out.

    Returns:
        Mapping of filename to ImageResponse
    """
    processor = ImageProcessor(config)
    results: Dict[str, ImageResponse] = {}

    def analyze(image: Image) -> Optional[ImageResponse]:
        image_b64 = processor.encode_file(str(image[1]))
        if not image_b64:
            return None
        if store is not None:
            return get_image_response(store, provider, image[0], image_b64)
        return provider.analyze_image(image_b64)

    with ThreadPoolExecutor(max_workers=max(1, config.max_workers),
                            thread_name_prefix="Draft") as executor:
        future_to_image = {executor.submit(analyze, image): image for image in images}
        completed = 0
        for future in tqdm(as_completed(future_to_image), total=len(future_to_image),
                           desc="Drafting metadata", disable=not images):
            filename = future_to_image[future][0]
            completed += 1
            try:
                response = future.result()
            except Exception as e:
                logger.error(f"Error processing {filename}: {str(e)}")
                response = None

            if response is not None:
                results[filename] = response
            else:
                logger.warning(f"Failed to process {filename} with AI")

            if on_progress:
                on_progress(completed, len(images), filename)

    return results


def create_project_with_ai(store: KeyValueStore, directory: str, provider: AiProvider,
                           config: AppConfig, name: Optional[str] = None,
                           on_progress: Optional[Callable[[int, int, str], None]] = None) -> Optional[Sheet]:
    """Draft metadata for every image in a directory, then create the project from it."""
    try:
        images = list_images(directory)
    except OSError as e:
        logger.error(f"Cannot read image directory {directory}: {str(e)}")
        return None

    ai_results = draft_metadata(images, provider, config, on_progress, store=store)
    logger.info(f"AI drafted metadata for {len(ai_results)}/{len(images)} images")
    return create_from_scratch(store, directory, name=name, sort_order=config.sort_order,
                               ai_results=ai_results)


def refine_metadata(store: KeyValueStore, provider: AiProvider, config: AppConfig, filename: str,
                    qna: Optional[QnA] = None) -> Optional[ImageResponse]:
    """
    Draft metadata for one image of the stored project, answering its questions.

    The image is looked up in the project's image directory. Without answers,
    or when the cached draft is done, the cached draft is returned.

    Returns:
        ImageResponse, or None if the image or a draft is unavailable
    """
    directory = store.get(IMAGES_KEY)
    if not directory:
        logger.error("Project has no image directory")
        return None

    image_b64 = ImageProcessor(config).encode_file(os.path.join(directory, filename))
    if not image_b64:
        return None
    return get_image_response(store, provider, filename, image_b64, qna)


def apply_image_response(sheet: Sheet, filename: str, response: ImageResponse) -> Sheet:
    """
    Copy drafted metadata into the rows for ``filename``.

    Only metadata keys that are fields of the sheet are written; other rows
    are shared with the input sheet.
    """
    titles = set(sheet.field_titles)
    updates = {key: value for key, value in response.metadata.items() if key in titles}
    if not updates:
        return sheet

    rows = [
        freeze_row({**row, **updates}) if row.get('file') == filename else row
        for row in sheet.rows
    ]
    return sheet.with_rows(rows)


def _unique_titles(headers: Sequence[str]) -> List[str]:
    titles: List[str] = []
    for index, header in enumerate(headers):
        base = header.strip() or f"column_{index + 1}"
        title = base
        suffix = 2
        while title in titles:
            title = f"{base}_{suffix}"
            suffix += 1
        titles.append(title)
    return titles


def sheet_from_records(headers: Sequence[str], raw_rows: Sequence[Sequence[str]],
                       images: Sequence[Image] = ()) -> Sheet:
    """Build a sheet whose fields are the given column headers."""
    titles = _unique_titles(headers)
    rows = [
        {title: (row[index] if index < len(row) else '') for index, title in enumerate(titles)}
        for row in raw_rows
    ]
    return Sheet(fields=tuple(Field(title) for title in titles), rows=tuple(rows), images=tuple(images))


def create_from_csv(text: str, images: Sequence[Image] = (),
                    options: Optional[CSVParseOptions] = None) -> Optional[Sheet]:
    """
    Build a sheet from CSV text: the header row becomes the fields.

    Empty or duplicate header titles are renamed so titles stay unique.

    Returns:
        The sheet, or None if the text holds no rows
    """
    raw = parse(text, options or CSVParseOptions(skip_empty_lines=True))
    if not raw:
        logger.warning("No data found in CSV")
        return None
    return sheet_from_records(raw[0], raw[1:], images)


def create_from_google_sheet(url: str, gid: Optional[str] = None,
                             images: Sequence[Image] = ()) -> Sheet:
    """
    Fetch a shared Google Sheet and build a sheet from it.

    Raises:
        GoogleSheetsError: If the sheet cannot be fetched or parsed
    """
    parsed: ParsedSheetData = fetch_from_google_sheets(url, gid)
    return sheet_from_records(parsed.headers, parsed.raw_data[1:], images)
