"""
Command-line interface for the archive intake tool.
"""

import argparse
import os
import sys
import traceback
from typing import List, Optional

from .address import decode_cell_strict
from .ai_providers import AiProvider
from .config import AppConfig, load_config
from .csv_codec import CSVParseOptions, stringify
from .exceptions import AddressError, FieldError, GoogleSheetsError
from .grid import sheet_to_grid
from .grid_store import GridStore
from .logging_setup import get_logger, setup_logging
from .persistence import PersistenceScheduler
from .project import (apply_image_response, clear_project, create_from_csv, create_from_google_sheet,
                      create_from_scratch, create_project_with_ai, list_images,
                      load_project, refine_metadata, save_project, sort_images)
from .storage import KeyValueStore
from .viewport import visible_range

logger = get_logger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Import images, draft catalog metadata with AI and edit it as a sheet"
    )
    parser.add_argument(
        "--config",
        default="config.json",
        help="Path to configuration JSON file (default: config.json)"
    )
    parser.add_argument(
        "--store",
        help="Override the project store path from the config file"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode regardless of config setting"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Create a project from a directory of images")
    new_parser.add_argument("directory", help="Directory containing the images")
    new_parser.add_argument("--name", help="Project name")
    new_parser.add_argument("--ai", action="store_true", help="Draft metadata with the configured AI provider")

    csv_parser = subparsers.add_parser("import-csv", help="Create a project from a CSV file")
    csv_parser.add_argument("file", help="CSV file to import")
    csv_parser.add_argument("--images", help="Directory of images matching the rows")

    sheet_parser = subparsers.add_parser("import-sheet", help="Create a project from a shared Google Sheet")
    sheet_parser.add_argument("url", help="Google Sheets sharing URL")
    sheet_parser.add_argument("--gid", help="Tab identifier")

    export_parser = subparsers.add_parser("export-csv", help="Write the project sheet as CSV")
    export_parser.add_argument("file", help="Output CSV file ('-' for stdout)")

    show_parser = subparsers.add_parser("show", help="Print the rows visible in a scrolled viewport")
    show_parser.add_argument("--scroll", type=int, default=0, help="Scroll offset in pixels")
    show_parser.add_argument("--height", type=int, default=480, help="Viewport height in pixels")

    edit_parser = subparsers.add_parser("edit", help="Set one cell, e.g. 'edit B3 value'")
    edit_parser.add_argument("address", help="Cell address such as B3 (row 1 is the first data row)")
    edit_parser.add_argument("value", help="New value")

    draft_parser = subparsers.add_parser("draft", help="Draft or refine AI metadata for one image")
    draft_parser.add_argument("filename", help="Image file name in the project's image directory")
    draft_parser.add_argument("--answer", nargs=2, action="append", metavar=("QUESTION", "ANSWER"),
                              help="Answer to a question from the previous draft (repeatable)")
    draft_parser.add_argument("--apply", action="store_true", help="Write the drafted metadata into the sheet")

    subparsers.add_parser("clear", help="Remove the current project from the store")

    return parser.parse_args(argv)


def process_arguments(args: argparse.Namespace, config: AppConfig) -> AppConfig:
    """Override config values from command-line arguments."""
    if args.debug:
        config.debug_mode = True
    if args.store:
        config.store_path = args.store
    return config


def _load_config(path: str) -> AppConfig:
    if os.path.exists(path):
        return load_config(path)
    logger.warning(f"Configuration file not found: {path}, using defaults")
    return AppConfig()


def _require_project(store: KeyValueStore):
    sheet = load_project(store)
    if sheet is None:
        print("No project found. Create one with 'new', 'import-csv' or 'import-sheet'.", file=sys.stderr)
    return sheet


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the command-line interface.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    config = None
    try:
        args = parse_arguments(argv)
        config = process_arguments(args, _load_config(args.config))
        setup_logging(config)

        store = KeyValueStore(config.store_path, config)

        if args.command == "new":
            if args.ai:
                provider = AiProvider.get_provider(config)
                sheet = create_project_with_ai(store, args.directory, provider, config, name=args.name)
            else:
                sheet = create_from_scratch(store, args.directory, name=args.name,
                                            sort_order=config.sort_order)
            if sheet is None:
                return 1
            print(f"Created project with {len(sheet.rows)} rows")
            return 0

        if args.command == "import-csv":
            with open(args.file, 'r', encoding='utf-8', newline='') as f:
                text = f.read()
            images = sort_images(list_images(args.images), config.sort_order) if args.images else ()
            sheet = create_from_csv(text, images, CSVParseOptions(
                delimiter=config.csv_delimiter, quote=config.csv_quote, skip_empty_lines=True))
            if sheet is None or not save_project(store, sheet):
                return 1
            print(f"Imported {len(sheet.rows)} rows with {len(sheet.fields)} fields")
            return 0

        if args.command == "import-sheet":
            sheet = create_from_google_sheet(args.url, args.gid)
            if not save_project(store, sheet):
                return 1
            print(f"Imported {len(sheet.rows)} rows with {len(sheet.fields)} fields")
            return 0

        if args.command == "clear":
            return 0 if clear_project(store) else 1

        sheet = _require_project(store)
        if sheet is None:
            return 1

        if args.command == "export-csv":
            text = stringify([sheet.field_titles] + sheet_to_grid(sheet),
                             delimiter=config.csv_delimiter, quote=config.csv_quote)
            if args.file == '-':
                print(text)
            else:
                with open(args.file, 'w', encoding='utf-8', newline='') as f:
                    f.write(text + '\n')
                logger.info(f"Exported {len(sheet.rows)} rows to {args.file}")
            return 0

        if args.command == "show":
            heights = [None] * len(sheet.rows)
            window = visible_range(args.scroll, args.height, heights, config.viewport_buffer,
                                   config.default_row_height)
            grid = sheet_to_grid(sheet)
            print(stringify([['#'] + sheet.field_titles]))
            for index in range(window.start, window.end):
                print(stringify([[index + 1] + grid[index]]))
            return 0

        if args.command == "edit":
            address = decode_cell_strict(args.address.upper())
            if address.col >= len(sheet.fields):
                print(f"Column out of range: {args.address}", file=sys.stderr)
                return 1

            scheduler = PersistenceScheduler(store, config)
            grid_store = GridStore(scheduler)
            result = grid_store.edit_cell(sheet, address.row, sheet.fields[address.col].title, args.value)
            if not result.success:
                print(f"Invalid value: {result.error}", file=sys.stderr)
                return 1
            return 0 if scheduler.flush() else 1

        if args.command == "draft":
            provider = AiProvider.get_provider(config)
            qna = [(question, answer) for question, answer in args.answer or []]
            response = refine_metadata(store, provider, config, args.filename, qna)
            if response is None:
                print(f"No draft available for {args.filename}", file=sys.stderr)
                return 1
            for key, value in response.metadata.items():
                print(f"{key}: {value}")
            for question in response.questions:
                print(f"? {question}")
            if args.apply and not save_project(store, apply_image_response(sheet, args.filename, response)):
                return 1
            return 0

        return 1

    except (AddressError, FieldError, IndexError, GoogleSheetsError, OSError, ValueError, RuntimeError) as e:
        logger.error(f"Command failed: {str(e)}")
        print(f"Error: {str(e)}", file=sys.stderr)
        if config is not None and config.debug_mode:
            logger.error(f"Traceback: {traceback.format_exc()}")
        return 1
