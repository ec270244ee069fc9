#!/usr/bin/env python3
"""
Example: Editing a Project Sheet

This example loads the stored project, edits a few cells through a
SheetSession, tiles a copied value down a column and saves the result.
"""

import argparse
import os
import sys
from pathlib import Path

# Add the parent directory to sys.path to import the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from archive_intake.address import encode_cell
from archive_intake.config import AppConfig, load_config
from archive_intake.logging_setup import setup_logging
from archive_intake.persistence import PersistenceScheduler
from archive_intake.project import load_project
from archive_intake.session import SheetSession
from archive_intake.storage import KeyValueStore


def editing_example():
    """Editing session example."""
    parser = argparse.ArgumentParser(description="Editing example for the archive intake tool")
    parser.add_argument("--store", default="archive_intake.db", help="Path to the project store")
    parser.add_argument("--rights", default="Public domain", help="Rights statement to apply to every row")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    config_path = os.path.join(Path(__file__).parent.parent, "config.json")
    config = load_config(config_path) if os.path.exists(config_path) else AppConfig()
    config.store_path = args.store
    if args.debug:
        config.debug_mode = True

    setup_logging(config)

    store = KeyValueStore(config.store_path, config)
    sheet = load_project(store)
    if sheet is None or not sheet.rows:
        print(f"Error: No project found in {config.store_path}")
        return 1

    scheduler = PersistenceScheduler(store, config)
    session = SheetSession(sheet, scheduler=scheduler)

    if "field_rights" not in sheet.field_titles:
        print("Error: Project has no field_rights column")
        return 1

    # Set the first row, then tile it down the whole column
    result = session.edit_cell(0, "field_rights", args.rights)
    if not result.success:
        print(f"Error: {result.error}")
        return 1

    col = sheet.field_titles.index("field_rights")
    top = session.grid[0][col]
    print(f"Applying '{top}' to {len(sheet.rows)} rows")

    session.copy((encode_cell(col, 0), encode_cell(col, 0)))
    session.paste((encode_cell(col, 0), encode_cell(col, len(sheet.rows) - 1)))

    # Coordinates are validated and stored as numbers
    if "field_coordinates" in sheet.field_titles:
        check = session.validate_value("field_coordinates", "44.6488")
        print(f"Coordinate check: valid={check.valid} value={check.coerced_value!r}")

    if not session.force_save():
        print("Error: Failed to save the project")
        return 1

    print("Project saved")
    return 0


if __name__ == "__main__":
    sys.exit(editing_example())
