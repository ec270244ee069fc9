"""
Archival Metadata Intake Package

This package imports a folder of images, asks a vision-language model to draft
catalog metadata for each one, and lets the user review and edit the result in
a spreadsheet-like grid that is persisted to a local key-value store.
"""

__version__ = "1.0.0"
__author__ = "Your Name"
