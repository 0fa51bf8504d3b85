"""Catalog utilities package: logging and date helpers."""

from src.catalog.utils.dates import extract_year, most_recent, parse_date
from src.catalog.utils.logger import setup_logger

__all__ = ["extract_year", "most_recent", "parse_date", "setup_logger"]
