"""Web UI constants."""

from pathlib import Path

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
INDEX_TEMPLATE = "index.html"
