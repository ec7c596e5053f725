"""
TweakDocumentLoader - Finds and parses the tweak document.

The document is a JSON object mapping tweak key -> tweak record. Record
field names are case-insensitive and key order is preserved.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional

from ..logging import get_logger
from ..protocol.errors import ConfigurationError
from ..protocol.tweak import TweakDocument

log = get_logger("loader")

DEFAULT_DOCUMENT_PATH = Path("config") / "tweaks.json"

# Package directory (the bundled document lives in data/)
PACKAGE_ROOT = Path(__file__).parent.parent.resolve()


class TweakDocumentLoader:
    """
    Loads the tweak document from an explicit path or the default locations.
    """

    def __init__(self, search_paths: Optional[List[Path]] = None):
        self.search_paths = search_paths or [
            Path.cwd() / DEFAULT_DOCUMENT_PATH,
            PACKAGE_ROOT / "data" / "tweaks.json",
        ]

    def find(self, path: Optional[str] = None) -> Optional[Path]:
        """
        Locate the document.

        Args:
            path: Explicit path; when given, no other location is tried

        Returns:
            Resolved path, or None if nothing was found
        """
        if path:
            candidate = Path(path)
            return candidate.resolve() if candidate.is_file() else None

        seen = set()
        for candidate in self.search_paths:
            if candidate in seen:
                continue
            seen.add(candidate)
            if candidate.is_file():
                return candidate
        return None

    def load(self, path: Optional[str] = None) -> TweakDocument:
        """
        Load and parse the tweak document.

        Raises:
            ConfigurationError: document missing, malformed or empty
        """
        location = self.find(path)
        if location is None:
            searched = [path] if path else [str(p) for p in self.search_paths]
            raise ConfigurationError(
                "Tweak document not found. Looked in: " + ", ".join(searched)
            )

        try:
            text = location.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise ConfigurationError(f"Cannot read {location}: {e}") from e

        document = self.parse(text, source=str(location))
        log.info(f"Loaded {len(document)} tweaks from {location}")
        return document

    def parse(self, text: str, source: str = "") -> TweakDocument:
        """Parse document text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid tweak document {source}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Tweak document {source} must be a JSON object")

        document = TweakDocument.from_dict(data, source=source)
        if len(document) == 0:
            raise ConfigurationError("No tweaks found in configuration")
        return document


def tweaks_by_category(document: TweakDocument) -> Dict[str, List[str]]:
    """
    Group tweak keys by category for menu display.

    Categories appear in order of their first tweak; keys inside a category
    are ordered by the tweak's Order field (ties keep document order).
    """
    ordered = sorted(document.tweaks.items(), key=lambda item: item[1].order)

    categories: Dict[str, List[str]] = {}
    for key, tweak in ordered:
        categories.setdefault(tweak.category, []).append(key)
    return categories
