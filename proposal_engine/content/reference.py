"""
Reference Document Loader

Loads the style-reference proposal PDF that the detailed generator attaches
to its Claude call. The bytes are read lazily on first use and cached;
`invalidate()` drops the cache so the next call re-reads the file.

Inject a loader into the generator (or pass None) instead of relying on
process-wide state.
"""

import base64
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_FILENAME = "reference-proposal.pdf"


class ReferenceDocumentLoader:
    """Lazy, cached access to the reference PDF."""

    def __init__(self, path: Union[str, Path]):
        """
        Args:
            path: PDF file, or a directory containing reference-proposal.pdf
        """
        path = Path(path)
        if path.suffix.lower() != ".pdf":
            path = path / DEFAULT_REFERENCE_FILENAME
        self.path = path
        self._cached: Optional[bytes] = None
        self._missing = False

    @classmethod
    def from_settings(cls, settings: Any) -> "ReferenceDocumentLoader":
        return cls(settings.REFERENCE_DIR)

    def is_available(self) -> bool:
        return self._cached is not None or self.path.is_file()

    def load(self) -> Optional[bytes]:
        """Document bytes, or None when the file is absent or unreadable."""
        if self._cached is not None:
            return self._cached
        if self._missing:
            return None

        try:
            self._cached = self.path.read_bytes()
        except OSError as e:
            logger.warning(f"Reference document not available at {self.path}: {e}")
            self._missing = True
            return None

        logger.info(f"Loaded reference document {self.path.name} ({len(self._cached) // 1024}KB)")
        return self._cached

    def invalidate(self) -> None:
        """Drop the cached bytes (and the remembered miss)."""
        self._cached = None
        self._missing = False

    def as_attachment(self) -> Optional[Dict[str, Any]]:
        """Anthropic document content block, or None without a document."""
        data = self.load()
        if not data:
            return None
        return {
            "type": "document",
            "source": {
                "type": "base64",
                "media_type": "application/pdf",
                "data": base64.standard_b64encode(data).decode("ascii"),
            },
        }
