# psnprofile/store.py

import json
import logging
from pathlib import Path
from typing import Optional

from psnprofile.models import ProfileSnapshot

logger = logging.getLogger(__name__)


class ResultStore:
    """Whole-file JSON persistence for the latest profile snapshot."""

    def __init__(self, path: str = "psnprofiles.json"):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load_previous(self) -> Optional[ProfileSnapshot]:
        """
        Read the previously written snapshot.

        Returns:
            The stored snapshot, or None if the file is missing, unreadable
            or not a JSON object. Never raises.
        """
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError, RecursionError) as exc:
            logger.warning("Ignoring unreadable previous result %s: %s", self.path, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Ignoring previous result %s: not a JSON object", self.path)
            return None

        try:
            return ProfileSnapshot.from_dict(data)
        except (TypeError, ValueError, AttributeError, OverflowError, RecursionError) as exc:
            logger.warning("Ignoring malformed previous result %s: %s", self.path, exc)
            return None

    def save(self, snapshot: ProfileSnapshot) -> None:
        """Overwrite the result file with pretty-printed JSON (2-space indent)."""
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False)
        self.path.write_text(payload + "\n", encoding="utf-8")
        logger.debug("Wrote %s", self.path)
