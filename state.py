import json
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class HandleStore:
    """The last handle the user looked up, kept across runs as a JSON string."""

    def __init__(self, path: Union[str, Path] = ".cf_handle.json"):
        self.path = Path(path)

    def get(self) -> str:
        if not self.path.exists():
            return ""
        try:
            value = json.loads(self.path.read_text())
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupted handle file %s", self.path)
            return ""
        return value if isinstance(value, str) else ""

    def set(self, handle: Optional[str]) -> None:
        # an empty handle clears the cell instead of storing ""
        if not handle:
            self.clear()
            return
        self.path.write_text(json.dumps(handle))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
