import logging
import os
import re
from pathlib import Path
from typing import Optional

from jam.domain.repositories import SaveRepository, SaveStoreError


DEFAULT_SAVE_DIR = "~/.performer_jam"

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class FileSaveRepository(SaveRepository):
    """One JSON file per save key, replaced whole on every write."""

    def __init__(self, root_dir: str | Path | None = None) -> None:
        configured = root_dir if root_dir is not None else os.getenv("JAM_SAVE_DIR", DEFAULT_SAVE_DIR)
        self.root_dir = Path(configured).expanduser()

    def _path_for_key(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", str(key)).strip("._") or "save"
        return self.root_dir / f"{safe}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for_key(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SaveStoreError(f"Could not read save file {path}") from exc

    def put(self, key: str, blob: str) -> None:
        path = self._path_for_key(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(str(blob), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise SaveStoreError(f"Could not write save file {path}") from exc
        logger.debug("Wrote save %s (%d bytes)", path, len(blob))

    def delete(self, key: str) -> None:
        path = self._path_for_key(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise SaveStoreError(f"Could not delete save file {path}") from exc

    def exists(self, key: str) -> bool:
        return self._path_for_key(key).exists()
