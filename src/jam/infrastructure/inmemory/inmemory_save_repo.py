from typing import Dict, Optional

from jam.domain.repositories import SaveRepository


class InMemorySaveRepository(SaveRepository):
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._blobs: Dict[str, str] = dict(initial or {})
        self.put_count = 0

    def get(self, key: str) -> Optional[str]:
        return self._blobs.get(str(key))

    def put(self, key: str, blob: str) -> None:
        self._blobs[str(key)] = str(blob)
        self.put_count += 1

    def delete(self, key: str) -> None:
        self._blobs.pop(str(key), None)

    def exists(self, key: str) -> bool:
        return str(key) in self._blobs
