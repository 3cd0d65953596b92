from abc import ABC, abstractmethod
from typing import Optional


class SaveStoreError(RuntimeError):
    """A save store could not read or write its backing storage."""


class SaveRepository(ABC):
    """Key-addressed store holding one serialized save blob per key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, blob: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        return self.get(key) is not None
