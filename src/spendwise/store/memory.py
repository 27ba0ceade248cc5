"""In-memory store for ephemeral sessions."""

from typing import Optional

from spendwise.store.base import Store


class MemoryStore(Store):
    """Dictionary-backed Store. Contents are lost with the instance."""

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self.data: dict[str, bytes] = dict(initial or {})

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
