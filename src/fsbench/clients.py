"""Registry of connected websocket clients"""

import logging
import threading
from typing import Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')


class ClientRegistry(Generic[T]):
    """Thread-safe set of live connections.

    Connections are added when accepted and removed when they close; callers
    iterate over a snapshot so a send never runs under the lock.
    """

    def __init__(self, name: str = 'default'):
        self.name = name
        self._clients: list[T] = []
        self._lock = threading.Lock()

    def add(self, client: T) -> None:
        with self._lock:
            if client not in self._clients:
                self._clients.append(client)
            count = len(self._clients)
        logger.debug(f'[{self.name}] client connected ({count} total)')

    def remove(self, client: T) -> bool:
        with self._lock:
            try:
                self._clients.remove(client)
            except ValueError:
                return False
            count = len(self._clients)
        logger.debug(f'[{self.name}] client disconnected ({count} total)')
        return True

    def snapshot(self) -> list[T]:
        with self._lock:
            return list(self._clients)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, client: object) -> bool:
        with self._lock:
            return client in self._clients
