"""Process-local maps from a key (user id or room name) to connection ids.

These maps only answer "who is connected right now". They are rebuilt from
scratch on restart and are never a source of truth.
"""

from __future__ import annotations

from collections import defaultdict


class ConnectionRegistry:
    """Multimap of key -> connection ids, preserving registration order.

    ``unregister`` and ``discard`` are idempotent so disconnect cleanup can run
    any number of times, including after a key has no mappings left.
    """

    def __init__(self) -> None:
        # dict-as-ordered-set per key
        self._by_key: dict[str, dict[str, None]] = {}
        self._keys_by_connection: defaultdict[str, set[str]] = defaultdict(set)

    def register(self, key: str, connection_id: str) -> None:
        self._by_key.setdefault(key, {})[connection_id] = None
        self._keys_by_connection[connection_id].add(key)

    def unregister(self, key: str, connection_id: str) -> None:
        connections = self._by_key.get(key)
        if connections is not None:
            connections.pop(connection_id, None)
            if not connections:
                del self._by_key[key]

        keys = self._keys_by_connection.get(connection_id)
        if keys is not None:
            keys.discard(key)
            if not keys:
                del self._keys_by_connection[connection_id]

    def discard(self, connection_id: str) -> list[str]:
        """Remove ``connection_id`` from every key; return the keys it left."""
        keys = sorted(self._keys_by_connection.get(connection_id, ()))
        for key in keys:
            self.unregister(key, connection_id)
        return keys

    def lookup(self, key: str) -> list[str]:
        return list(self._by_key.get(key, ()))

    def keys_for(self, connection_id: str) -> set[str]:
        return set(self._keys_by_connection.get(connection_id, ()))

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)
