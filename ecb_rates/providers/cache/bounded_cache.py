"""In-memory cache bounded by entry count and total value size.

When either bound would be exceeded the *whole* store is cleared rather
than individual entries being evicted.  There is no access-order or
recency bookkeeping: ``get`` never protects an entry, which keeps every
operation O(1) at the price of a higher eviction rate.
"""

from __future__ import annotations

from typing import Iterator

from ecb_rates.utils.errors import ConfigurationError
from ecb_rates.utils.logging import get_logger

logger = get_logger(__name__)

# Reference unit: one character of a UTF-16 string.
BYTES_PER_CHARACTER = 2


class BoundedCache:
    """String-to-string store with whole-cache eviction.

    Parameters
    ----------
    max_entries:
        Maximum number of keys held at once.  Inserting a new key that
        would push the count past this bound clears the store first.
    max_bytes:
        Maximum combined size of all stored values, measured as
        ``len(value) * bytes_per_char``.  A single value larger than this
        is silently rejected.
    bytes_per_char:
        Size unit applied to each character of a value.
    """

    def __init__(
        self,
        max_entries: int,
        max_bytes: int,
        bytes_per_char: int = BYTES_PER_CHARACTER,
    ) -> None:
        if max_entries <= 0:
            raise ConfigurationError(f"max_entries must be positive, got {max_entries}")
        if max_bytes <= 0:
            raise ConfigurationError(f"max_bytes must be positive, got {max_bytes}")
        if bytes_per_char <= 0:
            raise ConfigurationError(f"bytes_per_char must be positive, got {bytes_per_char}")
        self._entries: dict[str, str] = {}
        self._max_entries = max_entries
        self._max_bytes = max_bytes
        self._bytes_per_char = bytes_per_char
        self._current_bytes = 0

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @property
    def current_bytes(self) -> int:
        return self._current_bytes

    @property
    def size(self) -> int:
        return len(self._entries)

    def byte_size(self, value: str) -> int:
        """Return the accounted size of *value* in bytes."""
        return len(value) * self._bytes_per_char

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set(self, key: str, value: str) -> BoundedCache:
        """Store *value* under *key*, clearing the store when a bound is hit.

        Returns the cache itself so calls can be chained.
        """
        value_bytes = self.byte_size(value)
        if value_bytes > self._max_bytes:
            logger.debug(
                "cache_rejected_oversized",
                key=key,
                value_bytes=value_bytes,
                max_bytes=self._max_bytes,
            )
            return self

        if key not in self._entries and len(self._entries) + 1 > self._max_entries:
            self._evict("max_entries")

        previous = self._entries.get(key)
        previous_bytes = self.byte_size(previous) if previous is not None else 0
        if self._current_bytes - previous_bytes + value_bytes > self._max_bytes:
            self._evict("max_bytes")
            previous_bytes = 0

        self._entries[key] = value
        self._current_bytes += value_bytes - previous_bytes
        logger.debug("cache_set", key=key, value_bytes=value_bytes, size=len(self._entries))
        return self

    def delete(self, key: str) -> bool:
        """Remove *key*; return ``True`` if it was present."""
        value = self._entries.pop(key, None)
        if value is None:
            return False
        self._current_bytes -= self.byte_size(value)
        return True

    def clear(self) -> None:
        """Remove every entry and reset the byte counter."""
        self._entries.clear()
        self._current_bytes = 0

    def _evict(self, reason: str) -> None:
        logger.debug(
            "cache_evicted",
            reason=reason,
            dropped_entries=len(self._entries),
            dropped_bytes=self._current_bytes,
        )
        self.clear()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* when absent."""
        return self._entries.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._entries

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield ``(key, value)`` pairs in insertion order."""
        for key, value in self._entries.items():
            yield key, value

    entries = items

    def keys(self) -> Iterator[str]:
        for key, _ in self.items():
            yield key

    def values(self) -> Iterator[str]:
        for _, value in self.items():
            yield value

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return self.items()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"BoundedCache(size={len(self._entries)}, max_entries={self._max_entries}, "
            f"current_bytes={self._current_bytes}, max_bytes={self._max_bytes})"
        )
