# Licenced under the txec2 licence available at /LICENSE in the txec2 source.

"""
Change-aware caching of decoded responses.

Describing a whole collection tends to return the same document again and
again.  L{ResponseCache} remembers the last body seen for an operation
together with its decoded value, and skips decoding when the next body is
byte-for-byte the same.
"""

from threading import Lock

import attr

from twisted.logger import Logger


__all__ = ["CacheEntry", "ResponseCache"]


@attr.s(frozen=True)
class CacheEntry(object):
    """
    A response body and the value decoded from it.
    """
    body = attr.ib(repr=False)
    value = attr.ib()


def _read(body):
    if hasattr(body, "read"):
        return body.read()
    return body


class ResponseCache(object):
    """
    At most one L{CacheEntry} per operation key.

    Entries are created on first use of a key and replaced whenever a
    different body arrives for it; they are never evicted.  The check and
    update for a key happen under a lock held for that key, so concurrent
    callers never see a value which does not belong to the stored body.
    """
    _log = Logger()

    def __init__(self):
        self._entries = {}
        self._locks = {}
        self._locks_lock = Lock()

    def _lock_for(self, key):
        with self._locks_lock:
            return self._locks.setdefault(key, Lock())

    def get(self, key):
        """
        @return: The L{CacheEntry} for C{key}, or C{None}.
        """
        return self._entries.get(key)

    def fetch(self, key, cacheable, body, decode):
        """
        Get the decoded value of C{body}.

        @param key: The operation the body is a response to.
        @param cacheable: If C{False}, C{body} is decoded and the cache is
            neither consulted nor updated.
        @param body: The raw response, L{bytes} or a binary file-like object.
        @param decode: A one-argument callable decoding a body.

        @return: The value for C{body}; on a hit, the very object returned
            when the body was first decoded.
        """
        if not cacheable:
            return decode(body)
        body = _read(body)
        with self._lock_for(key):
            entry = self._entries.get(key)
            if entry is not None and entry.body == body:
                self._log.debug(u"Cache hit for {key}", key=key)
                return entry.value
            self._log.debug(
                u"Cache miss for {key}, decoding {size} bytes",
                key=key, size=len(body),
            )
            value = decode(body)
            self._entries[key] = CacheEntry(body, value)
            return value
