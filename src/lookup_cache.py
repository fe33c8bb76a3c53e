#!/usr/bin/env python3
# lookup_cache.py - Memoised Quick (速成) codes on top of the Cangjie table

import logging

from code_table import InvalidCodeError, derive_quick

logger = logging.getLogger(__name__)


class LookupCache:
    """
    Cache of character -> Quick code, derived from an EncodingTable.
    字元至速成碼的快取。

    The cache only ever grows: entries are added on a miss and never
    evicted. It is persisted between runs (see storage.py) but it is NOT a
    source of truth; clearing it only makes the next lookups slower.

    Characters missing from the table are not cached, so a later table
    with more characters is picked up without invalidating anything.
    Restored entries are checked against the table, so a snapshot taken
    with a different table never serves a code the table does not back.
    """

    def __init__(self, table, entries=None):
        """
        Args:
            table: The EncodingTable the Quick codes are derived from.
            entries: Optional snapshot (dict) to start from.
        """
        self._table = table
        self._entries = {}
        # Characters whose table code is unusable, reported once each
        self._invalid = set()
        if entries:
            self.restore(entries)

    def get(self, character):
        """
        Return the Quick code of a character, or None if it has no code.
        返回字元的速成碼；無碼時返回None。
        """
        quick = self._entries.get(character)
        if quick is not None:
            return quick

        canonical = self._table.lookup(character)
        if canonical is None:
            return None

        try:
            quick = derive_quick(canonical)
        except InvalidCodeError as e:
            # Corrupt table entry; shown as missing
            if character in self._invalid:
                return None
            self._invalid.add(character)
            logger.warning(f'Invalid Cangjie code for "{character}": {e}')
            return None

        self._entries[character] = quick
        logger.debug(f'LookupCache: "{character}" {canonical} -> {quick}')
        return quick

    def clear(self):
        """Drop every cached entry."""
        self._entries.clear()

    def snapshot(self):
        """Return a JSON-serialisable copy of the cache contents."""
        return dict(self._entries)

    def restore(self, blob):
        """
        Merge a snapshot produced by snapshot() into the cache.

        Anything that is not a dict of single character -> non-empty string
        is ignored, and so is any entry that does not match the Quick code
        derived from the current table (character missing, or table
        replaced since the snapshot). A bad blob simply leaves the cache as
        it was.

        Returns:
            int: Number of entries restored.
        """
        if not isinstance(blob, dict):
            logger.warning(f'Ignoring cache snapshot of type {type(blob).__name__}')
            return 0

        restored = 0
        for character, quick in blob.items():
            if not isinstance(character, str) or len(character) != 1:
                continue
            if not isinstance(quick, str) or not 1 <= len(quick) <= 2:
                continue
            if not self._matches_table(character, quick):
                continue
            self._entries[character] = quick
            restored += 1

        if restored != len(blob):
            logger.warning(f'Ignored {len(blob) - restored} malformed or stale cache entries')
        return restored

    def _matches_table(self, character, quick):
        canonical = self._table.lookup(character)
        if not canonical:
            return False
        return derive_quick(canonical) == quick

    def __contains__(self, character):
        return character in self._entries

    def __len__(self):
        return len(self._entries)
