#!/usr/bin/env python3
"""
app_state.py - The lookup session: buffer, codes, history and persistence
查字狀態：文字框內容、字碼、輸入紀錄及儲存

================================================================================
FILE RELATIONSHIPS / 檔案關係
================================================================================

    main.py                 ← command-line shell, owns an AppState
        │
        └──► app_state.py (THIS FILE)
                  │
                  ├──► code_table.py     (Cangjie table, Quick derivation)
                  ├──► lookup_cache.py   (memoised Quick codes)
                  ├──► history.py        (session state machine)
                  └──► storage.py        (history/cache files; injected)

AppState holds no global state. It can always be rebuilt from
(EncodingTable, saved history, saved cache), which is exactly what the
store hands back on start-up.

================================================================================
"""

import logging

from code_table import MISSING_CODE
from history import HISTORY_ORDERS, SessionHistoryTracker
from lookup_cache import LookupCache

logger = logging.getLogger(__name__)

# Display modes: which code the caller shows per character.
MODE_QUICK = 'quick'
MODE_CANGJIE = 'cangjie'
DISPLAY_MODES = (MODE_QUICK, MODE_CANGJIE)


class CharacterCode:
    """
    The codes of one character of the buffer.
    文字框中一個字元的字碼。

    Either code is MISSING_CODE ('') when the character is not in the table.
    """

    __slots__ = ('character', 'canonical_code', 'quick_code')

    def __init__(self, character, canonical_code, quick_code):
        self.character = character
        self.canonical_code = canonical_code
        self.quick_code = quick_code

    def code(self, mode):
        return self.canonical_code if mode == MODE_CANGJIE else self.quick_code

    def __eq__(self, other):
        if not isinstance(other, CharacterCode):
            return NotImplemented
        return (self.character, self.canonical_code, self.quick_code) == \
            (other.character, other.canonical_code, other.quick_code)

    def __repr__(self):
        return f'CharacterCode({self.character!r}, {self.canonical_code!r}, {self.quick_code!r})'


class AppState:
    """
    Everything behind the lookup screen.
    查字畫面背後的全部狀態。

    Every mutating method (set_buffer, type_text, backspace, clear,
    load_entry) feeds the history tracker and then saves whatever changed
    through the store. Store failures are logged by the store and never
    reach the caller.

    Attributes:
        table : EncodingTable
        cache : LookupCache
        tracker : SessionHistoryTracker
        store : object with load_history/save_history/load_cache/save_cache,
                or None to keep everything in memory.
        mode : str
            'quick' or 'cangjie'; display only.
        history_order : str
            'newest_first' or 'oldest_first'; display only.
    """

    def __init__(self, table, store=None, mode=MODE_QUICK, history_order='newest_first',
                 move_resumed_to_end=False, max_entries=0):
        if history_order not in HISTORY_ORDERS:
            raise ValueError(f'Unknown history order: {history_order}')
        self.table = table
        self.store = store
        self.history_order = history_order
        self._mode = MODE_QUICK
        self.set_mode(mode)
        self._buffer = ''

        self.cache = LookupCache(table)
        self.tracker = SessionHistoryTracker(move_resumed_to_end=move_resumed_to_end,
                                             max_entries=max_entries)
        if store is not None:
            self.cache.restore(store.load_cache())
            self.tracker.load(store.load_history())
            logger.info(f'AppState restored {len(self.tracker)} history entries, '
                        f'{len(self.cache)} cached codes')

    @classmethod
    def from_config(cls, table, config, store=None):
        """Build an AppState using the "display_mode" and "history" config keys."""
        history_config = config.get('history', {})
        return cls(table,
                   store=store,
                   mode=config.get('display_mode', MODE_QUICK),
                   history_order=history_config.get('order', 'newest_first'),
                   move_resumed_to_end=history_config.get('move_resumed_to_end', False),
                   max_entries=history_config.get('max_entries', 0))

    # ─── Display mode ─────────────────────────────────────────────────

    @property
    def mode(self):
        return self._mode

    def set_mode(self, mode):
        """Select which code is displayed. Does not touch any other state."""
        if mode not in DISPLAY_MODES:
            raise ValueError(f'Unknown display mode: {mode}')
        self._mode = mode

    # ─── Buffer edits ─────────────────────────────────────────────────

    @property
    def buffer(self):
        return self._buffer

    def set_buffer(self, text):
        """Replace the whole buffer (the text box changed)."""
        self._buffer = text
        if self.tracker.update(text):
            self._save_history()
        self.refresh()

    def type_text(self, text):
        """Append characters one at a time, as if typed."""
        for character in text:
            self.set_buffer(self._buffer + character)

    def backspace(self, count=1):
        """Delete up to count characters from the end, one at a time."""
        for _ in range(min(count, len(self._buffer))):
            self.set_buffer(self._buffer[:-1])

    def clear(self):
        """The "clear text" button: freeze the session and empty the buffer."""
        self.tracker.clear()
        self._buffer = ''

    def load_entry(self, index):
        """
        Load a history entry into the buffer and continue its session.

        Args:
            index: Position of the entry in display order (0-based).

        Raises:
            IndexError: If there is no entry at that position.
        """
        entries = self.tracker.display_entries(self.history_order)
        if not 0 <= index < len(entries):
            raise IndexError(f'No history entry at position {index}')
        entry, _ = entries[index]
        self._buffer = self.tracker.resume(entry)
        if self.tracker.move_resumed_to_end:
            self._save_history()
        self.refresh()
        logger.debug(f'Loaded history entry #{index}: "{self._buffer}"')

    # ─── Outbound views ───────────────────────────────────────────────

    def code_of(self, character):
        """Return the CharacterCode of one character."""
        canonical = self.table.lookup(character) or MISSING_CODE
        quick = self.cache.get(character) or MISSING_CODE
        return CharacterCode(character, canonical, quick)

    def rows(self):
        """CharacterCode of every character in the buffer, in buffer order."""
        return [self.code_of(character) for character in self._buffer]

    def display_codes(self):
        """(character, code) pairs in the current display mode."""
        return [(row.character, row.code(self._mode)) for row in self.rows()]

    def history_entries(self):
        """(HistoryEntry, is_live) tuples in display order."""
        return self.tracker.display_entries(self.history_order)

    # ─── Persistence ──────────────────────────────────────────────────

    def _save_history(self):
        if self.store is not None:
            self.store.save_history(self.tracker.texts())

    def refresh(self):
        """
        Compute the codes of the buffer and save the cache if it grew.

        Returns:
            list of CharacterCode (same as rows()).
        """
        before = len(self.cache)
        rows = self.rows()
        if self.store is not None and len(self.cache) > before:
            self.store.save_cache(self.cache.snapshot())
        return rows
