#!/usr/bin/env python3
"""
history.py - Session-based input history (輸入紀錄)
以「輸入階段」為單位的輸入紀錄

================================================================================
WHAT IS A SESSION? / 何謂輸入階段？
================================================================================

The user types into a single text box and edits it only at the end
(typing appends characters, backspace removes them). We do not want one
history entry per keystroke, and we do not want to lose earlier input when
the user deletes it and types something else.

使用者只在文字框末端輸入或刪除。我們不希望每按一次鍵就產生一筆紀錄，
也不希望使用者刪除後改打其他內容時遺失先前的輸入。

A SESSION is tracked with a "committed" string: the longest text typed so
far in this session (the high-water mark).

輸入階段以「committed」字串追蹤：即本階段曾輸入過的最長文字。

    committed = "香港"

    buffer "香"      → prefix of committed: just editing, nothing changes
    buffer "香港"    → same as committed:   nothing changes
    buffer "香港人"  → extends committed:   committed = "香港人"
    buffer "山"      → diverges:            "香港人" is frozen,
                                            a new session starts with "山"

================================================================================
STATE MACHINE / 狀態機
================================================================================

    ┌──────────────────┐   non-empty buffer   ┌──────────────────────┐
    │                  │ ───────────────────► │        LIVE          │
    │      IDLE        │   (new entry)        │ (committed, entry)   │
    │     (閒置)        │                      │                      │
    │                  │ ◄─────────────────── │  prefix:   no change │
    └──────────────────┘       clear()        │  extend:   update    │
            │                  (freeze)       │  diverge:  freeze +  │
            │                                 │            new entry │
            │          resume(entry)          └──────────────────────┘
            └────────────────────────────────────────► ▲
                        (no new entry)                  │

================================================================================
"""

import logging

logger = logging.getLogger(__name__)

HISTORY_ORDERS = ('newest_first', 'oldest_first')


class HistoryEntry:
    """
    One history entry: the text of a (possibly still live) session.
    一筆輸入紀錄。

    Entries are identified by object identity, not by text: two sessions
    that happen to produce the same text are still two entries.
    """

    __slots__ = ('text',)

    def __init__(self, text):
        self.text = text

    def __repr__(self):
        return f'HistoryEntry({self.text!r})'


class SessionHistoryTracker:
    """
    Watches the text buffer and maintains the list of history entries.
    監察文字框內容並維護輸入紀錄。

    ============================================================================
    USAGE EXAMPLE / 使用例
    ============================================================================

        >>> tracker = SessionHistoryTracker()
        >>> tracker.update('香')
        True
        >>> tracker.update('香港')
        True
        >>> tracker.update('香')          # backspace: just editing
        False
        >>> tracker.texts()
        ['香港']
        >>> tracker.update('山')          # divergence: new session
        True
        >>> tracker.texts()
        ['香港', '山']

    ============================================================================
    ATTRIBUTES / 屬性
    ============================================================================

    entries : list of HistoryEntry
        In creation order (oldest first). Display order is decided by the
        caller (see display_entries()).
        以建立次序排列（最舊在前）。

    _live : HistoryEntry or None
        The entry of the current session, or None when IDLE.
        目前階段的紀錄；閒置時為None。

    _committed : str
        High-water mark of the current session ('' when IDLE).

    ============================================================================
    """

    def __init__(self, texts=None, move_resumed_to_end=False, max_entries=0):
        """
        Args:
            texts: Optional list of previously saved entry texts (oldest first).
            move_resumed_to_end: If True, resuming an old entry moves it to the
                                 end of the list (it becomes the newest entry).
            max_entries: Maximum number of entries to keep (0 = unlimited).
                         The oldest frozen entries are dropped first.
        """
        self.entries = []
        self.move_resumed_to_end = move_resumed_to_end
        self.max_entries = max_entries
        self._live = None
        self._committed = ''
        if texts:
            self.load(texts)

    def load(self, texts):
        """
        Replace the history with saved texts and go IDLE.
        Empty or non-string items are skipped.
        """
        self.entries = [HistoryEntry(text) for text in texts if isinstance(text, str) and text]
        self._reset()
        self._trim()

    def _reset(self):
        self._live = None
        self._committed = ''

    def is_live(self):
        """Return True if a session is in progress (LIVE state)."""
        return self._live is not None

    @property
    def live_entry(self):
        return self._live

    @property
    def committed(self):
        return self._committed

    def update(self, text):
        """
        Feed the new buffer value into the state machine.
        將文字框的新內容送入狀態機。

        Args:
            text: The whole buffer after the edit.

        Returns:
            bool: True if the history (entry list or any entry text) changed,
                  i.e. the caller should save it.
        """
        if self._live is None:
            # === IDLE ===
            if not text:
                return False
            self._start_session(text)
            return True

        # === LIVE ===
        if self._committed.startswith(text):
            # Deletion from the end (or no edit): the entry keeps the high-water mark
            return False

        if text.startswith(self._committed):
            self._committed = text
            self._live.text = text
            return True

        # Divergence: freeze the current entry as-is and start over
        logger.debug(f'History: divergence "{self._committed}" -> "{text}"')
        self._start_session(text)
        return True

    def _start_session(self, text):
        entry = HistoryEntry(text)
        self.entries.append(entry)
        self._live = entry
        self._committed = text
        logger.debug(f'History: new session "{text}" (#{len(self.entries)})')
        self._trim()

    def clear(self):
        """
        Freeze the current session and go IDLE (the "clear text" action).
        凍結目前階段並回到閒置狀態。

        No entry is created or changed, so the history never needs saving.
        """
        if self._live is not None:
            logger.debug(f'History: cleared, froze "{self._committed}"')
        self._reset()

    def resume(self, entry):
        """
        Make a stored entry the live session again.
        重新載入一筆舊紀錄作為目前階段。

        Args:
            entry: A HistoryEntry from self.entries.

        Returns:
            str: The entry text, which the caller puts into the buffer.

        Raises:
            KeyError: If entry is not part of this history.
        """
        if not any(e is entry for e in self.entries):
            raise KeyError(f'Not a history entry of this tracker: {entry!r}')

        if self.move_resumed_to_end and self.entries[-1] is not entry:
            self.entries = [e for e in self.entries if e is not entry]
            self.entries.append(entry)

        self._live = entry
        self._committed = entry.text
        return entry.text

    def _trim(self):
        if self.max_entries <= 0:
            return
        while len(self.entries) > self.max_entries:
            oldest = self.entries[0]
            logger.debug(f'History: dropping oldest entry "{oldest.text}"')
            del self.entries[0]

    def texts(self):
        """Entry texts in creation order (the persisted form)."""
        return [entry.text for entry in self.entries]

    def display_entries(self, order='newest_first'):
        """
        Entries in display order.

        Args:
            order: 'newest_first' or 'oldest_first'.

        Returns:
            list of (HistoryEntry, is_live) tuples.
        """
        if order not in HISTORY_ORDERS:
            raise ValueError(f'Unknown history order: {order}')
        entries = self.entries if order == 'oldest_first' else list(reversed(self.entries))
        return [(entry, entry is self._live) for entry in entries]

    def __len__(self):
        return len(self.entries)
