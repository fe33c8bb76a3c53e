#!/usr/bin/env python3
"""
code_table.py - Cangjie (倉頡) code table and Quick (速成) code derivation
倉頡碼表及速成碼推導

================================================================================
CANGJIE AND QUICK / 倉頡與速成
================================================================================

Cangjie (倉頡) encodes every Chinese character as a sequence of 1 to 5
"radicals" (字根), each typed with one key of a normal keyboard:

倉頡輸入法以一至五個字根表示一個漢字，每個字根對應鍵盤上的一個鍵:

    Type: "hda"  → Radicals: 竹木日 → Character: 香
    Type: "etcu" → Radicals: 水廿金山 → Character: 港

Quick (速成, also called 簡易) is the simplified scheme built on top of
Cangjie. It uses only the FIRST and LAST radical of the Cangjie code:

速成（簡易）以倉頡碼為基礎，只取倉頡碼的首碼及尾碼:

    ┌───────────────────────────────────────────────────────────────────┐
    │  Character   Cangjie (倉頡)          Quick (速成)                 │
    │  ─────────   ──────────────          ────────────                 │
    │     山        山                      山        (1 radical: same) │
    │     豆        一口廿                  一廿      (first + last)    │
    │     腐        戈人戈月                戈月      (first + last)    │
    └───────────────────────────────────────────────────────────────────┘

Because Quick is mechanically derivable, the code table only stores the
Cangjie code. The Quick code is computed on demand (see lookup_cache.py for
the memoised view).

由於速成碼可由倉頡碼推導，碼表只儲存倉頡碼。

================================================================================
TABLE FILES / 碼表檔案
================================================================================

The table is a flat JSON object mapping a character to its radical string:

    {
      "香": "竹木日",
      "港": "水廿金山",
      ...
    }

The full table has ~28000 characters. A reduced table holding only the
~7000 most frequent characters can be generated with
`main.py small-mapping` for faster start-up.

================================================================================
"""

import logging

import orjson

logger = logging.getLogger(__name__)

# Placeholder rendered when a character has no known code.
# 無碼字元的顯示佔位符。
MISSING_CODE = ''

# Keyboard key -> Cangjie radical.
# 'x' (難) and 'z' (重) are special keys not used as ordinary radicals.
KEY_TO_RADICAL = {
    'a': '日',
    'b': '月',
    'c': '金',
    'd': '木',
    'e': '水',
    'f': '火',
    'g': '土',
    'h': '竹',
    'i': '戈',
    'j': '十',
    'k': '大',
    'l': '中',
    'm': '一',
    'n': '弓',
    'o': '人',
    'p': '心',
    'q': '手',
    'r': '口',
    's': '尸',
    't': '廿',
    'u': '山',
    'v': '女',
    'w': '田',
    'x': '難',
    'y': '卜',
    'z': '重',
}

RADICAL_TO_KEY = {radical: key for key, radical in KEY_TO_RADICAL.items()}


class InvalidCodeError(ValueError):
    """Raised when an empty (or otherwise unusable) Cangjie code is derived."""


def derive_quick(canonical_code):
    """
    Derive the Quick (速成) code from a Cangjie (倉頡) code.
    由倉頡碼推導速成碼。

    Rule / 規則:
        - 1 radical:   unchanged                      山 → 山
        - 2+ radicals: first radical + last radical   戈人戈月 → 戈月

    Args:
        canonical_code: The Cangjie radical string (e.g. "一口廿").
                        倉頡字根字串。

    Returns:
        str: The Quick radical string (1 or 2 radicals).
             速成字根字串（一或兩個字根）。

    Raises:
        InvalidCodeError: If canonical_code is empty or None.
                          倉頡碼為空時。
    """
    if not canonical_code:
        raise InvalidCodeError(f'Cannot derive Quick code from empty Cangjie code: {canonical_code!r}')
    if len(canonical_code) == 1:
        return canonical_code
    return canonical_code[0] + canonical_code[-1]


def to_keys(code):
    """
    Convert a radical string into the keyboard keys that type it.

    Example: to_keys("竹木日") → "hda"

    Radicals without a key (should not happen for a valid table) are kept
    as-is so that the caller still sees something meaningful.
    """
    return ''.join(RADICAL_TO_KEY.get(radical, radical) for radical in code)


def from_keys(keys):
    """
    Convert keyboard keys into a radical string.

    Example: from_keys("etcu") → "水廿金山"

    Raises:
        KeyError: If a key is not one of the 26 Cangjie keys.
    """
    return ''.join(KEY_TO_RADICAL[key] for key in keys.lower())


class EncodingTable:
    """
    Read-only mapping from a character to its Cangjie (倉頡) code.
    字元至倉頡碼的唯讀對照表。

    The table is loaded once at start-up and never changes afterwards;
    it is shared by every LookupCache built on top of it.
    碼表於啟動時載入一次，之後不會改變。

    Attributes:
        _mapping : dict
            Character -> radical string.
    """

    def __init__(self, mapping=None):
        """
        Args:
            mapping: Dict of character -> radical string.
                     If None or empty, every lookup returns None.
        """
        self._mapping = dict(mapping) if mapping else {}

    @classmethod
    def from_file(cls, path):
        """
        Load a table from a JSON file.
        從JSON檔案載入碼表。

        Entries whose key is not a single character or whose value is not
        a string are skipped with a warning.

        Raises:
            OSError: If the file cannot be read.
            orjson.JSONDecodeError: If the file is not valid JSON.
            ValueError: If the top-level JSON value is not an object.
        """
        with open(path, 'rb') as f:
            data = orjson.loads(f.read())

        if not isinstance(data, dict):
            raise ValueError(f'Invalid code table format (expected object): {path}')

        mapping = {}
        skipped = 0
        for character, code in data.items():
            if len(character) != 1 or not isinstance(code, str):
                skipped += 1
                continue
            mapping[character] = code

        if skipped:
            logger.warning(f'Skipped {skipped} malformed entries in code table: {path}')
        logger.info(f'Loaded code table: {path} ({len(mapping)} characters)')
        return cls(mapping)

    def lookup(self, character):
        """
        Return the Cangjie code of a character, or None if unknown.
        返回字元的倉頡碼；未收錄時返回None。

        None (NotFound) is a normal outcome: the caller renders
        MISSING_CODE for it and carries on with the next character.
        """
        return self._mapping.get(character)

    def __contains__(self, character):
        return character in self._mapping

    def __len__(self):
        return len(self._mapping)
