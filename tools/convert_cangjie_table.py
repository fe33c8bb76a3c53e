#!/usr/bin/env python3
"""
Convert a letter-coded Cangjie dictionary (RIME cangjie5.dict.yaml style)
into the radical JSON code table used by 速成查字.

Input lines after the "..." header marker look like:

    香	hda
    港	etcu

and the output is:

    {"香": "竹木日", "港": "水廿金山"}

When a character has several codes, the first one wins (RIME lists the
preferred code first).

Usage:
    python tools/convert_cangjie_table.py cangjie5.dict.yaml data/cangjie_mapping.json
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))

from code_table import from_keys
import util

logger = logging.getLogger(__name__)


def parse_table_lines(lines):
    """
    Parse the dictionary body.

    Returns:
        tuple: (mapping, skipped_line_count)
    """
    mapping = {}
    skipped = 0
    # Plain "char<TAB>code" files have no YAML header
    parsing = not any(line.strip() == '...' for line in lines)

    for line in lines:
        stripped = line.strip()
        if not parsing:
            if stripped == '...':
                parsing = True
            continue
        if not stripped or stripped.startswith('#'):
            continue

        parts = stripped.split('\t')
        if len(parts) < 2 or len(parts[0]) != 1:
            skipped += 1
            continue
        character, keys = parts[0], parts[1]
        if character in mapping:
            continue
        try:
            mapping[character] = from_keys(keys)
        except KeyError:
            logger.warning(f'Unknown Cangjie key in line: {stripped}')
            skipped += 1

    return mapping, skipped


def main():
    parser = argparse.ArgumentParser(
        description="Convert a letter-coded Cangjie dictionary into a radical JSON code table")
    parser.add_argument('input', help='RIME-style dictionary (char<TAB>keys per line)')
    parser.add_argument('output', help='Output JSON path')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)-8s %(message)s')

    with open(args.input, encoding='utf-8') as f:
        lines = f.readlines()

    mapping, skipped = parse_table_lines(lines)
    util.write_json_file(args.output, mapping)
    print(f"Wrote {len(mapping)} characters to {args.output} ({skipped} lines skipped)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
