#!/usr/bin/env python3
"""
main.py - Command-line entry point for 速成查字 (Quick/Cangjie code lookup)
速成查字命令列入口

================================================================================
WHAT THIS FILE DOES / 此檔案的用途
================================================================================

This is the shell that owns an AppState: it loads the configuration and the
code table, wires the history/cache store, and talks to the user.

此檔案負責載入設定及碼表、連接儲存，並與使用者互動。

    main.py (THIS FILE)          ← config, logging, command dispatch
        │
        └──► app_state.py        ← buffer, codes, history
                  │
                  ├──► code_table.py     (Cangjie table, Quick derivation)
                  ├──► lookup_cache.py   (memoised Quick codes)
                  ├──► history.py        (session state machine)
                  └──► storage.py        (~/.config/sucheng-chazi/*.json)

================================================================================
USAGE / 使用方法
================================================================================

    # Show the Quick code of every character
    # 顯示每個字的速成碼
    python main.py lookup 香港

    # Show the Cangjie code, as keyboard keys
    # 以鍵盤字母顯示倉頡碼
    python main.py lookup 香港 --mode cangjie --keys

    # Interactive session with history
    # 互動模式（附輸入紀錄）
    python main.py interactive

    # List or wipe the saved history
    # 列出或清除輸入紀錄
    python main.py history
    python main.py history --clear

    # Build the reduced table of frequent characters
    # 產生常用字碼表
    python main.py small-mapping ranks.json cangjie_mapping.json -o cangjie_mapping_small.json

================================================================================
CODE TABLE / 碼表
================================================================================

    The bundled data/cangjie_mapping.json is a small sample (a few dozen
    characters); everything else shows as '-'. Convert a full Cangjie
    dictionary (e.g. RIME's cangjie5.dict.yaml) into the user config
    directory, where it takes precedence over the bundled table:
    內附碼表只是少量樣本；請先轉換完整的倉頡字典：

    python tools/convert_cangjie_table.py cangjie5.dict.yaml ~/.config/sucheng-chazi/cangjie_mapping.json

================================================================================
INTERACTIVE COMMANDS / 互動指令
================================================================================

    Any line that does not start with ':' replaces the whole text box.
    不以 ':' 開頭的輸入會取代整個文字框內容。

    :type TEXT     append TEXT, one character at a time
    :back [N]      delete N characters from the end (default 1)
    :clear         clear the text box (the current session is kept in history)
    :history       list the history, newest first
    :load N        load history entry N into the text box
    :mode MODE     switch between 'quick' (速成) and 'cangjie' (倉頡)
    :quit          leave

================================================================================
"""

import argparse
import logging
import os
import sys

# Add src directory to path if needed
src_dir = os.path.dirname(os.path.abspath(__file__))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from app_state import DISPLAY_MODES, AppState
from code_table import EncodingTable, to_keys
from storage import JsonStore
import util

logger = logging.getLogger(__name__)

PROMPT = '> '
MISSING_CODE_TEXT = '-'


def setup_logging(config, verbose=False):
    """
    Log to ~/.config/sucheng-chazi/sucheng-chazi.log.
    Level comes from config["log_level"]; --verbose forces DEBUG.
    """
    level = logging.DEBUG if verbose else util.get_logging_level(config)
    logging.basicConfig(filename=util.get_log_path(),
                        level=level,
                        format='%(asctime)s %(levelname)-8s %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')


def load_table(config):
    """
    Load the code table selected by the config.

    Returns:
        EncodingTable, or None if the table could not be loaded.
    """
    mapping_path = util.get_mapping_path(config)
    try:
        return EncodingTable.from_file(mapping_path)
    except (OSError, ValueError) as e:
        logger.error(f'Error in loading code table: {mapping_path}')
        logger.error(e)
        print(f"ERROR: Cannot load code table {mapping_path}: {e}")
        return None


def format_rows(rows, mode, keys=False):
    """
    One "character<TAB>code" line per CharacterCode.

    Args:
        rows: List of CharacterCode.
        mode: 'quick' or 'cangjie'.
        keys: If True, print keyboard keys instead of radicals.
    """
    lines = []
    for row in rows:
        code = row.code(mode)
        if not code:
            code = MISSING_CODE_TEXT
        elif keys:
            code = to_keys(code)
        lines.append(f"{row.character}\t{code}")
    return lines


def format_history(state):
    lines = []
    for i, (entry, is_live) in enumerate(state.history_entries()):
        marker = '*' if is_live else ' '
        lines.append(f"{marker}{i:3d}  {entry.text}")
    return lines


def run_command(state, line, out=print):
    """
    Apply one line of interactive input to the state.
    處理互動模式中的一行輸入。

    Returns:
        bool: False when the user asked to quit.
    """
    if not line.startswith(':'):
        state.set_buffer(line)
        _print_buffer(state, out)
        return True

    command, _, argument = line[1:].partition(' ')
    argument = argument.strip()

    if command in ('q', 'quit'):
        return False
    elif command == 'type':
        state.type_text(argument)
        _print_buffer(state, out)
    elif command == 'back':
        try:
            count = int(argument) if argument else 1
        except ValueError:
            out(f"ERROR: Not a number: {argument}")
            return True
        state.backspace(count)
        _print_buffer(state, out)
    elif command == 'clear':
        state.clear()
        _print_buffer(state, out)
    elif command == 'history':
        lines = format_history(state)
        if not lines:
            out("(no history)")
        for history_line in lines:
            out(history_line)
    elif command == 'load':
        try:
            state.load_entry(int(argument))
        except (ValueError, IndexError):
            out(f"ERROR: No history entry: {argument}")
            return True
        _print_buffer(state, out)
    elif command == 'mode':
        try:
            state.set_mode(argument)
        except ValueError:
            out(f"ERROR: Mode must be one of: {', '.join(DISPLAY_MODES)}")
            return True
        _print_buffer(state, out)
    else:
        out(f"ERROR: Unknown command: {command}")
    return True


def _print_buffer(state, out):
    out(f"[{state.mode}] {state.buffer}")
    for row_line in format_rows(state.rows(), state.mode):
        out(f"  {row_line}")


def cmd_lookup(args, config):
    """
    Print the code of every character of the given text.
    顯示文字中每個字的字碼。
    """
    table = load_table(config)
    if table is None:
        return 1

    state = AppState(table, mode=args.mode or config['display_mode'])
    state.set_buffer(args.text)
    for line in format_rows(state.rows(), state.mode, keys=args.keys):
        print(line)
    return 0


def cmd_interactive(args, config):
    """
    Line-oriented lookup session with persisted history.
    互動查字模式。
    """
    table = load_table(config)
    if table is None:
        return 1

    store = JsonStore(util.get_user_config_dir())
    state = AppState.from_config(table, config, store=store)
    if args.mode:
        state.set_mode(args.mode)

    print(f"速成查字 {util.get_version()} ({len(table)} characters). Type :quit to leave.")
    while True:
        try:
            line = input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not run_command(state, line):
            break
    return 0


def cmd_history(args, config):
    """List or wipe the saved history."""
    store = JsonStore(util.get_user_config_dir())
    if args.clear:
        if not store.clear_history():
            print(f"ERROR: Cannot remove {store.history_path}")
            return 1
        print("History cleared.")
        return 0

    texts = store.load_history()
    if config['history']['order'] == 'newest_first':
        texts = list(reversed(texts))
    if not texts:
        print("(no history)")
    for i, text in enumerate(texts):
        print(f"{i:3d}  {text}")
    return 0


def cmd_small_mapping(args, config):
    """
    Build the reduced code table from a frequency-ranked character list.
    依常用字排名產生精簡碼表。
    """
    try:
        ranked = util.load_json_file(args.ranks)
        full_mapping = util.load_json_file(args.mapping)
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1

    if not isinstance(ranked, list) or not isinstance(full_mapping, dict):
        print("ERROR: RANKS must be a JSON list and MAPPING a JSON object")
        return 1

    output_path = args.output or os.path.join(os.path.dirname(args.mapping) or '.',
                                              util.small_mapping_name(os.path.basename(args.mapping)))
    small_mapping = util.generate_small_mapping(ranked, full_mapping)
    try:
        util.write_json_file(output_path, small_mapping)
    except OSError as e:
        print(f"ERROR: Cannot write {output_path}: {e}")
        return 1

    print(f"Wrote {len(small_mapping)} of {len(full_mapping)} characters to {output_path}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description="速成查字 - Quick (速成) and Cangjie (倉頡) code lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py lookup 香港
  python main.py lookup 香港 --mode cangjie --keys
  python main.py interactive
  python main.py history --clear
  python main.py small-mapping ranks.json cangjie_mapping.json

The bundled code table is only a small sample. For real use, convert a full
Cangjie dictionary first; it is picked up from the user config directory:
  python tools/convert_cangjie_table.py cangjie5.dict.yaml \\
      ~/.config/sucheng-chazi/cangjie_mapping.json
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    lookup_parser = subparsers.add_parser('lookup', help='Show the code of every character')
    lookup_parser.add_argument('text', help='Chinese text')
    lookup_parser.add_argument('-m', '--mode', choices=DISPLAY_MODES,
                               help='Code to show (default: display_mode in config.json)')
    lookup_parser.add_argument('-k', '--keys', action='store_true',
                               help='Show keyboard keys instead of radicals')

    interactive_parser = subparsers.add_parser('interactive', help='Interactive lookup with history')
    interactive_parser.add_argument('-m', '--mode', choices=DISPLAY_MODES,
                                    help='Initial display mode')

    history_parser = subparsers.add_parser('history', help='List the saved history')
    history_parser.add_argument('--clear', action='store_true', help='Remove the saved history')

    small_parser = subparsers.add_parser('small-mapping', help='Build the reduced table of frequent characters')
    small_parser.add_argument('ranks', help='JSON list of characters, most frequent first')
    small_parser.add_argument('mapping', help='Full code table (JSON object)')
    small_parser.add_argument('-o', '--output', default=None,
                              help='Output path (default: <mapping>_small.json next to the mapping)')

    return parser


def main(argv=None):
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    os.umask(0o077)

    # Create user specific data directory
    user_configdir = util.get_user_config_dir()
    os.makedirs(user_configdir, 0o700, True)

    config, _ = util.get_config_data()
    setup_logging(config, args.verbose)
    logger.info(f'main.py user_configdir: {user_configdir}')
    logger.info(f'main.py util.get_datadir(): {util.get_datadir()}')

    # Dispatch to command handler
    if args.command == 'lookup':
        return cmd_lookup(args, config)
    elif args.command == 'interactive':
        return cmd_interactive(args, config)
    elif args.command == 'history':
        return cmd_history(args, config)
    elif args.command == 'small-mapping':
        return cmd_small_mapping(args, config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
