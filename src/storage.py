#!/usr/bin/env python3
# storage.py - Persistence of input history and the Quick code cache

import logging
import os

import orjson

logger = logging.getLogger(__name__)

HISTORY_FILE_NAME = 'history.json'
CACHE_FILE_NAME = 'quick_cache.json'


class StorageUnavailable(OSError):
    """Raised when a state file cannot be read or written."""


class JsonStore:
    """
    Stores the history and the Quick code cache as JSON files in a directory
    (normally $HOME/.config/sucheng-chazi/).

        history.json      ["香港", "山竹牛肉", ...]   (oldest first)
        quick_cache.json  {"香": "竹日", ...}

    Loading never fails: a missing or broken file loads as empty. Saving
    returns False on failure and the caller keeps working in memory; the
    next successful save overwrites whatever is on disk.
    """

    def __init__(self, directory):
        self.directory = directory
        self.history_path = os.path.join(directory, HISTORY_FILE_NAME)
        self.cache_path = os.path.join(directory, CACHE_FILE_NAME)

    def _read(self, path):
        try:
            with open(path, 'rb') as f:
                return orjson.loads(f.read())
        except (OSError, orjson.JSONDecodeError) as e:
            raise StorageUnavailable(f'Cannot read {path}: {e}') from e

    def _write(self, path, data):
        try:
            os.makedirs(self.directory, exist_ok=True)
            tmp_path = path + '.tmp'
            with open(tmp_path, 'wb') as f:
                f.write(orjson.dumps(data))
            os.replace(tmp_path, path)
        except (OSError, TypeError) as e:
            raise StorageUnavailable(f'Cannot write {path}: {e}') from e

    def load_history(self):
        """Return the saved entry texts (oldest first), or [] if unavailable."""
        if not os.path.exists(self.history_path):
            return []
        try:
            data = self._read(self.history_path)
        except StorageUnavailable as e:
            logger.error(e)
            return []
        if not isinstance(data, list):
            logger.error(f'Invalid history format (expected list): {self.history_path}')
            return []
        return [text for text in data if isinstance(text, str)]

    def save_history(self, texts):
        try:
            self._write(self.history_path, list(texts))
        except StorageUnavailable as e:
            logger.error(e)
            return False
        logger.debug(f'Saved {len(texts)} history entries to {self.history_path}')
        return True

    def load_cache(self):
        """Return the saved cache blob, or {} if unavailable."""
        if not os.path.exists(self.cache_path):
            return {}
        try:
            data = self._read(self.cache_path)
        except StorageUnavailable as e:
            logger.error(e)
            return {}
        if not isinstance(data, dict):
            logger.error(f'Invalid cache format (expected object): {self.cache_path}')
            return {}
        return data

    def save_cache(self, blob):
        try:
            self._write(self.cache_path, blob)
        except StorageUnavailable as e:
            logger.error(e)
            return False
        logger.debug(f'Saved {len(blob)} cache entries to {self.cache_path}')
        return True

    def clear_history(self):
        """Remove the history file. Returns False if it could not be removed."""
        try:
            if os.path.exists(self.history_path):
                os.remove(self.history_path)
        except OSError as e:
            logger.error(f'Cannot remove {self.history_path}: {e}')
            return False
        return True
