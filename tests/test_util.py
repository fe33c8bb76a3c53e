#!/usr/bin/env python3
# tests/test_util.py - Unit tests for util.py

import pytest
import json
import os
import tempfile
import shutil
from unittest.mock import patch
import sys

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import util


class TestGetConfigData:
    """Test suite for get_config_data() function"""

    @pytest.fixture
    def temp_dirs(self):
        """Create temporary directories for testing"""
        temp_home = tempfile.mkdtemp()
        temp_data = tempfile.mkdtemp()

        yield {
            'home': temp_home,
            'data': temp_data,
            'config_dir': os.path.join(temp_home, '.config', 'sucheng-chazi'),
            'config_file': os.path.join(temp_home, '.config', 'sucheng-chazi', 'config.json'),
            'default_config': os.path.join(temp_data, 'config.json')
        }

        # Cleanup
        shutil.rmtree(temp_home, ignore_errors=True)
        shutil.rmtree(temp_data, ignore_errors=True)

    @pytest.fixture
    def default_config_data(self):
        """Sample default configuration"""
        return {
            "mapping": "cangjie_mapping.json",
            "use_small_mapping": False,
            "display_mode": "quick",
            "history": {
                "order": "newest_first",
                "move_resumed_to_end": False,
                "max_entries": 0
            },
            "log_level": "WARNING"
        }

    def _write(self, path, data):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)

    def _get_config(self, temp_dirs):
        with patch('util.get_user_config_dir', return_value=temp_dirs['config_dir']):
            with patch('util.get_default_config_path', return_value=temp_dirs['default_config']):
                return util.get_config_data()

    def test_no_warnings_when_config_exists_and_valid(self, temp_dirs, default_config_data):
        """Test that no warnings are returned when config exists and is valid"""
        self._write(temp_dirs['default_config'], default_config_data)
        self._write(temp_dirs['config_file'], default_config_data)

        config, warnings = self._get_config(temp_dirs)

        assert warnings == ""
        assert config["mapping"] == "cangjie_mapping.json"

    def test_warning_when_config_not_found(self, temp_dirs, default_config_data):
        """Test that a missing config.json is copied from the default"""
        self._write(temp_dirs['default_config'], default_config_data)

        config, warnings = self._get_config(temp_dirs)

        assert "config.json is not found" in warnings
        assert "Copying the default config.json" in warnings
        assert config == default_config_data
        # Verify config file was created
        assert os.path.exists(temp_dirs['config_file'])

    def test_warning_when_key_missing(self, temp_dirs, default_config_data):
        """Test that a missing key is filled in from the default"""
        self._write(temp_dirs['default_config'], default_config_data)
        user_config = dict(default_config_data)
        del user_config['display_mode']
        self._write(temp_dirs['config_file'], user_config)

        config, warnings = self._get_config(temp_dirs)

        assert '"display_mode"' in warnings
        assert "was not found" in warnings
        assert config["display_mode"] == "quick"

    def test_warning_when_type_mismatch(self, temp_dirs, default_config_data):
        """Test that a value of the wrong type is replaced"""
        self._write(temp_dirs['default_config'], default_config_data)
        user_config = dict(default_config_data)
        user_config['use_small_mapping'] = "yes"
        self._write(temp_dirs['config_file'], user_config)

        config, warnings = self._get_config(temp_dirs)

        assert "Type mismatch" in warnings
        assert '"use_small_mapping"' in warnings
        assert config['use_small_mapping'] is False

    def test_nested_history_keys_are_validated(self, temp_dirs, default_config_data):
        """Test that the history section is checked key by key"""
        self._write(temp_dirs['default_config'], default_config_data)
        user_config = dict(default_config_data)
        user_config['history'] = {"order": "oldest_first", "max_entries": "10"}
        self._write(temp_dirs['config_file'], user_config)

        config, warnings = self._get_config(temp_dirs)

        assert '"history.move_resumed_to_end"' in warnings
        assert '"history.max_entries"' in warnings
        assert config['history'] == {"order": "oldest_first", "move_resumed_to_end": False, "max_entries": 0}

    def test_multiple_warnings(self, temp_dirs, default_config_data):
        """Test that multiple warnings are separated by newlines"""
        self._write(temp_dirs['default_config'], default_config_data)
        user_config = dict(default_config_data)
        del user_config['display_mode']
        del user_config['log_level']
        self._write(temp_dirs['config_file'], user_config)

        config, warnings = self._get_config(temp_dirs)

        assert warnings.count('\n') >= 1
        assert '"display_mode"' in warnings
        assert '"log_level"' in warnings

    def test_json_decode_error_returns_default_config(self, temp_dirs, default_config_data):
        """Test that a broken config.json falls back to the default"""
        self._write(temp_dirs['default_config'], default_config_data)
        os.makedirs(temp_dirs['config_dir'], exist_ok=True)
        with open(temp_dirs['config_file'], 'w', encoding='utf-8') as f:
            f.write("{ invalid json }")

        config, warnings = self._get_config(temp_dirs)

        assert config == default_config_data
        assert warnings == ""

    def test_bundled_default_config_is_valid(self):
        """Test that data/config.json loads and has every key"""
        config = util.get_default_config_data()

        assert config["display_mode"] in ("quick", "cangjie")
        assert config["history"]["order"] in ("newest_first", "oldest_first")


class TestSaveConfigData:
    """Test suite for save_config_data()"""

    def test_save_and_reload(self, tmp_path):
        config_dir = str(tmp_path / 'sucheng-chazi')
        with patch('util.get_user_config_dir', return_value=config_dir):
            assert util.save_config_data({"display_mode": "cangjie"}) is True

        with open(os.path.join(config_dir, 'config.json'), encoding='utf-8') as f:
            assert json.load(f) == {"display_mode": "cangjie"}

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('')
        with patch('util.get_user_config_dir', return_value=str(blocker)):
            assert util.save_config_data({}) is False


class TestGetMappingPath:
    """Test suite for get_mapping_path()"""

    @pytest.fixture
    def dirs(self, tmp_path):
        user_dir = tmp_path / 'user'
        data_dir = tmp_path / 'data'
        user_dir.mkdir()
        data_dir.mkdir()
        (data_dir / 'cangjie_mapping.json').write_text('{}')
        (data_dir / 'cangjie_mapping_small.json').write_text('{}')
        with patch('util.get_user_config_dir', return_value=str(user_dir)):
            with patch('util.get_datadir', return_value=str(data_dir)):
                yield user_dir, data_dir

    def test_data_dir_table(self, dirs):
        _, data_dir = dirs
        path = util.get_mapping_path({"mapping": "cangjie_mapping.json"})
        assert path == str(data_dir / 'cangjie_mapping.json')

    def test_user_table_wins(self, dirs):
        user_dir, _ = dirs
        (user_dir / 'cangjie_mapping.json').write_text('{}')

        path = util.get_mapping_path({"mapping": "cangjie_mapping.json"})

        assert path == str(user_dir / 'cangjie_mapping.json')

    def test_small_table_preferred(self, dirs):
        _, data_dir = dirs
        path = util.get_mapping_path({"mapping": "cangjie_mapping.json", "use_small_mapping": True})
        assert path == str(data_dir / 'cangjie_mapping_small.json')

    def test_unknown_table_falls_back(self, dirs):
        _, data_dir = dirs
        path = util.get_mapping_path({"mapping": "nope.json"})
        assert path == str(data_dir / 'cangjie_mapping.json')


class TestSmallMapping:
    """Test suite for small_mapping_name() and generate_small_mapping()"""

    def test_small_mapping_name(self):
        assert util.small_mapping_name('cangjie_mapping.json') == 'cangjie_mapping_small.json'
        assert util.small_mapping_name('table') == 'table_small.json'

    def test_generate_keeps_rank_order(self):
        full = {'香': '竹木日', '港': '水廿金山', '山': '山'}

        small = util.generate_small_mapping(['山', '香'], full)

        assert small == {'山': '山', '香': '竹木日'}
        assert list(small) == ['山', '香']

    def test_generate_skips_unknown_and_duplicates(self):
        full = {'香': '竹木日'}

        small = util.generate_small_mapping(['香', '速', '香'], full)

        assert small == {'香': '竹木日'}

    def test_write_and_load_json(self, tmp_path):
        path = str(tmp_path / 'out.json')
        util.write_json_file(path, {'香': '竹木日'})

        with open(path, encoding='utf-8') as f:
            assert '竹木日' in f.read()
        assert util.load_json_file(path) == {'香': '竹木日'}


class TestLoggingLevel:
    """Test suite for get_logging_level()"""

    def test_known_level(self):
        import logging
        assert util.get_logging_level({"log_level": "debug"}) == logging.DEBUG

    def test_unknown_level_is_warning(self):
        import logging
        assert util.get_logging_level({"log_level": "LOUD"}) == logging.WARNING
        assert util.get_logging_level({}) == logging.WARNING


class TestGetDatadir:
    """Test suite for get_datadir()"""

    def test_checkout_data_dir(self):
        with patch.dict(sys.modules, {'paths': None}):
            datadir = util.get_datadir()

        assert os.path.isfile(os.path.join(datadir, 'config.json'))
        assert os.path.isfile(os.path.join(datadir, util.DEFAULT_MAPPING_FILE_NAME))

    def test_installed_data_dir(self, tmp_path):
        """Test that an installed copy without data/ next to it uses sys.prefix"""
        with patch.dict(sys.modules, {'paths': None}):
            with patch('os.path.isdir', return_value=False):
                with patch.object(sys, 'prefix', str(tmp_path)):
                    datadir = util.get_datadir()

        assert datadir == os.path.join(str(tmp_path), 'share', 'sucheng-chazi')
