import codecs
import json
import logging
import os
import sys

import orjson
from gi.repository import GLib

logger = logging.getLogger(__name__)

DEFAULT_MAPPING_FILE_NAME = 'cangjie_mapping.json'
SMALL_MAPPING_SUFFIX = '_small'

NAME_TO_LOGGING_LEVEL = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def get_package_name():
    '''
    returns 'sucheng-chazi'
    '''
    return 'sucheng-chazi'


def get_version():
    return '0.1.0'


def get_datadir():
    '''
    Return the path to the data directory holding the default config.json
    and the code tables.

    Looked up in order: the auto-generated paths module, the data/ directory
    of a repository checkout, then share/sucheng-chazi under sys.prefix where
    pyproject.toml installs the data files.
    '''
    try:
        # Try to import the auto-generated paths from installation
        import paths
        return paths.INSTALL_ROOT
    except ImportError:
        pass
    # Development environment (the repository checkout)
    checkout = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'data')
    if os.path.isdir(checkout):
        return checkout
    return os.path.join(sys.prefix, 'share', get_package_name())


def get_default_config_path():
    '''
    Return the path to the default config file in the data directory.
    This is the config.json that gets copied to user's home on first run.
    '''
    return os.path.join(get_datadir(), 'config.json')


def get_user_config_dir():
    '''
    Return the path to the config directory under $HOME.
    Typically, it would be $HOME/.config/sucheng-chazi
    '''
    return os.path.join(GLib.get_user_config_dir(), get_package_name())


def get_homedir():
    '''
    Return the path to the $HOME directory.
    '''
    return GLib.get_home_dir()


def get_user_config_dir_relative_to_home():
    return get_user_config_dir().replace(get_homedir(), '$' + '{HOME}')


def get_log_path():
    return os.path.join(get_user_config_dir(), get_package_name() + '.log')


def get_config_data():
    '''
    This function is to load the config JSON file from the HOME/.config/sucheng-chazi
    When the file is not present (e.g., after initial installation), it will copy
    the default config.json from the data directory.

    Returns:
        tuple: (config_data, warnings_string) where warnings_string is empty if no warnings
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')
    default_config_path = get_default_config_path()
    with codecs.open(default_config_path, encoding='utf-8') as f:
        default_config = json.load(f)
    warnings = ""

    if not os.path.exists(configfile_path):
        warning_msg = f'config.json is not found under {get_user_config_dir()} . Copying the default config.json from {default_config_path} ..'
        logger.warning(warning_msg)
        warnings = warning_msg
        os.makedirs(get_user_config_dir(), exist_ok=True)
        with open(configfile_path, 'w', encoding='utf-8') as f:
            json.dump(default_config, f, ensure_ascii=False, indent=2)
        return default_config, warnings
    try:
        with codecs.open(configfile_path, encoding='utf-8') as f:
            config_data = json.load(f)
    except json.decoder.JSONDecodeError as e:
        logger.error(f'Error loading the config.json under {get_user_config_dir()}')
        logger.error(e)
        logger.error(f'Using (but not copying) the default config.json from {default_config_path} ..')
        return default_config, warnings

    for k in default_config:
        if k not in config_data:
            warning_msg = f'The key "{k}" was not found in the config.json under {get_user_config_dir()} . Copying the default key-value'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]
        if type(config_data[k]) != type(default_config[k]):
            warning_msg = f'Type mismatch found for the key "{k}" between config.json under {get_user_config_dir()} and default config.json. Replacing the value of this key with the value in default config.json'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            config_data[k] = default_config[k]

    # Deep validation for the nested "history" section
    history = config_data["history"]
    default_history = default_config.get("history", {})
    for k, default_value in default_history.items():
        if k not in history or type(history[k]) != type(default_value):
            warning_msg = f'The "history.{k}" key is missing or has invalid type. Resetting to default.'
            logger.warning(warning_msg)
            warnings += ("\n" if warnings else "") + warning_msg
            history[k] = default_value

    return config_data, warnings


def save_config_data(config_data):
    '''
    Save config data to the user config directory.

    Args:
        config_data: Dictionary containing configuration data to save

    Returns:
        bool: True if save was successful, False otherwise
    '''
    configfile_path = os.path.join(get_user_config_dir(), 'config.json')

    try:
        # Ensure the config directory exists
        os.makedirs(get_user_config_dir(), exist_ok=True)

        # Write the config file with proper formatting
        with open(configfile_path, 'w', encoding='utf-8') as f:
            json.dump(config_data, f, ensure_ascii=False, indent=2)

        logger.info(f'Configuration saved successfully to {configfile_path}')
        return True
    except OSError as e:
        logger.error(f'Error saving config.json to {configfile_path}')
        logger.error(e)
        return False


def get_default_config_data():
    default_config_path = get_default_config_path()
    if not os.path.exists(default_config_path):
        logger.error(f'config.json is not found under {default_config_path}. Please check that installation was done without problem!')
        return None
    with codecs.open(default_config_path, encoding='utf-8') as f:
        return json.load(f)


def get_logging_level(config):
    return NAME_TO_LOGGING_LEVEL.get(str(config.get('log_level', 'WARNING')).upper(), logging.WARNING)


# ─── Code Tables ──────────────────────────────────────────────────────

def small_mapping_name(mapping_file_name):
    '''
    "cangjie_mapping.json" -> "cangjie_mapping_small.json"
    '''
    base, ext = os.path.splitext(mapping_file_name)
    return base + SMALL_MAPPING_SUFFIX + (ext or '.json')


def get_mapping_path(config):
    '''
    Return the path of the code table to load.

    The file named by config["mapping"] is looked up under the user config
    directory first, then under the data directory. When
    config["use_small_mapping"] is set, the reduced table of the same name
    is preferred if it exists. Falls back to the bundled full table.
    '''
    mapping_file_name = config.get('mapping') or DEFAULT_MAPPING_FILE_NAME
    candidates = []
    if config.get('use_small_mapping'):
        candidates.append(small_mapping_name(mapping_file_name))
    candidates.append(mapping_file_name)

    for file_name in candidates:
        for directory in (get_user_config_dir(), get_datadir()):
            path = os.path.join(directory, file_name)
            if os.path.exists(path):
                logger.debug(f'Found code table: {path}')
                return path

    logger.warning(f'Code table "{mapping_file_name}" not found. Using {DEFAULT_MAPPING_FILE_NAME}')
    return os.path.join(get_datadir(), DEFAULT_MAPPING_FILE_NAME)


def generate_small_mapping(ranked_characters, full_mapping):
    '''
    Build the reduced code table for frequent characters.

    Args:
        ranked_characters: Characters ordered by frequency (most frequent first).
        full_mapping: Dict of character -> Cangjie code.

    Returns:
        dict: character -> Cangjie code for every ranked character present in
              full_mapping, in rank order. Duplicates and unknown characters
              are skipped.
    '''
    small_mapping = {}
    missing = 0
    for character in ranked_characters:
        if character in small_mapping:
            continue
        if character not in full_mapping:
            missing += 1
            continue
        small_mapping[character] = full_mapping[character]
    if missing:
        logger.info(f'{missing} ranked characters are not in the full code table')
    return small_mapping


def load_json_file(path):
    with open(path, 'rb') as f:
        return orjson.loads(f.read())


def write_json_file(path, data):
    '''
    Write data as UTF-8 JSON (non-ASCII characters are kept as-is).
    '''
    with open(path, 'wb') as f:
        f.write(orjson.dumps(data))
