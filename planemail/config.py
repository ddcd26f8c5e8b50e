"""
Configuration and account store persistence.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Default paths (can be overridden)
_DATA_DIR = Path(__file__).parent.parent
CONFIG_FILE = _DATA_DIR / "config.json"
CREDENTIALS_FILE = _DATA_DIR / "credentials.json"
ACCOUNTS_FILE = _DATA_DIR / "accounts.json"

DEFAULT_SETTINGS = {
    "page_size": 50,
    "num_retries": 3,
    "search_category": "travel",
    "oauth_port": 8989,
    "output_dir": ".",
}


def load_config(config_file=None):
    """Load optional settings from config.json, filling in defaults.

    Args:
        config_file: Path to config file. Defaults to config.json.

    Returns:
        Settings dict. Defaults are used if the file is missing or corrupt.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    config = {}
    config_path = Path(config_file)
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                config = data
            else:
                logger.warning("%s has invalid format, using defaults", config_path.name)
        except json.JSONDecodeError as e:
            logger.warning("%s is corrupted (%s), using defaults", config_path.name, e)

    for key, value in DEFAULT_SETTINGS.items():
        config.setdefault(key, value)
    return config


def load_accounts(accounts_file=None):
    """Load the account store.

    Args:
        accounts_file: Path to accounts file. Defaults to accounts.json.

    Returns:
        Dict of email -> stored credential info, in insertion order.
    """
    if accounts_file is None:
        accounts_file = ACCOUNTS_FILE

    accounts_path = Path(accounts_file)
    if not accounts_path.exists():
        return {}

    try:
        with open(accounts_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Warning: {accounts_path.name} is corrupted ({e})")
        print("Starting with no accounts. Add your accounts again.")
        backup_path = accounts_path.with_suffix('.json.bak')
        try:
            accounts_path.replace(backup_path)
            print(f"Corrupt file backed up to: {backup_path}")
        except OSError as err:
            logger.warning("Could not back up %s: %s", accounts_path, err)
        return {}

    if not isinstance(data, dict):
        print(f"Warning: {accounts_path.name} has invalid format, starting fresh")
        return {}
    return data


def save_accounts(accounts, accounts_file=None):
    """Save the account store with an atomic write.

    Args:
        accounts: Dict of email -> stored credential info.
        accounts_file: Path to accounts file. Defaults to accounts.json.
    """
    if accounts_file is None:
        accounts_file = ACCOUNTS_FILE

    accounts_path = Path(accounts_file)
    temp_file = accounts_path.with_suffix('.json.tmp')
    try:
        with open(temp_file, 'w', encoding='utf-8') as f:
            json.dump(accounts, f, indent=2)
        temp_file.replace(accounts_path)
    finally:
        if temp_file.exists():
            temp_file.unlink()
