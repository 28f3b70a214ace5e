"""
Path and account settings for Brood War replay analysis.

Environment Variables:
    BWSTATS_REPLAY_DIR: Autosave replay archive (date folders of .rep files)
    BWSTATS_SETTINGS_PATH: StarCraft CSettings.json holding the account history

Usage:
    export BWSTATS_REPLAY_DIR="/path/to/Maps/Replays/AutoSave"  # Unix/Mac
    set BWSTATS_REPLAY_DIR=D:\\StarCraft\\Maps\\Replays\\AutoSave    # Windows
"""

import json
import os
from pathlib import Path
from typing import Optional


class SettingsError(Exception):
    """CSettings.json is missing, unreadable or has no account."""


def _documents_dir() -> Path:
    user_profile = os.environ.get('USERPROFILE')
    base = Path(user_profile) if user_profile else Path.home()
    return base / 'Documents'


def get_replay_dir() -> str:
    """Autosave archive root: $BWSTATS_REPLAY_DIR or the StarCraft default."""
    env_path = os.environ.get('BWSTATS_REPLAY_DIR')
    if env_path:
        return env_path
    return str(_documents_dir() / 'StarCraft' / 'Maps' / 'Replays' / 'AutoSave')


def get_settings_path() -> str:
    env_path = os.environ.get('BWSTATS_SETTINGS_PATH')
    if env_path:
        return env_path
    return str(Path.home() / 'Documents' / 'StarCraft' / 'CSettings.json')


def load_current_user(settings_path: Optional[str] = None) -> str:
    """Return the most recent account from the gateway history.

    Raises:
        SettingsError: for any problem reading or interpreting the file.
    """
    path = settings_path or get_settings_path()
    if not os.path.exists(path):
        raise SettingsError(f"settings file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8-sig') as f:
            settings = json.load(f)
    except OSError as e:
        raise SettingsError(f"failed to read settings file: {e}") from e
    except ValueError as e:
        raise SettingsError(f"failed to parse settings: {e}") from e

    history = settings.get('Gateway History') if isinstance(settings, dict) else None
    if not isinstance(history, list) or not history or not isinstance(history[0], dict) or not history[0].get('account'):
        raise SettingsError("no accounts found in settings file")

    return history[0]['account']
