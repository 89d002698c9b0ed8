"""
Settings Persistence
====================

Stores engine settings between runs in a JSON file in the user's home
directory (`~/.vaultdedup_config.json`).

Loading applies the file field by field onto a fresh `DedupSettings`, so
unknown keys are ignored and missing keys keep their defaults. A corrupt or
invalid file is logged and the defaults are used instead.
"""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Optional, Union

from vaultdedup.core.settings import DedupSettings
from vaultdedup.utils.logger import log_config

CONFIG_PATH = Path.home() / ".vaultdedup_config.json"

logger = logging.getLogger(__name__)


def save_settings(settings: DedupSettings, path: Optional[Union[str, Path]] = None) -> Path:
    """
    Persist `settings` as pretty-printed JSON.

    Raises ValueError for invalid settings and OSError if the file cannot be
    written.
    """
    path = Path(path) if path is not None else CONFIG_PATH
    settings.validate()

    data = asdict(settings)
    log_config("Saving Settings", data, logger)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    logger.info(f"Settings saved to {path}")
    return path


def load_settings(path: Optional[Union[str, Path]] = None) -> DedupSettings:
    """
    Load settings from `path` (or the default location).

    Returns defaults when the file does not exist or cannot be used.
    """
    path = Path(path) if path is not None else CONFIG_PATH
    settings = DedupSettings()

    if not path.exists():
        logger.info(f"No settings file found at {path}, using defaults")
        return settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read settings from {path}: {e}")
        return DedupSettings()

    if not isinstance(data, dict):
        logger.error(f"Settings file {path} does not contain a JSON object")
        return DedupSettings()

    known = {f.name for f in fields(DedupSettings)}
    for key, value in data.items():
        if key in known:
            setattr(settings, key, value)
        else:
            logger.warning(f"Ignoring unknown setting '{key}' in {path}")

    try:
        settings.validate()
    except ValueError as e:
        logger.error(f"Invalid settings in {path}: {e}; using defaults")
        return DedupSettings()

    log_config("Loaded Settings", asdict(settings), logger)
    return settings
