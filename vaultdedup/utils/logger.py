"""
Centralized Logging and Security Filtering
==========================================

Logging setup for vault-dedup entry points. Vault tooling sits next to key
material and decrypted content, so every handler carries a filter that
redacts credentials before anything reaches the console or a log file.

Key Features:
-------------
- Sensitive Data Masking: Redaction of passwords, vault keys and tokens
  using regex and recursive dictionary filtering.
- Contextual Logging: Timestamps, module origin and line numbers.
- Configuration Logging: Settings are logged with secrets masked.

Library modules only call `logging.getLogger(__name__)`; configuring
handlers is left to the entry point (`main.py` / the CLI).
"""

import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional


# Relative to the working directory of the run
DEFAULT_LOG_DIR_NAME = "logs"
LOG_FILE_NAME = "vaultdedup.log"

# Sensitive field patterns to mask
SENSITIVE_FIELDS = {
    'password', 'passwd', 'pwd', 'secret', 'token', 'api_key',
    'apikey', 'auth', 'authorization', 'credentials', 'passphrase',
    'vault_key', 'master_key', 'pin'
}

# Regex patterns for sensitive data in strings
SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+[a-zA-Z0-9\-._~+/]+=*)'), 'Bearer ***'),
    # Long base64/hex runs: keys, IVs, encrypted payloads. Content fingerprints
    # are 64 hex chars and stay readable.
    (re.compile(r'\b([A-Za-z0-9+/]{80,}={0,2})'), lambda m: f"***{m.group(1)[-4:]}"),
]


def _mask_string(text: str) -> str:
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    Filtering hook that redacts sensitive information.

    Attached to both file and console handlers. Scans the message and its
    arguments for credential-like values and replaces them with masks
    ('***' or '***4a1b') before the record is emitted.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = _mask_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = mask_sensitive_data(record.args)
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    mask_sensitive_data(arg) if isinstance(arg, (dict, str)) else arg
                    for arg in record.args
                )

        return True


def mask_sensitive_data(data: Any, mask_value: str = "***") -> Any:
    """
    Recursively redact sensitive fields from complex data structures.

    Keys matching a known credential label are masked (keys and tokens keep
    their last 4 characters); strings are scanned with the regex patterns.

    Args:
        data: The input data structure (dict, list, str, etc.) to be scrubbed.
        mask_value: The string used to replace sensitive content.

    Returns:
        A copy of the input data with sensitive values masked.
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()

            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                if ('key' in key_lower or 'token' in key_lower) and isinstance(value, str) and len(value) > 4:
                    masked[key] = f"{mask_value}{value[-4:]}"
                else:
                    masked[key] = mask_value
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked

    elif isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask_value) for item in data)

    elif isinstance(data, str):
        return _mask_string(data)

    return data


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    log_format: Optional[str] = None
) -> Path:
    """
    Configure the root logger for a command-line run.

    - File Handler: detailed logs in '<log_dir>/vaultdedup.log', overwritten
      on each run.
    - Console Handler: human-readable output on stderr, so stdout stays free
      for JSON reports.

    Args:
        log_dir: Directory for the log file (defaults to './logs').
        log_level: Granularity for the persistent log file.
        console_level: Granularity for the terminal output.
        log_format: Optional custom formatting string.

    Returns:
        Path: The path of the log file.
    """
    log_dir = Path(log_dir) if log_dir is not None else Path.cwd() / DEFAULT_LOG_DIR_NAME
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    if log_format is None:
        log_format = (
            '%(asctime)s - %(name)s - %(levelname)s - '
            '[%(filename)s:%(lineno)d] - %(message)s'
        )
    formatter = logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(min(log_level, console_level))

    # Remove existing handlers to avoid duplicates on repeated setup
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug(f"Logging initialized - log file: {log_file}")
    return log_file


def shutdown_logging():
    """
    Flush and close all root handlers. Call before process exit.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)


def log_config(config_name: str, config_data: Dict[str, Any], logger: Optional[logging.Logger] = None):
    """
    Log configuration settings with automatic sensitive data masking.

    Args:
        config_name: Name of the configuration being logged
        config_data: Dictionary of configuration settings
        logger: Optional logger instance (uses this module's logger if not provided)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    masked_config = mask_sensitive_data(config_data)

    logger.info(f"Configuration: {config_name}")
    logger.debug(f"{config_name} details: {json.dumps(masked_config, indent=2, default=str)}")

