"""
Configuration of the database location.

The storage root is resolved, in order, from the ``FPM_DB_DIR`` environment
variable, from the ``db_path`` key of ``~/.fpm/settings.json``, and finally
defaults to ``~/.fpm-db``.
"""

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from constants import DB_DIR_ENV_VAR, DEFAULT_DB_DIRNAME
from core.exceptions import FileWriteError
from core.file_io import FilesystemFileReader, FilesystemFileWriter
from log import get_logger

CONFIG_DIR = Path.home() / ".fpm"
CONFIG_FILE = CONFIG_DIR / "settings.json"

logger = get_logger(__name__)


def get_config_file(config_file: Path = CONFIG_FILE) -> dict[str, Any]:
    """
    Read the settings file.

    Returns:
        The settings, or an empty mapping when the file does not exist or
        does not hold a JSON object.
    """
    if not config_file.exists():
        return {}
    file_content = FilesystemFileReader().read_file(config_file)
    try:
        data = json.loads(file_content)
    except json.JSONDecodeError:
        logger.warning("Ignoring invalid settings file %s.", config_file)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(db_path: Path, config_file: Path = CONFIG_FILE) -> None:
    """
    Store db_path in the settings file, keeping its other keys.

    Raises:
        FileReadError: If the existing settings file cannot be read.
        FileWriteError: If the settings directory or file cannot be written.
    """
    config_dir = config_file.parent
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileWriteError(
            message=f"Failed to create directory: {config_dir}",
            file_path=str(config_dir),
            original_exception=e,
        ) from e

    config = get_config_file(config_file)
    config["db_path"] = str(db_path)
    FilesystemFileWriter().write_file(config_file, json.dumps(config, indent=2))


def get_default_db_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    home = env.get("HOME")
    if not home:
        return Path(DEFAULT_DB_DIRNAME)
    return Path(home) / DEFAULT_DB_DIRNAME


def get_db_path(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Path = CONFIG_FILE,
) -> Path:
    """
    Resolve the root directory of the database.

    Args:
        environ: Environment to read from. Defaults to os.environ.
        config_file: Settings file to fall back to.

    Returns:
        The database root. It is not created here.
    """
    env = os.environ if environ is None else environ
    env_path = env.get(DB_DIR_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()

    configured = get_config_file(config_file).get("db_path")
    if isinstance(configured, str) and configured:
        return Path(configured).expanduser()

    default_path = get_default_db_path(env)
    logger.debug("%s is not defined. Defaulting to %s.", DB_DIR_ENV_VAR, default_path)
    return default_path
