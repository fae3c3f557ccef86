"""JSON files backed by pydantic models.

Used for config.json (AppConfig) and sounds.json (SavedBoard). Writes go
through a sibling ``.tmp`` file that is renamed over the target, and the
previous contents are copied to ``.bak`` first, so an interrupted save
never leaves a half-written file behind.
"""

import logging
import shutil
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from padboard.exceptions import ConfigFileInvalidError, ConfigurationError, wrap_pydantic_error

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _sibling(path: Path, extra: str) -> Path:
    return path.with_name(path.name + extra)


def read_model(path: Path, model_type: type[M]) -> M:
    """
    Parse ``path`` into ``model_type``.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ConfigFileInvalidError: If the file is blank or not JSON
        ConfigValidationError: If the JSON does not fit the model
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ConfigFileInvalidError(str(path), f"Not UTF-8 text: {e}") from e
    if not text.strip():
        raise ConfigFileInvalidError(str(path), "File is empty")

    try:
        model = model_type.model_validate_json(text)
    except ValidationError as e:
        logger.error(f"{path} does not match {model_type.__name__}: {e}")
        raise wrap_pydantic_error(e, str(path)) from e

    logger.debug(f"Read {model_type.__name__} from {path}")
    return model


def read_model_or_default(path: Path, model_type: type[M]) -> M:
    """
    Like read_model, but a missing file yields ``model_type()``.

    A file that exists but is broken still raises; the default is not
    written back.
    """
    if not path.exists():
        logger.info(f"{path} does not exist, using default {model_type.__name__}")
        return model_type()
    return read_model(path, model_type)


def write_model(model: BaseModel, path: Path, by_alias: bool = False, backup: bool = True) -> None:
    """
    Serialize ``model`` to ``path`` atomically, creating parent directories.

    Raises:
        OSError: If the directory or file cannot be written
        ConfigurationError: If the model cannot be serialized
    """
    try:
        payload = model.model_dump_json(indent=2, by_alias=by_alias)
    except Exception as e:
        raise ConfigurationError(
            user_message=f"Could not serialize settings for {path.name}",
            technical_message=f"{type(model).__name__} serialization failed: {e}",
        ) from e

    path.parent.mkdir(parents=True, exist_ok=True)
    if backup and path.exists():
        shutil.copy2(path, _sibling(path, ".bak"))

    staging = _sibling(path, ".tmp")
    try:
        staging.write_text(payload, encoding="utf-8")
        staging.replace(path)
    finally:
        staging.unlink(missing_ok=True)

    logger.debug(f"Wrote {type(model).__name__} to {path}")
