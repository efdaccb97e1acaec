"""YAML configuration loading with validation."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from wikifeed.config.schemas import WikifeedConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration loading or validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def load_config(path: Path | None = None) -> WikifeedConfig:
    """Load the feed configuration from a YAML file.

    A missing path yields the built-in defaults.

    Args:
        path: Optional path to a YAML file.

    Returns:
        Validated configuration.

    Raises:
        ConfigValidationError: If the file is missing, unparsable, or invalid.
    """
    if path is None:
        return WikifeedConfig()

    log = logger.bind(component="config", file_path=str(path))

    try:
        content_bytes = path.read_bytes()
    except FileNotFoundError as e:
        log.error("config_file_not_found", error=str(e))
        raise ConfigValidationError(
            [{"loc": "file", "msg": str(e), "type": "file_not_found"}], str(path)
        ) from e

    checksum = hashlib.sha256(content_bytes).hexdigest()

    try:
        parsed: dict[str, object] = yaml.safe_load(content_bytes.decode("utf-8")) or {}
    except yaml.YAMLError as e:
        log.error("config_yaml_parse_error", error=str(e))
        raise ConfigValidationError(
            [{"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}], str(path)
        ) from e

    if not isinstance(parsed, dict):
        log.error("config_not_a_mapping")
        raise ConfigValidationError(
            [
                {
                    "loc": "root",
                    "msg": "top level must be a mapping",
                    "type": "dict_type",
                }
            ],
            str(path),
        )

    try:
        config = WikifeedConfig.model_validate(parsed)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(loc) for loc in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        log.error(
            "config_validation_failed",
            validation_error_count=len(errors),
            errors=errors,
        )
        raise ConfigValidationError(errors, str(path)) from e

    log.info("config_loaded", file_sha256=checksum)
    return config
