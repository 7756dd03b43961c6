"""
Configuration and vocabulary file loading.

Sampler settings and vocabularies can be kept in JSON files. Both file kinds
are validated with jsonschema before use, and every violation is reported
at once rather than only the first.

Config file:
    ```json
    {"max_attempts": 500, "temperature": 0.8, "top_p": 0.9, "top_k": 50}
    ```

Vocabulary file (either form):
    ```json
    [["def", -1.0], ["class", -1.5], [":", -2.0]]
    {"vocabulary": [["def", -1.0], ["class", -1.5]]}
    ```

Usage:
    ```python
    from prefix_guard.config import load_config_file, load_vocabulary_file

    config = load_config_file(Path("sampler.json"), temperature=0.7)
    vocabulary = load_vocabulary_file(Path("vocab.json"))
    ```
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

from jsonschema import Draft7Validator

from prefix_guard.errors import ConfigError
from prefix_guard.types import SamplerConfig

logger = logging.getLogger(__name__)

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "max_attempts": {"type": "integer", "minimum": 1},
        "temperature": {"type": "number", "exclusiveMinimum": 0},
        "top_p": {
            "type": ["number", "null"],
            "exclusiveMinimum": 0,
            "maximum": 1,
        },
        "top_k": {"type": ["integer", "null"], "minimum": 1},
    },
    "additionalProperties": False,
}

_ENTRY_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": [{"type": "string"}, {"type": "number"}],
    "minItems": 2,
    "maxItems": 2,
}

VOCABULARY_SCHEMA: Dict[str, Any] = {
    "oneOf": [
        {"type": "array", "items": _ENTRY_SCHEMA, "minItems": 1},
        {
            "type": "object",
            "properties": {
                "vocabulary": {"type": "array", "items": _ENTRY_SCHEMA, "minItems": 1}
            },
            "required": ["vocabulary"],
        },
    ]
}


def _read_json(path: Path, kind: str) -> Any:
    if not path.exists():
        raise ConfigError(f"{kind} file not found: {path}")

    try:
        with open(path) as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {kind} file {path}: {e}") from e


def _check(data: Any, schema: Dict[str, Any], kind: str, source: str) -> None:
    """Validate data and raise ConfigError listing every violation."""
    validator = Draft7Validator(schema)
    errors = []
    for error in validator.iter_errors(data):
        location = "." + ".".join(str(p) for p in error.path) if error.path else "root"
        errors.append(f"{location}: {error.message}")

    if errors:
        logger.error(f"Invalid {kind} in {source}: {len(errors)} error(s)")
        raise ConfigError(
            f"Invalid {kind} in {source}:\n  " + "\n  ".join(errors),
            errors=errors
        )


def parse_config(data: Dict[str, Any], source: str = "<dict>", **overrides: Any) -> SamplerConfig:
    """
    Build a SamplerConfig from a dict, applying non-None overrides.

    Raises:
        ConfigError: If the data violates CONFIG_SCHEMA
    """
    _check(data, CONFIG_SCHEMA, "config", source)
    merged = dict(data)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return SamplerConfig.create(**merged)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def load_config_file(path: Path, **overrides: Any) -> SamplerConfig:
    """
    Load a sampler config from a JSON file.

    Args:
        path: Path to the config file
        **overrides: Values taking precedence over the file (None is ignored)

    Returns:
        SamplerConfig

    Raises:
        ConfigError: If the file is missing, not JSON, or invalid
    """
    data = _read_json(path, "config")
    config = parse_config(data, source=str(path), **overrides)
    logger.info(f"Loaded config from {path}: {config}")
    return config


def parse_vocabulary(data: Any, source: str = "<data>") -> List[Tuple[str, float]]:
    """
    Validate vocabulary data and return (value, logprob) tuples.

    Raises:
        ConfigError: If the data violates VOCABULARY_SCHEMA
    """
    _check(data, VOCABULARY_SCHEMA, "vocabulary", source)
    entries = data["vocabulary"] if isinstance(data, dict) else data
    return [(str(value), float(logprob)) for value, logprob in entries]


def load_vocabulary_file(path: Path) -> List[Tuple[str, float]]:
    """
    Load a vocabulary from a JSON file.

    Raises:
        ConfigError: If the file is missing, not JSON, or invalid
    """
    data = _read_json(path, "vocabulary")
    vocabulary = parse_vocabulary(data, source=str(path))
    logger.info(f"Loaded {len(vocabulary)} vocabulary entries from {path}")
    return vocabulary
