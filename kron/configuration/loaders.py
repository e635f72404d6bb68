"""
Loading of scheduler configuration files.

Both YAML and JSON files are supported, and must hold a single object at the root. YAML files may refer to
environment variables as ``${VARIABLE}``, which are substituted when the file is loaded:

.. code-block:: yaml

    timezone: ${KRON_TIMEZONE}
    schedules:
      nightly-report: ${REPORT_SCHEDULE}

Every problem found in a file is reported in one ``InvalidConfigError``, with one entry per problem in ``details``.
Problems with a schedule pattern name the schedule, so ``"61 * * * *"`` under ``schedules.report`` is reported as
``Schedule 'report': Invalid pattern '61 * * * *': ...``.
"""

import json
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, TextIO, TypeVar

import yaml
from pydantic import ValidationError
from pydantic_core import ErrorDetails

from kron.configuration.models import ConfigModel, SchedulerConfig
from kron.exceptions import InvalidConfigError

__all__ = ["ConfigFormat", "load_dict", "load_file", "load_io"]


_T = TypeVar("_T", bound=ConfigModel)

_ENV_REFERENCE = re.compile(r"\$\{([^}^{]+)\}")


class ConfigFormat(Enum):
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def from_path(cls, path: Path) -> "ConfigFormat":
        match path.suffix:
            case ".yaml" | ".yml":
                return cls.YAML
            case ".json":
                return cls.JSON
        raise InvalidConfigError(f"Unknown file type {path.suffix}")


class _EnvLoader(yaml.SafeLoader):
    """
    A YAML loader substituting ``${VARIABLE}`` references in scalars with the variable's value.
    """


def _substitute_env(_: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    def lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise InvalidConfigError(f"Environment variable {name} is not set (line {node.start_mark.line + 1})")
        return os.environ[name]

    return _ENV_REFERENCE.sub(lookup, node.value)


_EnvLoader.add_implicit_resolver("!env", _ENV_REFERENCE, None)
_EnvLoader.add_constructor("!env", _substitute_env)


def _read_yaml(stream: TextIO) -> Any:  # noqa: ANN401
    try:
        return yaml.load(stream, Loader=_EnvLoader)  # noqa: S506
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark is not None else ""
        raise InvalidConfigError(f"Invalid YAML{where}: {e.problem or e.context or ''}") from e


def _read_json(stream: TextIO) -> Any:  # noqa: ANN401
    try:
        return json.load(stream)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e


def load_file(path: Path, schema: type[_T] = SchedulerConfig) -> _T:  # type: ignore[assignment]
    """
    Load a configuration file, choosing the format from the file extension.

    Args:
        path: Path to a ``.yaml``, ``.yml`` or ``.json`` file.
        schema: The configuration class to load into.

    Raises:
        InvalidConfigError: If the file type is unknown or the configuration is invalid.
    """
    file_format = ConfigFormat.from_path(path)
    with open(path) as stream:
        return load_io(stream, file_format, schema)


def load_io(
    stream: TextIO,
    file_format: ConfigFormat,
    schema: type[_T] = SchedulerConfig,  # type: ignore[assignment]
) -> _T:
    """
    Load a configuration from a stream.

    Raises:
        InvalidConfigError: If the stream is not valid YAML or JSON, or the configuration is invalid.
    """
    data = _read_yaml(stream) if file_format is ConfigFormat.YAML else _read_json(stream)

    # An empty document gives the default configuration
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigError(f"The root of a {file_format.value.upper()} configuration must be an object")

    return load_dict(data, schema)


def _describe(error: ErrorDetails) -> str:
    loc = error["loc"]
    cause = error.get("ctx", {}).get("error")
    message = str(cause) if isinstance(cause, ValueError) else error["msg"]

    if len(loc) >= 2 and loc[0] == "schedules":
        return f"Schedule '{loc[1]}': {message}"

    location = "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in loc).lstrip(".")
    return f"{location or '<root>'}: {message}"


def load_dict(data: dict, schema: type[_T] = SchedulerConfig) -> _T:  # type: ignore[assignment]
    """
    Validate a dictionary, using kebab-case keys as in configuration files.

    Raises:
        InvalidConfigError: If the configuration is invalid. Every problem found is listed in ``details``.
    """
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        details = [_describe(error) for error in e.errors()]
        raise InvalidConfigError(", ".join(details), details=details) from e
