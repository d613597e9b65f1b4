"""Load the desired-state document from YAML or JSON.

``${env "NAME"}`` placeholders in string values are replaced with
environment values after parsing, so credentials can stay out of the file.
Placeholders in comments are never looked at.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from vault_operator.exceptions import ConfigValidationError

from .spec import ExternalConfig

DEFAULT_CONFIG_FILE = "vault-config.yml"

ENV_PLACEHOLDER = re.compile(r'\$\{\s*env\s+"([^"]+)"\s*\}')


def expand_env(text: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Replace ``${env "NAME"}`` placeholders.

    Raises:
        ConfigValidationError: If a referenced variable is not set
    """
    env = os.environ if env is None else env

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in env:
            raise ConfigValidationError(
                f"environment variable '{name}' referenced in config is not set",
                details={"variable": name},
            )
        return env[name]

    return ENV_PLACEHOLDER.sub(replace, text)


def expand_env_values(data: Any, env: Optional[Mapping[str, str]] = None) -> Any:
    """Apply ``expand_env`` to every string inside parsed data, keys excluded."""
    if isinstance(data, str):
        return expand_env(data, env)
    if isinstance(data, dict):
        return {key: expand_env_values(value, env) for key, value in data.items()}
    if isinstance(data, list):
        return [expand_env_values(item, env) for item in data]
    return data


def parse_external_config(data: Any) -> ExternalConfig:
    """Validate already-parsed data into an ExternalConfig."""
    if data is None:
        data = {}
    try:
        return ExternalConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(
            f"invalid vault configuration: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


def load_external_config(
    path: Union[str, Path] = DEFAULT_CONFIG_FILE,
    env: Optional[Mapping[str, str]] = None,
) -> ExternalConfig:
    """Read, expand and validate a desired-state file.

    ``.json`` files are parsed as JSON, everything else as YAML.

    Raises:
        ConfigValidationError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigValidationError(
            f"unable to read vault configuration '{path}': {e}",
            details={"path": str(path)},
        ) from e

    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigValidationError(
            f"unable to parse vault configuration '{path}': {e}",
            details={"path": str(path)},
        ) from e

    return parse_external_config(expand_env_values(data, env))
