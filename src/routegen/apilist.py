"""
API list loading.

An API list declares the services to generate and their methods, in TOML
or JSON:

    [[services]]
    name = "user"
    package = "user/api"

    [[services.methods]]
    name = "GetUser"
    path = "/api/user/:id"
    verb = "GET"
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path

from pydantic import ValidationError

from routegen.core.errors import ConfigError
from routegen.core.ir import ApiList


def load_api_list(path: Path) -> ApiList:
    """
    Load and validate an API list file.

    ``.json`` files are parsed as JSON, anything else as TOML.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid
    """
    if not path.exists():
        raise ConfigError(f"API list not found: {path}")

    try:
        if path.suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        else:
            with open(path, "rb") as f:
                data = tomllib.load(f)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot parse API list {path}: {e}") from e

    try:
        return ApiList.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid API list {path}: {e}") from e
