"""Configuration management for depreview.

Settings come from three layers, later ones winning:

1. the defaults on `ReviewConfig`,
2. an optional JSON config file (the `config-file` input),
3. the GitHub Action inputs, exposed as `INPUT_<NAME>` environment variables.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from depreview.exceptions import ConfigError
from depreview.licenses import LicensePolicy
from depreview.models import Severity, parse_severity

DEFAULT_CHECK_NAME_VULNERABILITY = "Dependency Review Vulnerabilities"
DEFAULT_CHECK_NAME_LICENSE = "Dependency Review Licenses"

# Action input names, as declared for the workflow step.
INPUT_NAMES = (
    "fail-on-severity",
    "allow-licenses",
    "deny-licenses",
    "check-name-vulnerability",
    "check-name-license",
    "post-checks",
    "repo-token",
)
CONFIG_FILE_INPUT = "config-file"

_TRUE_VALUES = ("true", "True", "TRUE")
_FALSE_VALUES = ("false", "False", "FALSE")


class ReviewConfig(BaseModel):
    """Policy and reporting options for one review run."""

    model_config = ConfigDict(extra="forbid")

    fail_on_severity: Severity | None = None
    allow_licenses: list[str] = Field(default_factory=list)
    deny_licenses: list[str] = Field(default_factory=list)
    check_name_vulnerability: str = DEFAULT_CHECK_NAME_VULNERABILITY
    check_name_license: str = DEFAULT_CHECK_NAME_LICENSE
    post_checks: bool = True
    repo_token: str = Field(default="", repr=False)

    @field_validator("fail_on_severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return parse_severity(value)

    @field_validator("allow_licenses", "deny_licenses", mode="before")
    @classmethod
    def _split_licenses(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip() for item in value if str(item).strip()]

    @field_validator("post_checks", mode="before")
    @classmethod
    def _parse_bool(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value in _TRUE_VALUES:
                return True
            if value in _FALSE_VALUES:
                return False
            raise ValueError(
                "must be one of: true | True | TRUE | false | False | FALSE"
            )
        return value

    @field_validator("check_name_vulnerability", "check_name_license", mode="before")
    @classmethod
    def _default_blank_names(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str) and not value.strip():
            return cls.model_fields[info.field_name].default
        return value

    @property
    def license_policy(self) -> LicensePolicy:
        return LicensePolicy(allow=self.allow_licenses, deny=self.deny_licenses)


def _input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, env: Mapping[str, str] | None = None) -> str:
    """Read one Action input the way the runner exposes it (trimmed, '' if unset)."""
    source = os.environ if env is None else env
    return source.get(_input_env_name(name), "").strip()


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key.replace("-", "_"): value for key, value in data.items()}


def read_config_file(path: Path) -> dict[str, Any]:
    """Load a JSON config file into a dict of ReviewConfig fields."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return _normalize_keys(data)


def load_config(
    env: Mapping[str, str] | None = None,
    root: Path | None = None,
) -> ReviewConfig:
    """Build the run configuration from the config file and Action inputs.

    Raises:
        ConfigError: If the file is unreadable or any value fails validation.
    """
    data: dict[str, Any] = {}

    config_file = get_input(CONFIG_FILE_INPUT, env)
    if config_file:
        path = Path(config_file)
        if not path.is_absolute():
            path = (root or Path.cwd()) / path
        data.update(read_config_file(path))

    for name in INPUT_NAMES:
        value = get_input(name, env)
        if value:
            data[name.replace("-", "_")] = value

    if not data.get("repo_token"):
        source = os.environ if env is None else env
        data["repo_token"] = source.get("GITHUB_TOKEN", "")

    try:
        return ReviewConfig(**data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
