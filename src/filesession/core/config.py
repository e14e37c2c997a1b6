# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Configuration for filesession: YAML/TOML files, env overrides and binding."""

from __future__ import annotations

import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from filesession.kernel.exceptions import SessionConfigurationException

M = TypeVar("M", bound=BaseModel)

_ROOT_KEY = "filesession"
_ENV_PREFIX = "FILESESSION_"
_FILE_STEM = "filesession"
_EXTENSIONS = (".yaml", ".toml")

# ${NAME} or ${NAME:default}, resolved from the environment only
_ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")

_CONFIG_PROPERTIES_ATTR = "__filesession_config_prefix__"


def config_properties(prefix: str) -> Callable[[type[M]], type[M]]:
    """Attach the configuration prefix a pydantic model is bound from.

    Usage:
        @config_properties(prefix="filesession.session")
        class SessionProperties(BaseModel):
            save_path: str = "sessions/"
    """

    def decorator(cls: type[M]) -> type[M]:
        setattr(cls, _CONFIG_PROPERTIES_ATTR, prefix)
        return cls

    return decorator


class Config:
    """Merged configuration tree read with dotted keys.

    A ``FILESESSION_*`` environment variable beats the file value for the
    same key; the packaged ``filesession-defaults.yaml`` sits underneath.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this configuration, in merge order."""
        return list(self._loaded_sources)

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Merge the packaged defaults with the files found under *base_dir*.

        ``config/filesession.{yaml,toml}`` is read before
        ``filesession.{yaml,toml}``, and ``filesession-<profile>.*`` overlays
        come last, one per active profile.
        """
        base_dir = Path(base_dir)
        data: dict[str, Any] = {}
        sources: list[str] = []

        if load_defaults:
            data = cls._load_packaged_defaults()
            sources.append("filesession-defaults.yaml (packaged defaults)")

        overlays = [(_FILE_STEM, "")] + [(f"{_FILE_STEM}-{p}", f" (profile: {p})") for p in active_profiles or []]
        for stem, label in overlays:
            for search_dir in (base_dir / "config", base_dir):
                for ext in _EXTENSIONS:
                    candidate = search_dir / f"{stem}{ext}"
                    if candidate.is_file():
                        data = cls._deep_merge(data, cls._load_file(candidate))
                        sources.append(f"{candidate}{label}")

        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @staticmethod
    def _load_file(path: Path) -> dict[str, Any]:
        if path.suffix == ".toml":
            with open(path, "rb") as f:
                return tomllib.load(f)
        with open(path) as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_packaged_defaults() -> dict[str, Any]:
        resource = importlib.resources.files("filesession.resources").joinpath("filesession-defaults.yaml")
        return yaml.safe_load(resource.read_text(encoding="utf-8")) or {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        merged = dict(base)
        for key, value in override.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = Config._deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    @staticmethod
    def env_key(key: str) -> str:
        """``filesession.session.save-path`` -> ``FILESESSION_SESSION_SAVE_PATH``."""
        base = key.removeprefix(f"{_ROOT_KEY}.")
        return _ENV_PREFIX + base.upper().replace(".", "_").replace("-", "_")

    def get(self, key: str, default: Any = None) -> Any:
        """Value at the dotted *key*; the environment override wins.

        ``${NAME}`` and ``${NAME:default}`` inside string values are filled
        in from the environment.
        """
        env_val = os.environ.get(self.env_key(key))
        if env_val is not None:
            return env_val

        current = self._lookup(key)
        if current is None:
            return default
        if isinstance(current, str):
            return _ENV_PLACEHOLDER_RE.sub(_fill_from_env, current)
        return current

    def _lookup(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
        return current

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Nested values under *prefix*, with leaf overrides from the environment."""
        section = self._lookup(prefix)
        if not isinstance(section, dict):
            return {}
        return self._with_env(prefix, section)

    def _with_env(self, prefix: str, section: dict[str, Any]) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for key, value in section.items():
            full_key = f"{prefix}.{key}"
            resolved[key] = self._with_env(full_key, value) if isinstance(value, dict) else self.get(full_key, value)
        return resolved

    def bind(self, model: type[M]) -> M:
        """Validate the section named by *model*'s ``@config_properties`` prefix."""
        prefix = getattr(model, _CONFIG_PROPERTIES_ATTR, None)
        if prefix is None:
            raise SessionConfigurationException(f"{model.__name__} is not decorated with @config_properties")
        try:
            return cast(M, model.model_validate(self.get_section(prefix)))
        except ValidationError as exc:
            raise SessionConfigurationException(
                f"Configuration validation failed for '{prefix}': {exc}",
                context={"prefix": prefix, "errors": exc.errors(include_url=False)},
            ) from exc


def _fill_from_env(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name)
    if value is not None:
        return value
    if default is not None:
        return default
    raise SessionConfigurationException(
        f"Cannot resolve placeholder '${{{name}}}': environment variable is not set",
        context={"placeholder": name},
    )
