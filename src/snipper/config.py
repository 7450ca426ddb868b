from __future__ import annotations

import os
from dataclasses import dataclass, field

from .errors import ConfigError
from .include import DEFAULT_LATEX_EXTENSIONS

_KNOWN_KEYS = {
    "extension",
    "source_extensions",
    "latex_extensions",
    "ignore",
    "jobs",
}


def get_config_path(custom_path=None):
    if custom_path:
        return custom_path
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return os.path.join(xdg_config_home, "snipper", "config.yaml")


def read_config(custom_path=None):
    import yaml

    config_path = get_config_path(custom_path)
    try:
        with open(config_path, "r", encoding="utf-8") as file:
            data = yaml.safe_load(file)
    except FileNotFoundError:
        if custom_path:
            raise ConfigError(f"Config file not found: {config_path}")
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: config must be a mapping")
    return data


def _string_list(data: dict, key: str) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a string or a list of strings")
    return list(value)


@dataclass(frozen=True)
class Settings:
    extension: str | None = None
    source_extensions: list[str] | None = None
    latex_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_LATEX_EXTENSIONS)
    )
    ignore: list[str] = field(default_factory=list)
    jobs: int | None = None

    @classmethod
    def from_mapping(cls, data: dict) -> Settings:
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ConfigError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

        extension = data.get("extension")
        if extension is not None and not isinstance(extension, str):
            raise ConfigError("'extension' must be a string")

        jobs = data.get("jobs")
        if jobs is not None and (
            isinstance(jobs, bool) or not isinstance(jobs, int) or jobs <= 0
        ):
            raise ConfigError("'jobs' must be a positive integer")

        latex_extensions = _string_list(data, "latex_extensions")
        return cls(
            extension=extension,
            source_extensions=_string_list(data, "source_extensions"),
            latex_extensions=(
                latex_extensions
                if latex_extensions is not None
                else list(DEFAULT_LATEX_EXTENSIONS)
            ),
            ignore=_string_list(data, "ignore") or [],
            jobs=jobs,
        )


def load_settings(custom_path=None) -> Settings:
    return Settings.from_mapping(read_config(custom_path))
