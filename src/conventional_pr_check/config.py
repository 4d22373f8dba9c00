from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from .exceptions import ConfigError

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "conventional-pr-check"
_CONFIG_FILENAME = "config.toml"

CHECK_SECTION = "check"

# Option names, as declared in action.yml.
TITLE_CHECK_ENABLED = "title-check-enabled"
TITLE_MAX_LEN = "title-max-len"
DESCRIPTION_CHECK_ENABLED = "description-check-enabled"
DESCRIPTION_REQUIRED = "description-required"
DESCRIPTION_MAX_LEN = "description-max-len"
IGNORED_CONTRIBUTORS = "ignored-contributors"

OPTION_NAMES = (
    TITLE_CHECK_ENABLED,
    TITLE_MAX_LEN,
    DESCRIPTION_CHECK_ENABLED,
    DESCRIPTION_REQUIRED,
    DESCRIPTION_MAX_LEN,
    IGNORED_CONTRIBUTORS,
)


@dataclass(frozen=True)
class ValidationConfig:
    title_check_enabled: bool = True
    title_max_len: int = -1
    description_check_enabled: bool = False
    description_required: bool = False
    description_max_len: int = -1
    ignored_contributors: tuple[str, ...] = ()

    def is_ignored(self, actor: str) -> bool:
        return actor in self.ignored_contributors


class Config:
    def __init__(self, config_dir: Path | None = None) -> None:
        self._dir = config_dir or _DEFAULT_CONFIG_DIR
        self._path = self._dir / _CONFIG_FILENAME
        self._data: dict = self._load()

    @property
    def data(self) -> dict:
        return self._data

    def _load(self) -> dict:
        if self._path.exists():
            try:
                return tomllib.loads(self._path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid config file {self._path}: {e}") from e
        return {}

    def _save(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(tomli_w.dumps(self._data).encode())

    def get(self, section: str, key: str) -> str | None:
        value = self._data.get(section, {}).get(key)
        if value is None:
            return None
        if isinstance(value, list):
            return ",".join(str(v) for v in value)
        return str(value)

    def set(self, section: str, key: str, value: str) -> None:
        self._data.setdefault(section, {})[key] = value
        self._save()


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigError(f"Option '{name}' must be an integer, got {value!r}") from None


def parse_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def input_env_name(option: str) -> str:
    """Env var the Actions runner exports for an action input."""
    return f"INPUT_{option.replace(' ', '_').upper()}"


def _lookup(option: str, config: Config | None, environ: Mapping[str, str]) -> str | None:
    value = environ.get(input_env_name(option))
    if value is not None and value.strip():
        return value
    if config is not None:
        return config.get(CHECK_SECTION, option)
    return None


def resolve_validation_config(config: Config | None, environ: Mapping[str, str]) -> ValidationConfig:
    """Build a ValidationConfig from action inputs, falling back to the TOML config.

    Unset options keep the ValidationConfig defaults.
    """
    defaults = ValidationConfig()

    def _bool(option: str, default: bool) -> bool:
        raw = _lookup(option, config, environ)
        return default if raw is None else parse_bool(raw)

    def _int(option: str, default: int) -> int:
        raw = _lookup(option, config, environ)
        return default if raw is None else parse_int(option, raw)

    ignored_raw = _lookup(IGNORED_CONTRIBUTORS, config, environ)

    return ValidationConfig(
        title_check_enabled=_bool(TITLE_CHECK_ENABLED, defaults.title_check_enabled),
        title_max_len=_int(TITLE_MAX_LEN, defaults.title_max_len),
        description_check_enabled=_bool(DESCRIPTION_CHECK_ENABLED, defaults.description_check_enabled),
        description_required=_bool(DESCRIPTION_REQUIRED, defaults.description_required),
        description_max_len=_int(DESCRIPTION_MAX_LEN, defaults.description_max_len),
        ignored_contributors=parse_list(ignored_raw) if ignored_raw else defaults.ignored_contributors,
    )
