import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .errors import ConfigError

SETTINGS_FILENAME = "prisma-lsp.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CompletionSettings:
    """Completion behaviour that depends on the surrounding toolchain."""

    # Values offered after `provider =` in a generator block
    generator_providers: tuple[str, ...] = ("prisma-client-js",)
    # Datasource providers that cannot back enum blocks
    enum_unsupported_providers: tuple[str, ...] = ("sqlite",)


@dataclass(frozen=True)
class ServerSettings:
    """Settings for the language server process.

    Examples in prisma-lsp.toml:

        [server]
        log_level = "DEBUG"

        [completion]
        generator_providers = ["prisma-client-js", "prisma-client-go"]
        enum_unsupported_providers = ["sqlite"]
    """

    log_level: str = "INFO"
    completion: CompletionSettings = field(default_factory=CompletionSettings)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def _string_list(section: str, key: str, value: Any) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"[{section}] {key} must be a list of strings, got {value!r}")
    return tuple(value)


def _log_level(value: Any) -> str:
    if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
        raise ConfigError(f"[server] log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return value.upper()


def settings_from_dict(data: dict[str, Any], base: ServerSettings | None = None) -> ServerSettings:
    """
    Build settings from a parsed TOML table or LSP initializationOptions.

    Keys that are absent keep the value from ``base`` (or the defaults).

    Raises:
        ConfigError: If a value has the wrong type
    """
    base = base or ServerSettings()
    server_data = data.get("server", {})
    completion_data = data.get("completion", {})

    completion = base.completion
    if "generator_providers" in completion_data:
        completion = replace(
            completion,
            generator_providers=_string_list(
                "completion", "generator_providers", completion_data["generator_providers"]
            ),
        )
    if "enum_unsupported_providers" in completion_data:
        completion = replace(
            completion,
            enum_unsupported_providers=_string_list(
                "completion",
                "enum_unsupported_providers",
                completion_data["enum_unsupported_providers"],
            ),
        )

    log_level = base.log_level
    if "log_level" in server_data:
        log_level = _log_level(server_data["log_level"])

    return ServerSettings(log_level=log_level, completion=completion)


def load_settings(path: Path) -> ServerSettings:
    """
    Load settings from a prisma-lsp.toml file.

    Raises:
        ConfigError: If the file is not valid TOML or has wrongly typed values
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    return settings_from_dict(data)


def find_settings(root: Path | None) -> ServerSettings:
    """Load settings from ``root``/prisma-lsp.toml, or return the defaults."""
    if root is None:
        return ServerSettings()
    path = root / SETTINGS_FILENAME
    if not path.exists():
        return ServerSettings()
    return load_settings(path)
