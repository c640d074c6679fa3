"""Reading and writing a daemon's persistent state and layered configuration."""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomli_w

log = logging.getLogger(__name__)

_CONFIG_FILE = "config.toml"
_CONFIG_DIR = "config.toml.d"
_CONFIG_EXTENSIONS = (".toml",)


class DaemonContext(ABC):
    """Where a daemon keeps its files and how it turns TOML data into objects."""

    def state_path(self) -> Path:
        """Return the file that holds the persistent state."""
        return self.user_config_path() / "state.toml"

    @abstractmethod
    def user_config_path(self) -> Path:
        """Return the directory of configuration the user or admin may change."""

    @abstractmethod
    def system_config_path(self) -> Path:
        """Return the directory of configuration shipped with the system."""

    @abstractmethod
    def state(self) -> Any:
        """Return the current state, as a mapping or a dataclass instance."""

    def load_state(self, data: Mapping[str, Any]) -> Any:
        """Build a state object from parsed TOML; missing keys take defaults."""
        return dict(data)

    def load_config(self, data: Mapping[str, Any]) -> Any:
        """Build a configuration object from merged TOML; missing keys take defaults."""
        return dict(data)


def _merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in overlay.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge(current, value)
        elif isinstance(value, Mapping):
            base[key] = _merge({}, value)
        else:
            base[key] = value
    return base


def _read_toml_file(file: Path) -> dict[str, Any] | None:
    try:
        with file.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return None


def _config_fragments(directory: Path) -> list[Path]:
    try:
        entries = list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return []
    return sorted(
        entry
        for entry in entries
        if entry.suffix in _CONFIG_EXTENSIONS and entry.is_file()
    )


def _to_plain(state: Any) -> Mapping[str, Any]:
    if dataclasses.is_dataclass(state) and not isinstance(state, type):
        return dataclasses.asdict(state)
    return state


def read_state(context: DaemonContext) -> Any:
    """Load the saved state, or the default state when none has been saved."""
    state_file = context.state_path()
    try:
        text = state_file.read_text()
    except FileNotFoundError:
        log.info("No state file found, reloading default state")
        return context.load_state({})
    except OSError as err:
        log.error("Error loading state: %s", err)
        raise
    return context.load_state(tomllib.loads(text))


def write_state(context: DaemonContext) -> None:
    """Save the context's current state as TOML, creating its directory if needed."""
    state_file = context.state_path()
    state_file.parent.mkdir(parents=True, exist_ok=True)
    state_file.write_text(tomli_w.dumps(_to_plain(context.state())))


def read_config(context: DaemonContext) -> Any:
    """Merge system then user configuration, each followed by its fragment directory."""
    merged: dict[str, Any] = {}
    for base in (context.system_config_path(), context.user_config_path()):
        sources = [base / _CONFIG_FILE, *_config_fragments(base / _CONFIG_DIR)]
        for source in sources:
            data = _read_toml_file(source)
            if data is not None:
                _merge(merged, data)
    return context.load_config(merged)