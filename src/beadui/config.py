"""Directory registry and its configuration file."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from beadui.constants import (
    CONFIG_DIRNAME,
    CONFIG_FILENAME,
    CONFIG_PATH_ENV,
    HOME_MARKER,
)

logger = logging.getLogger(__name__)


@dataclass
class DirectoryConfig:
    """A monitored directory."""

    path: Path
    visible: bool = True
    display_name: str = ""

    @property
    def base_name(self) -> str:
        """Last component of the directory path."""
        return self.path.name

    @property
    def source_name(self) -> str:
        """Name stamped on issues loaded from this directory."""
        return self.display_name or self.base_name


@dataclass
class AppConfig:
    """Ordered directory registry plus UI state."""

    directories: list[DirectoryConfig] = field(default_factory=list[DirectoryConfig])
    sidebar_collapsed: bool = False

    def find(self, path: str | Path) -> DirectoryConfig | None:
        """Return the registered directory for *path*, if any."""
        target = normalize_path(path)
        for directory in self.directories:
            if directory.path == target:
                return directory
        return None

    def visible_directories(self) -> list[DirectoryConfig]:
        """Return the visible directories in registration order."""
        return [d for d in self.directories if d.visible]

    def add_directory(self, path: str | Path, *, visible: bool = True) -> bool:
        """Register a directory.

        Returns:
            True if the directory was added, False if it was already present
        """
        if self.find(path) is not None:
            return False
        self.directories.append(
            DirectoryConfig(path=normalize_path(path), visible=visible),
        )
        compute_display_names(self.directories)
        return True

    def remove_directory(self, path: str | Path) -> bool:
        """Unregister a directory.

        Returns:
            True if a directory was removed
        """
        directory = self.find(path)
        if directory is None:
            return False
        self.directories.remove(directory)
        compute_display_names(self.directories)
        return True

    def set_visible(self, path: str | Path, visible: bool) -> bool:
        """Show or hide a directory.

        Returns:
            True if the visibility changed
        """
        directory = self.find(path)
        if directory is None or directory.visible == visible:
            return False
        directory.visible = visible
        return True


def normalize_path(path: str | Path) -> Path:
    """Expand ``~`` and make *path* absolute without resolving symlinks."""
    return Path(os.path.abspath(Path(path).expanduser()))


def abbreviate_path(path: Path, home: Path | None = None) -> str:
    """Replace a leading home directory with ``~``.

    Args:
        path: Path to abbreviate
        home: Home directory (default: ``Path.home()``)

    Returns:
        Abbreviated path string, or the path unchanged if outside home
    """
    home = Path.home() if home is None else home
    try:
        suffix = path.relative_to(home)
    except ValueError:
        return str(path)
    if suffix == Path():
        return HOME_MARKER
    return f"{HOME_MARKER}/{suffix.as_posix()}"


def compute_display_names(
    directories: list[DirectoryConfig],
    home: Path | None = None,
) -> None:
    """Assign display names in place.

    A base name shared by no other directory is used as-is. Directories that
    share a base name are disambiguated by their abbreviated parent path,
    e.g. ``repo (~/a)`` and ``repo (~/b)``.
    """
    groups: dict[str, list[DirectoryConfig]] = {}
    for directory in directories:
        groups.setdefault(directory.base_name, []).append(directory)

    for base_name, members in groups.items():
        if len(members) == 1:
            members[0].display_name = base_name
            continue
        for directory in members:
            parent = abbreviate_path(directory.path.parent, home)
            directory.display_name = f"{base_name} ({parent})"


def get_config_path() -> Path:
    """Get the path to the config file.

    Precedence:
    1. ``$BEADUI_CONFIG``
    2. ``$XDG_CONFIG_HOME/beadui/config.toml``
    3. ``~/.config/beadui/config.toml``
    """
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / CONFIG_DIRNAME / CONFIG_FILENAME


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    """Convert an AppConfig to a TOML-serializable dictionary."""
    return {
        "sidebar_collapsed": config.sidebar_collapsed,
        "directories": [
            {
                "path": str(d.path),
                "visible": d.visible,
                "display_name": d.display_name,
            }
            for d in config.directories
        ],
    }


def dict_to_config(data: dict[str, Any]) -> AppConfig:
    """Convert a decoded config file to an AppConfig.

    Raises:
        TypeError: If a field has the wrong type.
        KeyError: If a directory entry has no path.
    """
    raw_dirs = data.get("directories", [])
    if not isinstance(raw_dirs, list):
        msg = "'directories' must be an array of tables"
        raise TypeError(msg)

    directories: list[DirectoryConfig] = []
    for entry in raw_dirs:
        if not isinstance(entry, dict):
            msg = "directory entries must be tables"
            raise TypeError(msg)
        directories.append(
            DirectoryConfig(
                path=normalize_path(str(entry["path"])),
                visible=bool(entry.get("visible", True)),
                display_name=str(entry.get("display_name", "")),
            ),
        )

    return AppConfig(
        directories=directories,
        sidebar_collapsed=bool(data.get("sidebar_collapsed", False)),
    )


def load_app_config(config_path: Path | None = None) -> AppConfig:
    """Load the directory registry.

    Args:
        config_path: Config file to read (default: ``get_config_path()``)

    Returns:
        The stored configuration, or an empty one if the file is missing
        or cannot be parsed
    """
    config_path = get_config_path() if config_path is None else config_path
    if not config_path.exists():
        return AppConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
        return dict_to_config(data)
    except (ValueError, OSError, TypeError, KeyError) as e:
        # ValueError covers TOMLDecodeError and UnicodeDecodeError
        logger.warning("Ignoring unreadable config %s: %s", config_path, e)
        return AppConfig()


def save_app_config(config: AppConfig, config_path: Path | None = None) -> None:
    """Save the directory registry, creating the parent directory.

    Raises:
        OSError: If the file cannot be written.
    """
    config_path = get_config_path() if config_path is None else config_path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("wb") as f:
        tomli_w.dump(config_to_dict(config), f)


def ensure_directory_registered(config: AppConfig, directory: str | Path) -> bool:
    """Add *directory* as a visible entry if it is not registered yet.

    Returns:
        True if the config changed and should be saved
    """
    added = config.add_directory(directory, visible=True)
    if added:
        logger.info("registered working directory %s", normalize_path(directory))
    return added
