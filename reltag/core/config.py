"""Typed release configuration.

Configuration is optional. It is looked up, in order, in:

1. an explicit ``--config`` file,
2. ``reltag.toml`` at the repository root,
3. the ``[tool.reltag]`` table of ``pyproject.toml``,

and otherwise every field keeps its default. Example ``reltag.toml``::

    version_file = "VERSION"
    changelog_file = "CHANGELOG.md"
    commit_message = "Preparing the {version} release."
    signing_key = "0xDEADBEEF"

    [changelog]
    tool = "command"
    update_command = ["chag", "update", "{version}"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "ChangelogConfig",
    "ConfigError",
    "ReleaseConfig",
    "discover_config",
    "load_config",
    "DEFAULT_COMMIT_MESSAGE",
    "DEFAULT_CONTENTS_COMMAND",
    "DEFAULT_UPDATE_COMMAND",
]

DEFAULT_VERSION_FILE = "VERSION"
DEFAULT_CHANGELOG_FILE = "CHANGELOG.md"
DEFAULT_TAG_FORMAT = "{version}"
DEFAULT_COMMIT_MESSAGE = "Preparing the {version} release."
DEFAULT_UPDATE_COMMAND = ("chag", "update", "{version}")
DEFAULT_CONTENTS_COMMAND = ("chag", "contents", "--tag", "{version}")

ChangelogTool = Literal["markdown", "command"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ChangelogConfig:
    """Which changelog collaborator to drive and how."""

    tool: ChangelogTool = "markdown"
    update_command: tuple[str, ...] = DEFAULT_UPDATE_COMMAND
    contents_command: tuple[str, ...] = DEFAULT_CONTENTS_COMMAND


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release settings, all paths relative to the repository root."""

    version_file: str = DEFAULT_VERSION_FILE
    changelog_file: str = DEFAULT_CHANGELOG_FILE
    tag_format: str = DEFAULT_TAG_FORMAT
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    signing_key: str | None = None
    changelog: ChangelogConfig = field(default_factory=ChangelogConfig)
    source: Path | None = None

    def tag_name(self, version: str) -> str:
        return self.tag_format.format(version=version)

    def commit_message_for(self, version: str) -> str:
        return self.commit_message.format(version=version)

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, source: Path | None = None) -> ReleaseConfig:
        """Create a config from a parsed TOML table.

        Raises:
            ValueError: A value is present but unusable.
        """
        changelog: StrDict = get_table(data, "changelog") or {}

        tool = get_str(changelog, "tool") or "markdown"
        if tool not in ("markdown", "command"):
            raise ValueError(f"changelog.tool must be 'markdown' or 'command', got {tool!r}")

        tag_format = _template(data, "tag_format", DEFAULT_TAG_FORMAT)
        commit_message = _template(data, "commit_message", DEFAULT_COMMIT_MESSAGE)

        return cls(
            version_file=get_str(data, "version_file") or DEFAULT_VERSION_FILE,
            changelog_file=get_str(data, "changelog_file") or DEFAULT_CHANGELOG_FILE,
            tag_format=tag_format,
            commit_message=commit_message,
            signing_key=get_str(data, "signing_key"),
            changelog=ChangelogConfig(
                tool="command" if tool == "command" else "markdown",
                update_command=get_str_list(changelog, "update_command")
                or DEFAULT_UPDATE_COMMAND,
                contents_command=get_str_list(changelog, "contents_command")
                or DEFAULT_CONTENTS_COMMAND,
            ),
            source=source,
        )


def _template(data: Mapping[str, object], key: str, default: str) -> str:
    """Read a ``{version}`` template and prove it formats.

    A template is rendered once here so that a stray placeholder is a
    config error, not a crash halfway through a release.
    """
    template = get_str(data, key) or default
    if "{version}" not in template:
        raise ValueError(f"{key} must contain '{{version}}'")
    try:
        template.format(version="0.0.0")
    except (KeyError, IndexError, AttributeError, ValueError) as e:
        raise ValueError(f"{key} {template!r} cannot be formatted: {e!r}") from e
    return template


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def _build(data: Mapping[str, object], path: Path) -> Result[ReleaseConfig, ConfigError]:
    try:
        return Ok(ReleaseConfig.from_dict(data, source=path))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load a standalone ``reltag.toml``-style file.

    A top-level ``[tool.reltag]`` table is honoured too, so the same
    function reads ``pyproject.toml`` when pointed at it.
    """
    parsed = _parse_toml(path)
    if isinstance(parsed, Err):
        return parsed

    tool = get_table(parsed.value, "tool") or {}
    section = get_table(tool, "reltag")
    return _build(section if section is not None else parsed.value, path)


def discover_config(repo_root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Find the configuration for ``repo_root`` or fall back to defaults."""
    standalone = repo_root / "reltag.toml"
    if standalone.is_file():
        return load_config(standalone)

    pyproject = repo_root / "pyproject.toml"
    if pyproject.is_file():
        parsed = _parse_toml(pyproject)
        if isinstance(parsed, Err):
            return parsed
        tool = get_table(parsed.value, "tool") or {}
        section = get_table(tool, "reltag")
        if section is not None:
            return _build(section, pyproject)

    return Ok(ReleaseConfig())
