"""Persistent JSON profile.

Stores the regex and command lists, their current indices, the shell, the
tab size and the key map. Loading is defensive: a missing or malformed file
falls back to defaults and malformed entries are dropped one by one.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .actions import Action
from .input.bindings import ActionBinding, KeyChord, default_bindings
from .text import DEFAULT_TAB_SIZE
from .worklist.profile import DEFAULT_CMDS, DEFAULT_REGEXES, Profile
from .worklist.string_list import StringList

logger = logging.getLogger(__name__)

APP_NAME = "lazycm"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CURRENT_VERSION = 1
DEFAULT_SHELL = "/bin/sh"


class ConfigError(ValueError):
    """Raised by the strict parsing helpers on malformed profile data."""


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: top level is not an object", config_path)
        return {}
    return data


def save_config(data: dict[str, object], path: Path | None = None) -> bool:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged and reported as ``False``
    so that quitting never fails because of the profile.
    """
    config_path = path or CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.error("could not save config %s: %s", config_path, exc)
        return False
    return True


def _migrate_v0(data: dict[str, object]) -> dict[str, object]:
    """Version 0 stored the regex list under ``regexs``."""
    migrated = dict(data)
    if "regexs" in migrated and "regexes" not in migrated:
        migrated["regexes"] = migrated.pop("regexs")
    migrated.pop("regexs", None)
    return migrated


# Index ``n`` upgrades version ``n`` to ``n + 1``.
MIGRATIONS: list[Callable[[dict[str, object]], dict[str, object]]] = [_migrate_v0]


def stored_version(data: dict[str, object]) -> int:
    version = data.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        return 0
    return version


def migrate(data: dict[str, object]) -> dict[str, object]:
    """Apply every migration from the stored version up to ``CURRENT_VERSION``."""
    version = stored_version(data)
    if version > CURRENT_VERSION:
        logger.warning("config version %s is newer than %s; reading it as is", version, CURRENT_VERSION)
        return dict(data)
    migrated = dict(data)
    for step in MIGRATIONS[version:CURRENT_VERSION]:
        migrated = step(migrated)
    migrated["version"] = CURRENT_VERSION
    return migrated


def _string_list(value: object, fallback: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(fallback)
    return [item for item in value if isinstance(item, str)]


def _index(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def chords_from_strings(values: object) -> list[KeyChord]:
    """Strictly parse a list of ``key:N[,alt]`` strings."""
    if not isinstance(values, list):
        raise ConfigError(f"Expected a list of key chords, got {type(values).__name__}")
    chords: list[KeyChord] = []
    for value in values:
        if not isinstance(value, str):
            raise ConfigError(f"Expected a key chord string, got {value!r}")
        try:
            chords.append(KeyChord.from_text(value))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return chords


def bindings_from_config(raw: object) -> ActionBinding:
    """Overlay a stored key map on the defaults.

    Actions present in ``raw`` get exactly the stored chords; unknown action
    names and malformed chords are dropped with a warning.
    """
    bindings = default_bindings()
    if not isinstance(raw, dict):
        return bindings
    for name, values in raw.items():
        try:
            action = Action.from_name(str(name))
        except ValueError as exc:
            logger.warning("dropping key map entry: %s", exc)
            continue
        if not isinstance(values, list):
            logger.warning("dropping key map entry %s: not a list", name)
            continue
        chords: list[KeyChord] = []
        for value in values:
            try:
                chords.extend(chords_from_strings([value]))
            except ConfigError as exc:
                logger.warning("dropping chord of %s: %s", name, exc)
        bindings.replace_chords(action, chords)
    return bindings


def bindings_to_config(bindings: ActionBinding) -> dict[str, list[str]]:
    return {action.value: [chord.to_text() for chord in chords] for action, chords in bindings.items()}


@dataclass
class StoredProfile:
    """Everything restored from and written back to the config file."""

    profile: Profile = field(default_factory=Profile.initial)
    bindings: ActionBinding = field(default_factory=default_bindings)
    shell: str = DEFAULT_SHELL
    tab_size: int = DEFAULT_TAB_SIZE
    extra: dict[str, object] = field(default_factory=dict)


def profile_from_config(data: dict[str, object]) -> StoredProfile:
    """Build a ``StoredProfile`` from (possibly old or partial) config data."""
    data = migrate(data)
    regexes = _string_list(data.get("regexes"), DEFAULT_REGEXES)
    cmds = _string_list(data.get("cmds"), DEFAULT_CMDS)
    profile = Profile(
        regex_list=StringList.of(regexes, _index(data.get("current_regex"))),
        cmd_list=StringList.of(cmds, _index(data.get("current_cmd"))),
    )
    shell = data.get("shell")
    if not isinstance(shell, str) or not shell.strip():
        shell = DEFAULT_SHELL
    tab_size = data.get("tab_size")
    if isinstance(tab_size, bool) or not isinstance(tab_size, int) or tab_size < 0:
        tab_size = DEFAULT_TAB_SIZE
    known = {"version", "regexes", "current_regex", "cmds", "current_cmd", "shell", "tab_size", "key_map"}
    return StoredProfile(
        profile=profile,
        bindings=bindings_from_config(data.get("key_map")),
        shell=shell,
        tab_size=tab_size,
        extra={key: value for key, value in data.items() if key not in known},
    )


def profile_to_config(stored: StoredProfile) -> dict[str, object]:
    profile = stored.profile
    data: dict[str, object] = dict(stored.extra)
    data.update(
        {
            "version": CURRENT_VERSION,
            "regexes": list(profile.regex_list.items),
            "current_regex": profile.regex_list.current_index,
            "cmds": list(profile.cmd_list.items),
            "current_cmd": profile.cmd_list.current_index,
            "shell": stored.shell,
            "tab_size": stored.tab_size,
            "key_map": bindings_to_config(stored.bindings),
        }
    )
    return data


def load_profile(path: Path | None = None) -> StoredProfile:
    return profile_from_config(load_config(path))


def save_profile(stored: StoredProfile, path: Path | None = None) -> bool:
    return save_config(profile_to_config(stored), path)
