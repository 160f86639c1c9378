"""Where netstack keeps its files, and which profile a command runs against.

Layout (``$XDG_CONFIG_HOME`` and ``$XDG_DATA_HOME`` honoured on every
platform)::

    ~/.config/netstack/config.json          GlobalConfig
    ~/.config/netstack/profiles/<name>.json one Profile per API target
    ~/.local/share/netstack/credentials/    CredentialStore entries
    ~/.local/share/netstack/logs/           crash logs

Every file is replaced atomically by :func:`_atomic_write`, so a crash
mid-write leaves the previous version in place.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from netstack.exceptions import ConfigError
from netstack.models import GlobalConfig, Profile

ENV_PROFILE = "NETSTACK_PROFILE"
ENV_BASE_URL = "NETSTACK_BASE_URL"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _app_dir(env_var: str, *default: str) -> Path:
    base = os.environ.get(env_var) or Path.home().joinpath(*default)
    path = Path(base) / "netstack"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    return _app_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    return _app_dir("XDG_DATA_HOME", ".local", "share")


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Replace *path* with *data* via a sibling temp file.

    *mode* is applied to the temp file before the rename, so the final file
    never exists with wider permissions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if mode is not None:
            os.chmod(tmp_name, mode)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_model(path: Path, model: type[_ModelT], label: str) -> _ModelT:
    try:
        return model.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc


def _write_model(path: Path, value: BaseModel) -> None:
    _atomic_write(path, json.dumps(value.model_dump(mode="json"), indent=2) + "\n")


def load_global_config() -> GlobalConfig:
    """Read ``config.json``; a missing file means all defaults."""
    path = get_config_dir() / "config.json"
    if not path.is_file():
        return GlobalConfig()
    return _read_model(path, GlobalConfig, "global config")


def save_global_config(config: GlobalConfig) -> None:
    _write_model(get_config_dir() / "config.json", config)


def _profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(exist_ok=True)
    return path


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.json"


def _existing_profile_path(name: str) -> Path:
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    return path


def list_profiles() -> list[str]:
    return sorted(path.stem for path in _profiles_dir().glob("*.json") if path.is_file())


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def load_profile(name: str) -> Profile:
    """Raises :class:`ConfigError` when the profile is missing or malformed."""
    return _read_model(_existing_profile_path(name), Profile, f"profile '{name}'")


def save_profile(profile: Profile) -> None:
    _write_model(_profile_path(profile.name), profile)


def delete_profile(name: str) -> None:
    _existing_profile_path(name).unlink()


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Pick the profile a command runs against.

    The first of these names wins: ``--profile``, ``$NETSTACK_PROFILE``, the
    global ``default_profile``, and finally the only saved profile when
    ``auto_select_single_profile`` is on. ``--base-url`` (or
    ``$NETSTACK_BASE_URL``) then replaces the profile's ``base_url``.

    Returns ``(global_config, profile)``; ``profile`` is ``None`` when no
    name could be chosen.
    """
    global_cfg = load_global_config()
    name = cli_profile or os.environ.get(ENV_PROFILE) or global_cfg.default_profile
    if name is None and global_cfg.auto_select_single_profile:
        saved = list_profiles()
        name = saved[0] if len(saved) == 1 else None
    if name is None:
        return global_cfg, None

    profile = load_profile(name)
    base_url = cli_base_url or os.environ.get(ENV_BASE_URL)
    if base_url:
        profile.base_url = base_url
    return global_cfg, profile
