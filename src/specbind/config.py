"""Where specbind keeps its settings, and how a compile run's settings are chosen.

Files:

* ``$XDG_CONFIG_HOME/specbind/config.json`` -- user-wide
  :class:`~specbind.models.GlobalConfig` (``~/.specbind/config.json`` on
  platforms without XDG).
* ``./specbind.json`` -- per-repository :class:`~specbind.models.CompilerConfig`
  keys, so ``specbind compile`` can run without arguments.
* ``$XDG_DATA_HOME/specbind/logs/`` -- crash logs written by
  :func:`specbind.app.main`.

A compile run's settings come from :func:`resolve_config`, which layers
defaults, the global file, ``specbind.json``, ``SPECBIND_*`` environment
variables and CLI flags, each overriding the one before.

Every generated binding goes through :func:`_atomic_write` so a crash never
leaves a half-written module behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from specbind.exceptions import ConfigError
from specbind.models import CompilerConfig, GlobalConfig

_APP_NAME = "specbind"
_GLOBAL_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "specbind.json"

ENV_SPEC_DIR = "SPECBIND_SPEC_DIR"
ENV_OUT_DIR = "SPECBIND_OUT_DIR"
ENV_WORKERS = "SPECBIND_WORKERS"

# CompilerConfig field fed by each environment variable.
_ENV_FIELDS = {
    ENV_SPEC_DIR: "spec_dir",
    ENV_OUT_DIR: "out_dir",
    ENV_WORKERS: "workers",
}


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """``$env_var`` if set and non-empty, else ``~/<default_segments>``."""
    value = os.environ.get(env_var)
    if value:
        return Path(value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Directory holding the global config file.

    The directory is not created here; writers create it on demand.
    """
    if not _is_xdg_platform():
        return _fallback_base_dir()
    return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME


def get_data_dir() -> Path:
    """Directory for files specbind produces about itself (crash logs)."""
    if not _is_xdg_platform():
        return _fallback_base_dir()
    return _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one rename.

    The text is written to a hidden sibling temp file, fsynced, then moved over
    *path* with :func:`os.replace`. Newlines are written as ``\\n`` on every
    platform so generated bindings are byte-identical everywhere. If anything
    fails the temp file is removed and *path* keeps its old content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        newline="\n",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Global and project files
# ---------------------------------------------------------------------------


def global_config_path() -> Path:
    return get_config_dir() / _GLOBAL_CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read the global config, or return defaults when there is none.

    Raises:
        ConfigError: If the file is not valid JSON or does not match
            :class:`~specbind.models.GlobalConfig`.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``specbind.json`` from the working directory.

    Returns ``None`` when the file is absent. Keys are validated later, by
    :func:`resolve_config`, together with the other layers.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


def _env_overrides() -> dict[str, Any]:
    return {
        field: os.environ[var]
        for var, field in _ENV_FIELDS.items()
        if os.environ.get(var)
    }


def resolve_config(
    cli_spec_dir: Optional[str] = None,
    cli_out_dir: Optional[str] = None,
    cli_workers: Optional[int] = None,
    cli_strict: Optional[bool] = None,
    cli_exclude: Optional[list[str]] = None,
) -> CompilerConfig:
    """Build the :class:`~specbind.models.CompilerConfig` for one run.

    Later layers win: defaults, global config, ``./specbind.json``,
    ``SPECBIND_*`` variables, then CLI arguments that are not ``None``.
    ``cli_exclude`` is the one exception: its patterns are added to the
    configured ``exclude`` list instead of replacing it.

    Raises:
        ConfigError: If a layer cannot be read or the merged values are
            invalid (for example ``SPECBIND_WORKERS=many``).
    """
    merged = load_global_config().compiler.model_dump()
    merged.update(load_project_config() or {})
    merged.update(_env_overrides())

    cli = {
        "spec_dir": cli_spec_dir,
        "out_dir": cli_out_dir,
        "workers": cli_workers,
        "strict": cli_strict,
    }
    merged.update({key: value for key, value in cli.items() if value is not None})
    if cli_exclude:
        merged["exclude"] = [*(merged.get("exclude") or []), *cli_exclude]

    try:
        return CompilerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid compiler configuration: {exc}") from exc
