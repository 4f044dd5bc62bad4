# fragments.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Set

from errors import FilesystemError
from log import get_logger
from models import AppConfig
from pw_conf import filename_recv, filename_send, is_vbanwire_fragment, render_recv, render_send


log = get_logger("fragments")


def pipewire_dropin_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "pipewire" / "pipewire.conf.d"


def _write(path: Path, body: str) -> None:
    try:
        path.write_text(body, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Could not write fragment {path}: {e}") from e
    log.debug("wrote %s", path)


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as e:
        raise FilesystemError(f"Could not remove fragment {path}: {e}") from e
    log.info("removed %s", path)


def _sync_one(dir_path: Path, file_name: str, enabled: bool, body_fn) -> None:
    path = dir_path / file_name
    if enabled:
        _write(path, body_fn())
    elif path.exists():
        _remove(path)


def cleanup_removed_entries(dir_path: Path, keep: Set[str]) -> None:
    try:
        entries = sorted(dir_path.iterdir())
    except OSError as e:
        raise FilesystemError(f"Could not list {dir_path}: {e}") from e

    for path in entries:
        if not is_vbanwire_fragment(path.name) or path.name in keep:
            continue
        if path.is_file():
            _remove(path)


def apply_fragments(cfg: AppConfig, dropin_dir: Optional[Path] = None) -> None:
    """
    Make the drop-in directory hold exactly one fragment per enabled endpoint.

    Disabled endpoints lose their fragment; fragments of endpoints that no
    longer exist in ``cfg`` are swept. Files not named like ours are never
    touched. The first filesystem error aborts the pass.
    """
    dir_path = dropin_dir if dropin_dir is not None else pipewire_dropin_dir()
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Could not create {dir_path}: {e}") from e

    keep: Set[str] = set()
    host = cfg.host_info_emulation

    for send in cfg.sends:
        name = filename_send(send.id)
        keep.add(name)
        _sync_one(dir_path, name, send.enabled, lambda s=send: render_send(s, host))

    for recv in cfg.recvs:
        name = filename_recv(recv.id)
        keep.add(name)
        _sync_one(dir_path, name, recv.enabled, lambda r=recv: render_recv(r, host))

    cleanup_removed_entries(dir_path, keep)
