# store_config.py
from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from log import get_logger
from models import AppConfig, HostInfoEmulation, VbanRecv, VbanSend


DEFAULT_CONFIG_TEXT = """\
[App]
dropin_dir =
pulse_client_name = vbanwire

[HostInfo]
enabled = false
"""

SEND_SECTION = "send "
RECV_SECTION = "recv "

log = get_logger("store_config")


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def user_config_dir(app_name: str) -> Path:
    return _linux_xdg_config_dir() / app_name


def _coerce(section: configparser.SectionProxy, name: str, default: Any) -> Any:
    raw = section.get(name, fallback=None)
    if raw is None:
        return default
    try:
        if isinstance(default, bool):
            return section.getboolean(name, fallback=default)
        if isinstance(default, int):
            return int(raw.strip())
    except ValueError:
        log.warning("[%s] %s = %r is not valid, using %r", section.name, name, raw, default)
        return default
    return raw.strip()


def _read_into(obj: Any, section: configparser.SectionProxy) -> Any:
    for f in fields(obj):
        if f.name == "id":
            continue
        setattr(obj, f.name, _coerce(section, f.name, getattr(obj, f.name)))
    return obj


def _write_from(cfg: configparser.ConfigParser, section: str, obj: Any) -> None:
    cfg.add_section(section)
    for f in fields(obj):
        if f.name == "id":
            continue
        v = getattr(obj, f.name)
        if isinstance(v, bool):
            v = "true" if v else "false"
        cfg.set(section, f.name, str(v))


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = "vbanwire"
    filename: str = "vbanwire.cfg"
    base_dir: Optional[Path] = None

    @property
    def dir_path(self) -> Path:
        if self.base_dir is not None:
            return self.base_dir
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        self.ensure_exists()
        # interpolation off: descriptions may contain '%'
        cfg = configparser.ConfigParser(interpolation=None)
        cfg.read(self.file_path, encoding="utf-8")

        if not cfg.has_section("App"):
            cfg.add_section("App")
        cfg.set("App", "dropin_dir", cfg.get("App", "dropin_dir", fallback=""))
        cfg.set("App", "pulse_client_name", cfg.get("App", "pulse_client_name", fallback="vbanwire"))

        if not cfg.has_section("HostInfo"):
            cfg.add_section("HostInfo")

        return cfg

    def save(self, cfg: configparser.ConfigParser) -> None:
        self.ensure_exists()
        with self.file_path.open("w", encoding="utf-8") as f:
            cfg.write(f)

    def dropin_dir(self) -> Optional[Path]:
        p = self.load().get("App", "dropin_dir", fallback="").strip()
        return Path(p).expanduser() if p else None

    def pulse_client_name(self) -> str:
        return self.load().get("App", "pulse_client_name", fallback="").strip() or "vbanwire"

    def load_app_config(self) -> AppConfig:
        cfg = self.load()
        app = AppConfig(host_info_emulation=_read_into(HostInfoEmulation(), cfg["HostInfo"]))

        for section in cfg.sections():
            if section.startswith(SEND_SECTION):
                sid = section[len(SEND_SECTION):].strip().lower()
                app.sends.append(_read_into(VbanSend(id=sid), cfg[section]))
            elif section.startswith(RECV_SECTION):
                rid = section[len(RECV_SECTION):].strip().lower()
                app.recvs.append(_read_into(VbanRecv(id=rid), cfg[section]))

        return app

    def save_app_config(self, app: AppConfig) -> None:
        cfg = self.load()
        for section in cfg.sections():
            if section.startswith((SEND_SECTION, RECV_SECTION)) or section == "HostInfo":
                cfg.remove_section(section)

        _write_from(cfg, "HostInfo", app.host_info_emulation)
        for s in app.sends:
            _write_from(cfg, f"{SEND_SECTION}{s.id}", s)
        for r in app.recvs:
            _write_from(cfg, f"{RECV_SECTION}{r.id}", r)

        self.save(cfg)
