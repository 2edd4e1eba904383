# growatt_monitor/config.py
from dataclasses import dataclass, field
from pathlib import Path
import configparser
import os


DEFAULT_BASE_URL = "https://server.growatt.com/"


@dataclass
class GrowattConfig:
    username: str | None = None
    password: str | None = None
    plant_id: str | None = None
    mix_id: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float | None = None


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    growatt: GrowattConfig
    logging: LoggingConfig


class Config:
    def __init__(self, path: str):
        self.path = Path(path)
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        read = self.parser.read(self.path)
        if not read:
            raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def load(cls, path: str) -> AppConfig:
        cfg = cls(path)

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() == "true"

        def _maybe_float(raw: str | None) -> float | None:
            if raw is None:
                return None
            raw = raw.strip()
            if not raw:
                return None
            return float(raw)

        # --- Growatt ---
        if "growatt" not in p:
            raise ValueError("[growatt] section missing from config")

        growatt_sec = p["growatt"]
        growatt_kwargs = {}
        for key in ("username", "password", "plant_id", "mix_id"):
            if key in growatt_sec and growatt_sec[key].strip():
                growatt_kwargs[key] = growatt_sec[key].strip()
        if "base_url" in growatt_sec and growatt_sec["base_url"].strip():
            growatt_kwargs["base_url"] = growatt_sec["base_url"].strip()
        if (timeout := _maybe_float(growatt_sec.get("timeout"))) is not None:
            growatt_kwargs["timeout"] = timeout

        # Credentials from the environment win over the file.
        if os.environ.get("GROWATT_USERNAME"):
            growatt_kwargs["username"] = os.environ["GROWATT_USERNAME"]
        if os.environ.get("GROWATT_PASSWORD"):
            growatt_kwargs["password"] = os.environ["GROWATT_PASSWORD"]
        growatt_cfg = GrowattConfig(**growatt_kwargs)

        # --- Logging ---
        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            growatt=growatt_cfg,
            logging=logging_cfg,
        )
