"""Configuration loading from environment variables and stockpile.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from stockpile.notify.mail import DEFAULT_MAIL_FROM, DEFAULT_MAIL_TO

_DEFAULT_HOME = Path.home() / ".stockpile"
_CONFIG_FILENAME = "stockpile.toml"


@dataclass
class ObserverConfig:
    """Side-channel destinations for the bundled observers."""

    change_log: Path = _DEFAULT_HOME / "changes.jsonl"
    alert_log: Path = _DEFAULT_HOME / "alerts.jsonl"
    outbox_dir: Path | None = None
    mail_to: str = DEFAULT_MAIL_TO
    mail_from: str = DEFAULT_MAIL_FROM


@dataclass
class StockpileConfig:
    """Top-level stockpile configuration."""

    store_path: Path = _DEFAULT_HOME / "store.json"
    observers: ObserverConfig = field(default_factory=ObserverConfig)
    log_level: str = "INFO"


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def load_config(config_path: Path | None = None) -> StockpileConfig:
    """Load configuration from environment variables and optional stockpile.toml.

    Priority: environment variables > stockpile.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _DEFAULT_HOME / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    observer_data = file_data.get("observers", {})
    defaults = ObserverConfig()

    return StockpileConfig(
        store_path=Path(
            os.getenv("STOCKPILE_STORE_PATH", file_data.get("store_path", str(StockpileConfig.store_path)))
        ),
        observers=ObserverConfig(
            change_log=Path(
                os.getenv("STOCKPILE_CHANGE_LOG", observer_data.get("change_log", str(defaults.change_log)))
            ),
            alert_log=Path(
                os.getenv("STOCKPILE_ALERT_LOG", observer_data.get("alert_log", str(defaults.alert_log)))
            ),
            outbox_dir=_optional_path(
                os.getenv("STOCKPILE_OUTBOX_DIR", observer_data.get("outbox_dir"))
            ),
            mail_to=os.getenv("STOCKPILE_MAIL_TO", observer_data.get("mail_to", defaults.mail_to)),
            mail_from=os.getenv("STOCKPILE_MAIL_FROM", observer_data.get("mail_from", defaults.mail_from)),
        ),
        log_level=os.getenv("STOCKPILE_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
