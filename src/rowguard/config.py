from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, cast

from .domain.options import ValidationOptions, merge_options
from .types import ConfigOverrides, YamlConfig


@dataclass(frozen=True)
class Config:
    batch_size: int = 1000
    max_preview_rows: int = 100
    stop_on_error_threshold: float = 50.0
    enable_real_time_updates: bool = True
    max_retained_issues: Optional[int] = None
    # Seconds between progress polls while a run is active
    poll_interval: float = 1.0
    # Max issues echoed to the log after a run
    max_errors: int = 50

    def to_options(self) -> ValidationOptions:
        return merge_options(
            {
                "batch_size": self.batch_size,
                "max_preview_rows": self.max_preview_rows,
                "stop_on_error_threshold": self.stop_on_error_threshold,
                "enable_real_time_updates": self.enable_real_time_updates,
                "max_retained_issues": self.max_retained_issues,
            }
        )


def _read_yaml(path: Path) -> YamlConfig:
    import yaml

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        return cast(YamlConfig, raw)
    return {}


def load_config(path: Optional[Path], overrides: Optional[ConfigOverrides] = None) -> Config:
    data: YamlConfig = {}

    default_config = Path("configs/config.yaml")
    if default_config.exists():
        data.update(_read_yaml(default_config))

    if path is not None and path.exists():
        data.update(_read_yaml(path))

    if overrides:
        data.update(cast(YamlConfig, {k: v for k, v in overrides.items() if v is not None}))

    val = data.get("enable_real_time_updates")
    if isinstance(val, str):
        data["enable_real_time_updates"] = val.strip().lower() in {"1", "true", "yes", "y"}

    defaults = Config()
    retained = data.get("max_retained_issues", defaults.max_retained_issues)
    return Config(
        batch_size=int(data.get("batch_size", defaults.batch_size)),
        max_preview_rows=int(data.get("max_preview_rows", defaults.max_preview_rows)),
        stop_on_error_threshold=float(
            data.get("stop_on_error_threshold", defaults.stop_on_error_threshold)
        ),
        enable_real_time_updates=bool(
            data.get("enable_real_time_updates", defaults.enable_real_time_updates)
        ),
        max_retained_issues=int(retained) if retained is not None else None,
        poll_interval=float(data.get("poll_interval", defaults.poll_interval)),
        max_errors=int(data.get("max_errors", defaults.max_errors)),
    )
