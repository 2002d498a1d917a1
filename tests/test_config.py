from __future__ import annotations

from pathlib import Path

import pytest

from rowguard.config import Config, load_config
from rowguard.domain.options import merge_options


def test_defaults_without_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    cfg = load_config(None)
    assert cfg == Config()
    opts = cfg.to_options()
    assert opts.batch_size == 1000
    assert opts.max_preview_rows == 100
    assert opts.stop_on_error_threshold == 50.0


def test_layering_file_then_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "config.yaml").write_text(
        "batch_size: 200\nmax_errors: 5\n", encoding="utf-8"
    )
    custom = tmp_path / "custom.yaml"
    custom.write_text(
        "batch_size: 300\nenable_real_time_updates: 'no'\nmax_retained_issues: 1000\n",
        encoding="utf-8",
    )

    cfg = load_config(custom, overrides={"stop_on_error_threshold": 12.5})

    assert cfg.batch_size == 300
    assert cfg.max_errors == 5
    assert cfg.enable_real_time_updates is False
    assert cfg.max_retained_issues == 1000
    assert cfg.stop_on_error_threshold == 12.5


def test_merge_options_rejects_bad_values() -> None:
    with pytest.raises(ValueError, match="batch_size"):
        merge_options({"batch_size": 0})
    with pytest.raises(ValueError, match="Unknown validation options"):
        merge_options({"batchSize": 10})
    with pytest.raises(ValueError, match="max_retained_issues"):
        merge_options({"max_retained_issues": 0})


def test_merge_options_none_keeps_base() -> None:
    opts = merge_options({"batch_size": None, "max_preview_rows": 5})
    assert opts.batch_size == 1000
    assert opts.max_preview_rows == 5
