from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd


@dataclass(frozen=True)
class TabularData:
    headers: List[str]
    rows: List[Dict[str, Any]]
    source: Path

    @property
    def total_rows(self) -> int:
        return len(self.rows)


def _frame_to_tabular(df: pd.DataFrame, source: Path) -> TabularData:
    df = df.rename(columns=lambda c: str(c).strip())
    # Cells are read as text; blanks stay "" so the rules see them as empty
    df = df.fillna("")
    return TabularData(
        headers=[str(c) for c in df.columns],
        rows=df.to_dict(orient="records"),
        source=source,
    )


def read_csv(path: Path, encoding: str = "utf-8") -> TabularData:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding=encoding)
    return _frame_to_tabular(df, path)


def read_excel(path: Path, sheet_name: str | int = 0) -> TabularData:
    df = pd.read_excel(path, sheet_name=sheet_name, dtype=str, engine="openpyxl")
    return _frame_to_tabular(df, path)


def read_table(path: Path) -> TabularData:
    """Read a CSV or XLSX upload into headers and row dicts."""
    suffix = path.suffix.lower()
    if suffix in (".csv", ".txt"):
        return read_csv(path)
    if suffix in (".xlsx", ".xlsm"):
        return read_excel(path)
    raise ValueError(f"Unsupported file type '{path.suffix}' (expected .csv or .xlsx)")


class IOService:
    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def read_table(self, path: Path) -> TabularData:
        self.logger.info("Reading input table", extra={"path": str(path)})
        data = read_table(path)
        self.logger.info(
            f"Loaded {data.total_rows} rows, {len(data.headers)} columns",
            extra={"path": str(path), "rows": data.total_rows, "columns": len(data.headers)},
        )
        return data
