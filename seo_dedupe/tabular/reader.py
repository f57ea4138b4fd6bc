from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

"""CSV table reading / writing for catalog exports.

Reading keeps every cell as a string (no NA conversion, no dtype inference) so
that duplicate comparison works on the literal exported text. Header names and
cell values are whitespace-trimmed. Malformed lines are reported as warnings
and skipped; they never abort the read.
"""

logger = logging.getLogger(__name__)


class TableIOError(Exception):
    """Raised when the source table cannot be read or an output cannot be written."""


@dataclass
class TableData:
    columns: list[str]
    rows: list[dict[str, str]]  # 列名→値 (トリム済み)
    warnings: list[str] = field(default_factory=list)


def read_table(path: Path, *, delimiter: str = ",", encoding: str = "utf-8") -> TableData:
    """Read a header-having CSV file into string rows.

    Parameters
    ----------
    path: CSV ファイルパス
    delimiter: field separator
    encoding: file encoding
    """
    warnings: list[str] = []

    def _on_bad_line(bad_line: list[str]) -> None:
        warnings.append(f"skipped malformed line with {len(bad_line)} fields: {bad_line[:3]}")
        return None

    try:
        df = pd.read_csv(
            path,
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
            encoding=encoding,
            engine="python",
            on_bad_lines=_on_bad_line,
        )
    except FileNotFoundError as e:
        raise TableIOError(f"input table not found: {path}") from e
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise TableIOError(f"failed reading {path}: {e}") from e

    columns = [str(c).strip() for c in df.columns]
    clashes = sorted({c for c in columns if columns.count(c) > 1})
    if clashes:
        raise TableIOError(f"duplicate column names after trimming in {path}: {clashes}")
    df.columns = columns
    # 短い行の欠損セルは空文字扱い
    df = df.fillna("")
    rows = [
        {col: (val.strip() if isinstance(val, str) else val) for col, val in record.items()}
        for record in df.to_dict(orient="records")
    ]

    for w in warnings:
        logger.warning(f"CSV parse warning in {path.name}: {w}")

    return TableData(columns=columns, rows=rows, warnings=warnings)


def write_table(records: Iterable[Mapping[str, Any]], path: Path, *, delimiter: str = ",") -> int:
    """Write mappings to CSV; header is the union of keys in first-seen order.

    Returns the number of data rows written.
    """
    rows = [dict(r) for r in records]
    logger.info(f"Writing {len(rows)} rows to {path}...")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not rows:
            path.write_text("", encoding="utf-8")
        else:
            pd.DataFrame(rows).to_csv(path, sep=delimiter, index=False, encoding="utf-8")
    except OSError as e:
        raise TableIOError(f"failed writing {path}: {e}") from e
    logger.info(f"Successfully wrote data to {path}")
    return len(rows)
