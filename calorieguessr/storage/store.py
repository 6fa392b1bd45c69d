from __future__ import annotations

"""Parquet-backed history of completed days using pandas + pyarrow.

Unit of data: (day × question) result rows.
"""

from pathlib import Path

import pandas as pd
import pyarrow  # noqa: F401  # parquet engine

from .schema import DTYPES, DayResultRow


DATA_FILE = "day_results.parquet"
KEY_COLUMNS = ["date", "question_index"]


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})


def init_store(data_dir: Path) -> None:
    """Ensure the data directory and an empty Parquet file with the right schema exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    f = data_dir / DATA_FILE
    if not f.exists():
        _empty_df().to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def validate_records(records: list[DayResultRow]) -> pd.DataFrame:
    """Validate rows via Pydantic and return a DataFrame with enforced dtypes."""
    if not isinstance(records, list):
        raise TypeError("records must be a list[DayResultRow]")
    rows = [r if isinstance(r, DayResultRow) else DayResultRow.model_validate(r) for r in records]
    if not rows:
        return _empty_df()
    df = pd.DataFrame([r.model_dump() for r in rows])
    return _fix_dtypes(df)


def _fix_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    for col, dt in DTYPES.items():
        if col not in df.columns:
            df[col] = pd.NA
        df[col] = df[col].astype(dt)
    return df[list(DTYPES.keys())]


def append_day_results(df_new: pd.DataFrame, data_dir: Path) -> None:
    """Append rows; a replayed (date, question_index) replaces the older row."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    f = data_dir / DATA_FILE
    df_old = pd.read_parquet(f, engine="pyarrow") if f.exists() else _empty_df()
    parts = [_fix_dtypes(d.copy()) for d in (df_old, df_new) if not d.empty]
    combined = pd.concat(parts, ignore_index=True) if parts else _empty_df()
    combined = combined.drop_duplicates(subset=KEY_COLUMNS, keep="last")
    combined = combined.sort_values(KEY_COLUMNS).reset_index(drop=True)
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def load_all(data_dir: Path) -> pd.DataFrame:
    f = Path(data_dir) / DATA_FILE
    if not f.exists():
        return _empty_df()
    return _fix_dtypes(pd.read_parquet(f, engine="pyarrow"))


def daily_totals(df: pd.DataFrame) -> pd.DataFrame:
    """Per-day total and mean points, newest day first.

    Columns: date, total, mean, questions.
    """
    if df.empty:
        return pd.DataFrame(
            {
                "date": pd.Series(dtype="string"),
                "total": pd.Series(dtype="int64"),
                "mean": pd.Series(dtype="float64"),
                "questions": pd.Series(dtype="int64"),
            }
        )
    pts = df["points"].astype("int64")
    g = pts.groupby(df["date"].astype("string"))
    out = pd.DataFrame({"total": g.sum(), "mean": g.mean(), "questions": g.count()})
    out.index.name = "date"
    out = out.reset_index().sort_values("date", ascending=False).reset_index(drop=True)
    return out


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")
