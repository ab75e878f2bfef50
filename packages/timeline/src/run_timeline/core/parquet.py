from __future__ import annotations

from pathlib import Path

import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq

from .fs import atomic_target


def write_parquet_atomic(
    table: pa.Table | pl.DataFrame,
    out_path: Path,
    compression: str = "zstd",
) -> None:
    """
    Write `table` to `out_path` through a same-directory temp file.

    Frames are converted to arrow first since `pq.write_table` expects an
    arrow schema. `compression="none"` writes uncompressed pages.
    """
    if isinstance(table, pl.DataFrame):
        table = table.to_arrow()
    elif not isinstance(table, pa.Table):
        raise TypeError(f"Unsupported parquet input type: {type(table).__name__}")

    codec = None if compression == "none" else compression
    with atomic_target(out_path) as tmp:
        pq.write_table(table, tmp, compression=codec)


def read_parquet_df(path: Path) -> pl.DataFrame:
    return pl.read_parquet(path)
