"""
Per-frame summaries of frame analysis records.

``FrameAnalyst`` emits one record per reply per frame. This module collapses
those records into one row per step, keeping the frame-level aggregates and
averaging the edge overlap counts.
"""

from typing import Any, Mapping, Sequence, Union

import polars as pl

from .frames import ROW_FIELDS
from ..common.exceptions import ValidationError
from ..common.logging_config import get_logger

logger = get_logger(__name__)

FRAME_FIELDS = ["numjoined", "numleft", "numactors", "numacts"]
OVERLAP_FIELDS = ["ii", "io", "oo", "oi"]

SUMMARY_SCHEMA = {
    "step": pl.Int64,
    **{name: pl.Int64 for name in FRAME_FIELDS},
    "replies": pl.UInt32,
    **{f"mean_{name}": pl.Float64 for name in OVERLAP_FIELDS},
}


def summarize_frames(
    rows: Union[pl.DataFrame, Sequence[Mapping[str, Any]]]
) -> pl.DataFrame:
    """
    Summarise analysis records into one row per analysed frame.

    Parameters
    ----------
    rows : Union[pl.DataFrame, Sequence[Mapping[str, Any]]]
        Records as produced by ``FrameAnalyst`` (DataFrame or list of dicts)

    Returns
    -------
    pl.DataFrame
        Columns ``step``, ``numjoined``, ``numleft``, ``numactors``,
        ``numacts``, ``replies`` (records in the frame) and ``mean_ii``,
        ``mean_io``, ``mean_oo``, ``mean_oi``, sorted by step

    Raises
    ------
    ValidationError
        If required record fields are missing

    Examples
    --------
    >>> df = analyst.run_to_dataframe()
    >>> summarize_frames(df).select("step", "numactors", "replies")
    """
    df = rows if isinstance(rows, pl.DataFrame) else pl.DataFrame(list(rows))

    if df.is_empty():
        return pl.DataFrame(schema=SUMMARY_SCHEMA)

    missing = [name for name in ROW_FIELDS if name not in df.columns]
    if missing:
        raise ValidationError(
            f"Missing record fields: {missing}",
            field="columns",
            details={"available_columns": df.columns}
        )

    summary = (
        df.group_by("step", maintain_order=True)
        .agg(
            [pl.col(name).first() for name in FRAME_FIELDS]
            + [pl.len().alias("replies")]
            + [pl.col(name).mean().alias(f"mean_{name}") for name in OVERLAP_FIELDS]
        )
        .sort("step")
    )
    logger.debug("Summarised %d records into %d frames", df.height, summary.height)
    return summary
