"""
Tests for per-frame summaries of analysis records.
"""

import polars as pl
import pytest

from lavi.analysis.frames import FrameAnalyst
from lavi.analysis.summary import SUMMARY_SCHEMA, summarize_frames
from lavi.common.exceptions import ValidationError
from lavi.output.sinks import DataFrameSink


def analysed(community, frame_size):
    analyst = FrameAnalyst(community)
    analyst.setup(frame_size)
    return analyst


class TestSummarizeFrames:
    """Test collapsing records into one row per frame."""

    def test_one_row_per_frame(self, ten_act_community):
        df = analysed(ten_act_community, 4).run_to_dataframe()

        summary = summarize_frames(df)

        assert summary["step"].to_list() == [0, 1, 2, 3]
        assert summary["replies"].to_list() == [3, 4, 4, 4]
        assert summary["numactors"].to_list() == [3, 4, 5, 4]
        assert summary["numleft"].to_list() == [0, 0, 0, 1]
        assert summary["numacts"].to_list() == [4, 4, 4, 4]

    def test_accepts_record_list(self, ten_act_community):
        """A list of dicts gives the same result as the DataFrame."""
        sink = DataFrameSink()
        analysed(ten_act_community, 4).run(sink)

        from_rows = summarize_frames(sink.rows)
        from_df = summarize_frames(sink.to_dataframe())

        assert from_rows.equals(from_df)

    def test_mean_overlaps(self, overlap_community):
        """Means are taken over the records of one frame."""
        df = analysed(overlap_community, 7).run_to_dataframe()

        summary = summarize_frames(df)

        assert summary.height == 1
        for name in ("ii", "io", "oo", "oi"):
            assert summary[f"mean_{name}"][0] == pytest.approx(df[name].mean())

    def test_empty_input(self):
        summary = summarize_frames([])

        assert summary.is_empty()
        assert dict(summary.schema) == SUMMARY_SCHEMA

    def test_missing_fields(self):
        df = pl.DataFrame({"step": [0], "ii": [1]})

        with pytest.raises(ValidationError, match="Missing record fields"):
            summarize_frames(df)
