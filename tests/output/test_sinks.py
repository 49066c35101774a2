"""
Tests for analysis record sinks.
"""

import io

import polars as pl
import pytest

from lavi.common.exceptions import ConfigurationError, DataFormatError
from lavi.output.sinks import CSVRowWriter, DataFrameSink, RowSink


RECORD = {"step": 0, "from": 2, "to": 1, "ii": 1}


class TestCSVRowWriter:
    """Test the streaming CSV sink."""

    def test_header_from_first_record(self):
        buffer = io.StringIO()
        writer = CSVRowWriter(buffer)

        writer.write_row(RECORD)
        writer.write_row({**RECORD, "step": 1})

        assert buffer.getvalue() == "step,from,to,ii\n0,2,1,1\n1,2,1,1\n"
        assert writer.headers == ["step", "from", "to", "ii"]
        assert writer.rows_written == 2

    def test_rows_flushed_immediately(self, tmp_path):
        """Each record is on disk before the next one is written."""
        path = tmp_path / "rows.csv"
        writer = CSVRowWriter(path)

        writer.write_row(RECORD)

        assert path.read_text() == "step,from,to,ii\n0,2,1,1\n"
        writer.close()

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "out.csv"

        with CSVRowWriter(path) as writer:
            writer.write_row(RECORD)

        assert writer.path == path
        assert path.exists()

    def test_mismatched_record(self):
        writer = CSVRowWriter(io.StringIO())
        writer.write_row(RECORD)

        with pytest.raises(DataFormatError, match="do not match the CSV header"):
            writer.write_row({"step": 1, "from": 2})
        with pytest.raises(DataFormatError):
            writer.write_row({"step": 1, "from": 2, "to": 1, "oo": 0})

    def test_borrowed_handle_left_open(self):
        buffer = io.StringIO()

        with CSVRowWriter(buffer) as writer:
            writer.write_row(RECORD)

        assert not buffer.closed

    def test_owned_file_closed(self, tmp_path):
        writer = CSVRowWriter(tmp_path / "out.csv")
        writer.close()

        assert writer._fp.closed


class TestDataFrameSink:
    """Test the in-memory sink."""

    def test_collects_rows(self):
        sink = DataFrameSink()
        sink.write_row(RECORD)
        sink.write_row({**RECORD, "step": 1})

        df = sink.to_dataframe()

        assert df.height == 2
        assert df.columns == list(RECORD)
        assert df["step"].to_list() == [0, 1]

    def test_rows_are_copied(self):
        sink = DataFrameSink()
        record = dict(RECORD)
        sink.write_row(record)
        record["step"] = 99

        assert sink.rows[0]["step"] == 0

    def test_empty(self):
        assert DataFrameSink().to_dataframe().is_empty()

    def test_write_files(self, tmp_path):
        sink = DataFrameSink()
        sink.write_row(RECORD)

        sink.write_csv(tmp_path / "rows.csv")
        sink.write_parquet(tmp_path / "rows.parquet")

        assert pl.read_csv(tmp_path / "rows.csv").equals(sink.to_dataframe())
        assert pl.read_parquet(tmp_path / "rows.parquet").equals(sink.to_dataframe())

    def test_save(self, tmp_path):
        sink = DataFrameSink()
        sink.write_row(RECORD)

        sink.save(tmp_path / "out" / "rows.parquet", format="parquet")

        assert pl.read_parquet(tmp_path / "out" / "rows.parquet").height == 1

    def test_save_unknown_format(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Valid options for 'format'"):
            DataFrameSink().save(tmp_path / "rows.xml", format="xml")


def test_sinks_share_interface():
    assert issubclass(CSVRowWriter, RowSink)
    assert issubclass(DataFrameSink, RowSink)
    with pytest.raises(TypeError):
        RowSink()
