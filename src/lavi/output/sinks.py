"""
Row sinks for analysis results.

The frame analyst emits one record (a mapping of field name to value) per
resident reply per analysed frame. A sink receives these records in order.

- ``CSVRowWriter`` streams records to comma-separated text, flushing after
  every record so progress of long runs is visible on disk
- ``DataFrameSink`` collects records in memory and hands them over as a
  Polars DataFrame
"""

import csv
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, IO, List, Mapping, Optional, Union

import polars as pl

from ..common.exceptions import DataFormatError, validate_parameter
from ..common.logging_config import get_logger

logger = get_logger(__name__)

SAVE_FORMATS = ["csv", "parquet"]


class RowSink(ABC):
    """Destination for statistic records."""

    @abstractmethod
    def write_row(self, record: Mapping[str, Any]) -> None:
        """Accept one record."""

    def close(self) -> None:
        """Release resources held by the sink."""

    def __enter__(self) -> "RowSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class CSVRowWriter(RowSink):
    """
    Write records as CSV, inferring the header from the first record.

    Parameters
    ----------
    target : Union[str, Path, IO[str]]
        Output path (created/truncated) or an open text handle. Handles passed
        in are flushed but not closed by ``close()``.

    Raises
    ------
    DataFormatError
        From ``write_row`` when a record's fields differ from the header

    Examples
    --------
    >>> with CSVRowWriter("/tmp/out.csv") as sink:
    ...     sink.write_row({"step": 0, "from": 1, "to": 2})
    """

    def __init__(self, target: Union[str, Path, IO[str]]) -> None:
        if isinstance(target, (str, Path)):
            path = Path(target)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._fp: IO[str] = open(path, "w", newline="", encoding="utf-8")
            self._owns_fp = True
            self.path: Optional[Path] = path
        else:
            self._fp = target
            self._owns_fp = False
            self.path = None
        self._writer = csv.writer(self._fp, lineterminator="\n")
        self.headers: List[str] = []
        self.rows_written = 0

    def write_row(self, record: Mapping[str, Any]) -> None:
        if not self.headers:
            self.headers = list(record.keys())
            self._writer.writerow(self.headers)
        elif len(record) != len(self.headers) or any(h not in record for h in self.headers):
            raise DataFormatError(
                "Record fields do not match the CSV header",
                format_type="CSV",
                file_path=str(self.path) if self.path else None,
                line_number=self.rows_written + 1,
                details={"header": self.headers, "fields": list(record.keys())}
            )
        self._writer.writerow([record[h] for h in self.headers])
        self._fp.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._owns_fp:
            if not self._fp.closed:
                self._fp.close()
                logger.debug("Wrote %d rows to %s", self.rows_written, self.path)
        else:
            self._fp.flush()


class DataFrameSink(RowSink):
    """
    Collect records in memory for tabular post-processing.

    Examples
    --------
    >>> sink = DataFrameSink()
    >>> sink.write_row({"step": 0, "ii": 1})
    >>> sink.to_dataframe().shape
    (1, 2)
    """

    def __init__(self) -> None:
        self.rows: List[Dict[str, Any]] = []

    def write_row(self, record: Mapping[str, Any]) -> None:
        self.rows.append(dict(record))

    def to_dataframe(self) -> pl.DataFrame:
        if not self.rows:
            return pl.DataFrame()
        return pl.DataFrame(self.rows)

    def write_csv(self, path: Union[str, Path]) -> None:
        self.to_dataframe().write_csv(path)

    def write_parquet(self, path: Union[str, Path]) -> None:
        self.to_dataframe().write_parquet(path)

    def save(self, path: Union[str, Path], format: str = "csv") -> None:
        """
        Write the collected records to ``path``.

        Raises
        ------
        ConfigurationError
            If ``format`` is not one of ``SAVE_FORMATS``
        """
        validate_parameter(format, SAVE_FORMATS, "format", "DataFrameSink.save")
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        if format == "csv":
            self.write_csv(path)
        else:
            self.write_parquet(path)
        logger.debug("Saved %d rows to %s (%s)", len(self.rows), path, format)
