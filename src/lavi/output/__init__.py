"""
Output sinks for frame statistics.
"""

from .sinks import RowSink, CSVRowWriter, DataFrameSink
