"""
Lavi - Longitudinal Analysis of VIrtual communities.

A community is a time-ordered log of communication acts (calls and replies)
between actors, e.g. the messages of a mailing list. Lavi slides fixed-size
frames over the act sequence and reports, for every reply in every frame, how
the ego networks of the two actors it connects overlap.

Modules:
    common: Exceptions, logging configuration and ID mapping
    community: Act/actor model, community builder and act-log loaders
    analysis: Ego networks, the frame analyst and frame summaries
    output: Row sinks for analysis records
    network: Networkit graphs of communities and frames

Example session:

    >>> from lavi import import_lax, FrameAnalyst
    >>> community = import_lax("testdata/test1.lax")
    >>> print(community.summary())
    >>> analyst = FrameAnalyst(community)
    >>> analyst.setup()
    >>> analyst.run_to_csv("/tmp/out.csv")
"""

__version__ = "0.1.0"

from .common.exceptions import (
    LaviError,
    ValidationError,
    DataFormatError,
    ConfigurationError,
    DataIntegrityError,
    InvalidOperationError,
)
from .common.logging_config import setup_logging, get_logger
from .community import (
    Act,
    Actor,
    Call,
    Community,
    CommunityBuilder,
    Reply,
    import_lax,
    load_acts,
)
from .analysis import (
    EgoNet,
    FrameAnalyst,
    FrameState,
    RunSummary,
    TimelessDataWarning,
    summarize_frames,
)
from .output import RowSink, CSVRowWriter, DataFrameSink

__all__ = [
    "LaviError",
    "ValidationError",
    "DataFormatError",
    "ConfigurationError",
    "DataIntegrityError",
    "InvalidOperationError",
    "setup_logging",
    "get_logger",
    "Act",
    "Actor",
    "Call",
    "Community",
    "CommunityBuilder",
    "Reply",
    "import_lax",
    "load_acts",
    "EgoNet",
    "FrameAnalyst",
    "FrameState",
    "RunSummary",
    "TimelessDataWarning",
    "summarize_frames",
    "RowSink",
    "CSVRowWriter",
    "DataFrameSink",
]
