"""
Longitudinal analysis of communities.

- ``EgoNet``: window-local ego network of an actor
- ``FrameAnalyst``: sliding fixed-size frames over the act sequence
- ``summarize_frames``: one summary row per analysed frame
"""

from .egonet import EgoNet
from .frames import (
    FrameAnalyst,
    FrameState,
    RunSummary,
    TimelessDataWarning,
    ROW_FIELDS,
    DEFAULT_OUTPUT_PATH,
)
from .summary import summarize_frames
