"""
Longitudinal analysis of a community with fixed-size act frames.

The analyst slides a frame holding a constant number of acts over the
community's time-ordered act sequence. Consecutive frames overlap by half
(the window advances by ``frame_size // 2`` acts per step). Ego networks are
maintained incrementally: each step only evicts the acts that fell off the
left edge and ingests the acts that entered at the right edge.

A constant number of acts does not necessarily mean a constant span of time,
since the average interval between acts changes as a community grows (more
frequent acts) or shrinks (less frequent acts).
"""

from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Deque, Dict, Iterator, List, Mapping, Optional, Tuple, Union
import warnings

import polars as pl

from .egonet import EgoNet
from ..community.model import Act, Call, Community, Reply
from ..common.exceptions import ConfigurationError, require_positive
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer
from ..output.sinks import CSVRowWriter, DataFrameSink, RowSink

logger = get_logger(__name__)

DEFAULT_OUTPUT_PATH = "/tmp/lavi-output.csv"
DEFAULT_FRAMES_PER_COMMUNITY = 10

# Output record layout, in column order
ROW_FIELDS = (
    "step",
    "numjoined",
    "numleft",
    "numactors",
    "numacts",
    "from",
    "to",
    "fromInDegree",
    "toInDegree",
    "ii",
    "io",
    "oo",
    "oi",
    "srcos",
    "srcis",
)

TIMELESS_MESSAGE = (
    "No time information for the data. Analysis frame options are ignored. "
    "Analysis will be done using a single frame (which is probably not very meaningful!)"
)


class TimelessDataWarning(UserWarning):
    """All acts share one timestamp, so frame-based results carry no temporal meaning."""


@dataclass(frozen=True)
class FrameState:
    """Window position after one step: acts ``[start, end)`` were targeted."""

    step: int
    start: int
    end: int
    complete: bool


@dataclass
class RunSummary:
    """Outcome of one analysis run."""

    steps: int = 0
    frames: List[int] = field(default_factory=list)
    rows: int = 0


class FrameAnalyst:
    """
    Sliding-frame analyst over a community's act sequence.

    Parameters
    ----------
    community : Community
        The frozen community to analyse

    Attributes
    ----------
    frame_size : int or None
        Acts per frame; set by ``setup()``
    step_size : int or None
        Acts the window advances per step; set by ``setup()``
    ego_nets : Dict[int, EgoNet]
        Ego network of every actor seen in the window so far
    consumed : int
        Acts ingested so far (right edge of the window)
    dropped : int
        Acts evicted so far (left edge of the window)

    Examples
    --------
    >>> analyst = FrameAnalyst(community)
    >>> analyst.setup(frame_size=40)
    >>> summary = analyst.run_to_csv("/tmp/out.csv")
    >>> summary.frames[:3]
    [0, 1, 2]

    Notes
    -----
    An analyst is single-use per ``setup()``: a run consumes its incremental
    state. Call ``setup()`` again before another run.
    """

    def __init__(self, community: Community) -> None:
        self.community = community
        self.frame_size: Optional[int] = None
        self.step_size: Optional[int] = None
        self.ego_nets: Dict[int, EgoNet] = {}
        self.consumed = 0
        self.dropped = 0
        self._window: Deque[Act] = deque()
        self._started = False

    @property
    def use_dates(self) -> bool:
        return self.community.use_dates

    @property
    def window_acts(self) -> Tuple[Act, ...]:
        """Acts currently in the window, oldest first."""
        return tuple(self._window)

    @property
    def pending(self) -> int:
        """Acts not yet ingested."""
        return self.community.act_count - self.consumed

    def setup(self, frame_size: Optional[int] = None) -> None:
        """
        Choose the frame and step sizes and reset the window.

        Parameters
        ----------
        frame_size : int, optional
            Acts per frame. Defaults to a tenth of the community's acts
            (at least 1).

        Raises
        ------
        ConfigurationError
            If ``frame_size`` is not a positive integer, or the community
            has no acts

        Warns
        -----
        TimelessDataWarning
            If all acts share one timestamp. The whole act sequence is then
            analysed as a single frame and ``frame_size`` is ignored.
        """
        log_function_entry("FrameAnalyst.setup", frame_size=frame_size)

        total = self.community.act_count
        if total == 0:
            raise ConfigurationError(
                "Community has no acts to analyse",
                function="FrameAnalyst.setup"
            )

        if frame_size is not None:
            if isinstance(frame_size, bool) or not isinstance(frame_size, int):
                raise ConfigurationError(
                    f"Frame size must be an integer, got {type(frame_size).__name__}",
                    parameter="frame_size",
                    value=frame_size
                )
            require_positive(frame_size, "frame_size")
            size = frame_size
        else:
            size = max(total // DEFAULT_FRAMES_PER_COMMUNITY, 1)

        if self.community.is_timeless:
            warnings.warn(TIMELESS_MESSAGE, TimelessDataWarning, stacklevel=2)
            logger.warning(TIMELESS_MESSAGE)
            self.frame_size = total
            self.step_size = total
        else:
            self.frame_size = size
            self.step_size = max(size // 2, 1)
            if size > total:
                logger.warning("Frame size %d exceeds the %d acts of the community; "
                               "no complete frame will be analysed", size, total)

        self._reset()
        logger.info("Frame analyst ready: frame_size=%d, step_size=%d, acts=%d",
                    self.frame_size, self.step_size, total)

    def _reset(self) -> None:
        self.ego_nets = {}
        self.consumed = 0
        self.dropped = 0
        self._window = deque()
        self._started = False

    def _check_ready(self, operation: str) -> None:
        if self.frame_size is None or self.step_size is None:
            raise ConfigurationError(
                "Analyst is not initialized yet; call setup() first",
                function=f"FrameAnalyst.{operation}"
            )
        if self._started:
            raise ConfigurationError(
                "Analyst has already been run; call setup() again to start over",
                function=f"FrameAnalyst.{operation}"
            )

    def iter_steps(self) -> Iterator[FrameState]:
        """
        Advance the window one step at a time.

        Yields after evicting and ingesting the acts of each step, so callers
        can inspect the window before the next move. Frames are complete only
        when the right edge reached ``end``; the trailing partial frame at the
        tail of the act sequence is yielded with ``complete=False``.

        Raises
        ------
        ConfigurationError
            If ``setup()`` was not called or this setup was already run
        """
        self._check_ready("iter_steps")
        self._started = True

        acts = self.community.acts
        total = len(acts)
        step = 0
        while self.consumed < total:
            logger.debug("Analysis step: %d", step)
            start = step * self.step_size
            end = start + self.frame_size
            while self.dropped < start:
                self._drop_act()
            while self.consumed < end and self.consumed < total:
                self._add_act(acts[self.consumed], step)
            yield FrameState(step=step, start=start, end=end, complete=self.consumed == end)
            step += 1

    def _ego_net(self, actor_id: int, step: int) -> EgoNet:
        ego_net = self.ego_nets.get(actor_id)
        if ego_net is None:
            ego_net = EgoNet(self.community, actor_id, step)
            self.ego_nets[actor_id] = ego_net
        return ego_net

    def _add_act(self, act: Act, step: int) -> None:
        if isinstance(act, Reply):
            target = self.community.target_of(act)
            self._ego_net(act.src, step).add_out(act.id)
            self._ego_net(target, step).add_in(act.id)
        elif not isinstance(act, Call):
            raise TypeError(f"Unsupported act type: {type(act).__name__}")
        self._window.append(act)
        self.consumed += 1

    def _drop_act(self) -> None:
        act = self._window.popleft()
        if isinstance(act, Reply):
            target = self.community.target_of(act)
            self.ego_nets[act.src].remove_out(act.id)
            self.ego_nets[target].remove_in(act.id)
        elif not isinstance(act, Call):
            raise TypeError(f"Unsupported act type: {type(act).__name__}")
        self.dropped += 1

    def analyse_frame(self, step: int) -> List[Dict[str, Any]]:
        """
        Compute the statistic records of the current window.

        One record is produced per reply in the window, combining frame-level
        aggregates with the edge between the reply's source and target.

        Parameters
        ----------
        step : int
            The step the window currently represents

        Returns
        -------
        List[Dict[str, Any]]
            Records with the fields of ``ROW_FIELDS``, in that order
        """
        logger.debug("Analysis: frame act count %d", len(self._window))

        ego_nets = self.ego_nets
        num_joined = sum(1 for ego_net in ego_nets.values() if ego_net.joined_in_step(step))
        num_left = sum(1 for ego_net in ego_nets.values() if ego_net.is_inactive())
        num_actors = len(ego_nets) - num_left
        num_acts = len(self._window)

        rows = []
        for act in self._window:
            if isinstance(act, Call):
                continue
            target = self.community.target_of(act)
            src_net = ego_nets[act.src]
            target_net = ego_nets[target]
            ii, io, oo, oi = src_net.overlaps(target_net, step)
            src_in, src_out = src_net.build_actor_sets(step)
            rows.append({
                "step": step,
                "numjoined": num_joined,
                "numleft": num_left,
                "numactors": num_actors,
                "numacts": num_acts,
                "from": act.src,
                "to": target,
                "fromInDegree": src_net.in_degree(),
                "toInDegree": target_net.in_degree(),
                "ii": ii,
                "io": io,
                "oo": oo,
                "oi": oi,
                "srcos": len(src_out),
                "srcis": len(src_in),
            })
        return rows

    def run(self, sink: RowSink) -> RunSummary:
        """
        Slide the window over the whole community, writing records to ``sink``.

        Only complete frames are analysed. Up to ``frame_size - 1`` trailing
        acts that never complete a frame do not appear in the output.

        Raises
        ------
        ConfigurationError
            If ``setup()`` was not called or this setup was already run
        LaviError
            Any data error aborts the run
        """
        self._check_ready("run")
        summary = RunSummary()

        with LoggingTimer("frame_analysis", {"acts": self.community.act_count}) as timer:
            for state in self.iter_steps():
                summary.steps += 1
                if not state.complete:
                    logger.debug("Skipping incomplete frame at step %d (%d of %d acts)",
                                 state.step, self.consumed - state.start, self.frame_size)
                    continue
                rows = self.analyse_frame(state.step)
                for row in rows:
                    sink.write_row(row)
                summary.frames.append(state.step)
                summary.rows += len(rows)
            timer.details.update(frames=len(summary.frames), rows=summary.rows)

        logger.info("Analysis finished: %d steps, %d frames, %d rows",
                    summary.steps, len(summary.frames), summary.rows)
        return summary

    def run_to_csv(self, path: Union[str, Path] = DEFAULT_OUTPUT_PATH) -> RunSummary:
        """Run the analysis, streaming records to a CSV file."""
        self._check_ready("run")
        with CSVRowWriter(path) as sink:
            return self.run(sink)

    def run_to_dataframe(self) -> pl.DataFrame:
        """Run the analysis and return all records as a DataFrame."""
        sink = DataFrameSink()
        self.run(sink)
        df = sink.to_dataframe()
        if df.is_empty():
            return pl.DataFrame(schema={name: pl.Int64 for name in ROW_FIELDS})
        return df.select(list(ROW_FIELDS))

    def window_counts(self) -> Mapping[str, int]:
        """Window bookkeeping counters for progress reporting."""
        return {
            "dropped": self.dropped,
            "resident": len(self._window),
            "pending": self.pending,
            "total": self.community.act_count,
        }
