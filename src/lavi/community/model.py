"""
Communication acts, actors and the community that holds them.

A community is a time-ordered log of acts (``Call`` and ``Reply``) exchanged
between actors. It is assembled with a ``CommunityBuilder`` and sealed with
``freeze()``; the resulting ``Community`` is read-only for the rest of the
process and is passed explicitly to every analysis component that needs it.

A community is a multigraph by definition: any number of acts may connect the
same pair of actors. Whether it is directed or weighted is decided once, from
its first act, and assumed uniform for all others.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import ClassVar, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from ..common.exceptions import (
    ConfigurationError,
    DataIntegrityError,
    InvalidOperationError,
)
from ..common.logging_config import get_logger

logger = get_logger(__name__)


def _format_time(time: float, use_dates: bool) -> str:
    if use_dates:
        return datetime.fromtimestamp(int(time)).strftime("%a %b %d %H:%M:%S %Y")
    return str(time)


@dataclass(frozen=True)
class Call:
    """
    An act calling out to the community, e.g. the e-mail that starts a thread.

    Calls have no target actor; only ``Reply`` exposes a target.
    """

    id: int
    src: int
    time: float

    directed: ClassVar[Optional[bool]] = None
    weight: ClassVar[Optional[float]] = None

    def describe(self, use_dates: bool = False) -> str:
        return f"act-call: id:{self.id}, src={self.src}, time={_format_time(self.time, use_dates)}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class Reply:
    """
    An act replying to an earlier act (a ``Call`` or another ``Reply``).

    The target actor is the source of the referenced act.
    """

    id: int
    src: int
    reference: int
    time: float
    directed: Optional[bool] = None
    weight: Optional[float] = None

    def target_actor_id(self, community: "Community") -> int:
        """Resolve the actor this reply is addressed to."""
        return community.get_act(self.reference).src

    def describe(self, use_dates: bool = False) -> str:
        return (
            f"act-reply: id:{self.id}, src={self.src}, reference={self.reference}, "
            f"time={_format_time(self.time, use_dates)}"
        )

    def __str__(self) -> str:
        return self.describe()


Act = Union[Call, Reply]
ACT_TYPES: Tuple[type, ...] = (Call, Reply)


@dataclass(frozen=True)
class Actor:
    """An actor of the community; ``name`` falls back to the stringified id."""

    id: int
    name: str = field(default="")

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", str(self.id))

    def __str__(self) -> str:
        return f"actor: id:{self.id}, name={self.name}"


class Community:
    """
    An immutable, time-ordered log of acts and the actors who produced them.

    Instances are produced by ``CommunityBuilder.freeze()``; do not construct
    them directly. Acts are kept in the order they were added, which callers
    guarantee to be time non-decreasing.

    Attributes
    ----------
    name : str
        Community name
    use_dates : bool
        If True, act times are seconds since epoch and are rendered as dates
    """

    def __init__(
        self,
        name: str,
        use_dates: bool,
        acts: Sequence[Act],
        acts_by_id: Dict[int, Act],
        actors: Dict[int, Actor],
    ) -> None:
        self.name = name
        self.use_dates = use_dates
        self._acts: Tuple[Act, ...] = tuple(acts)
        self._acts_by_id = MappingProxyType(dict(acts_by_id))
        self._actors = MappingProxyType(dict(actors))

        times = np.fromiter((act.time for act in self._acts), dtype=np.float64, count=len(self._acts))
        self._min_time: Optional[float] = float(times.min()) if times.size else None
        self._max_time: Optional[float] = float(times.max()) if times.size else None

        first = self._acts[0] if self._acts else None
        self._is_directed = True if first is None or first.directed is None else bool(first.directed)
        self._is_weighted = first is not None and first.weight is not None

    @property
    def acts(self) -> Tuple[Act, ...]:
        return self._acts

    @property
    def actors(self) -> Mapping[int, Actor]:
        return self._actors

    @property
    def act_count(self) -> int:
        return len(self._acts)

    @property
    def actor_count(self) -> int:
        return len(self._actors)

    @property
    def min_time(self) -> Optional[float]:
        """Time of the earliest act, or None for an empty community."""
        return self._min_time

    @property
    def max_time(self) -> Optional[float]:
        """Time of the latest act, or None for an empty community."""
        return self._max_time

    @property
    def is_timeless(self) -> bool:
        """True when every act shares one timestamp (no temporal signal)."""
        return self._min_time == self._max_time

    @property
    def is_directed(self) -> bool:
        return self._is_directed

    @property
    def is_weighted(self) -> bool:
        return self._is_weighted

    def get_act(self, act_id: int) -> Act:
        """
        Look up an act by id.

        Raises
        ------
        DataIntegrityError
            If no act with this id exists in the community
        """
        try:
            return self._acts_by_id[act_id]
        except KeyError:
            raise DataIntegrityError(
                f"Unknown act id {act_id}",
                act_id=act_id,
                operation="get_act"
            ) from None

    def get_actor(self, actor_id: int) -> Actor:
        try:
            return self._actors[actor_id]
        except KeyError:
            raise DataIntegrityError(
                f"Unknown actor id {actor_id}",
                actor_id=actor_id,
                operation="get_actor"
            ) from None

    def has_act(self, act_id: int) -> bool:
        return act_id in self._acts_by_id

    def target_of(self, act: Act) -> int:
        """
        Resolve the target actor of an act.

        Raises
        ------
        InvalidOperationError
            If ``act`` is a ``Call``, which has no target
        DataIntegrityError
            If the reply references an unknown act
        """
        if isinstance(act, Reply):
            return act.target_actor_id(self)
        if isinstance(act, Call):
            raise InvalidOperationError(
                f"Invalid request from a Call type act: act {act.id} has no target actor",
                operation="target_of",
                context={"act_id": act.id}
            )
        raise TypeError(f"Unsupported act type: {type(act).__name__}")

    def replies(self) -> Iterator[Reply]:
        return (act for act in self._acts if isinstance(act, Reply))

    def summary(self) -> str:
        return (
            f"Community:{self.name}\n"
            f"Use dates:{self.use_dates}\n"
            f"Num actors: {self.actor_count}\n"
            f"Num acts:{self.act_count}\n"
            f"is directed: {self.is_directed}\n"
            f"is weighted:{self.is_weighted}"
        )

    def describe(self) -> str:
        """Summary followed by every actor and every act, one per line."""
        lines: List[str] = [self.summary(), "Actors:"]
        lines.extend(f"  {actor}" for actor in self._actors.values())
        lines.append("Acts:")
        lines.extend(f"  {act.describe(self.use_dates)}" for act in self._acts)
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._acts)

    def __repr__(self) -> str:
        return f"Community(name={self.name!r}, acts={self.act_count}, actors={self.actor_count})"


class CommunityBuilder:
    """
    Mutable stage of a community; ``freeze()`` produces the read-only ``Community``.

    Examples
    --------
    >>> builder = CommunityBuilder("mailing-list")
    >>> builder.add_act(Call(1, src=10, time=0.0))
    >>> builder.add_act(Reply(2, src=11, reference=1, time=5.0))
    >>> community = builder.freeze()
    >>> community.target_of(community.get_act(2))
    10
    """

    def __init__(self, name: str = "", use_dates: bool = False) -> None:
        self.name = name
        self.use_dates = use_dates
        self._acts: List[Act] = []
        self._acts_by_id: Dict[int, Act] = {}
        self._actors: Dict[int, Actor] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_open(self, operation: str) -> None:
        if self._frozen:
            raise ConfigurationError(
                "Community builder is frozen and does not accept new data",
                function=f"CommunityBuilder.{operation}"
            )

    def add_actor(self, actor: Actor) -> None:
        """Register an actor; the first registration of an id wins."""
        self._check_open("add_actor")
        if actor.id not in self._actors:
            self._actors[actor.id] = actor

    def add_act(self, act: Act) -> None:
        """
        Append an act to the log.

        The source actor is registered automatically. Replies must reference
        an act that was added earlier.

        Raises
        ------
        DataIntegrityError
            On a duplicate act id or an unresolved reply reference
        """
        self._check_open("add_act")
        if not isinstance(act, ACT_TYPES):
            raise TypeError(f"Unsupported act type: {type(act).__name__}")
        if act.id in self._acts_by_id:
            raise DataIntegrityError(
                f"Duplicate act id {act.id}",
                act_id=act.id,
                operation="add_act"
            )
        if isinstance(act, Reply) and act.reference not in self._acts_by_id:
            raise DataIntegrityError(
                f"Reply {act.id} references unknown act {act.reference}",
                act_id=act.id,
                operation="add_act",
                details={"reference": act.reference}
            )

        if act.src not in self._actors:
            self._actors[act.src] = Actor(act.src)
        self._acts_by_id[act.id] = act
        self._acts.append(act)

    def add_acts(self, acts: Sequence[Act]) -> None:
        for act in acts:
            self.add_act(act)

    def freeze(self) -> Community:
        """
        Seal the builder and return the immutable community.

        Raises
        ------
        ConfigurationError
            If the builder was already frozen
        """
        self._check_open("freeze")
        self._frozen = True
        community = Community(
            name=self.name,
            use_dates=self.use_dates,
            acts=self._acts,
            acts_by_id=self._acts_by_id,
            actors=self._actors,
        )
        logger.debug("Community frozen: %d acts, %d actors", community.act_count, community.actor_count)
        return community
