"""
Ego networks of actors within the analysis window.

An ``EgoNet`` records which acts currently in the window point into
(``in_acts``) or out of (``out_acts``) one actor. The frame analyst mutates it
as acts enter and leave the window; statistics read the derived neighbour
actor sets, which are cached per analysis step.
"""

from typing import FrozenSet, Optional, Set, Tuple

from ..community.model import Community
from ..common.exceptions import DataIntegrityError

ActorSets = Tuple[FrozenSet[int], FrozenSet[int]]
Overlaps = Tuple[int, int, int, int]


class EgoNet:
    """
    Window-local ego network of a single actor.

    Parameters
    ----------
    community : Community
        Community the act ids belong to; used to resolve acts to actors
    actor_id : int
        The ego actor
    step_joined : int
        Analysis step in which the actor first appeared in the window

    Attributes
    ----------
    in_acts : Set[int]
        Ids of windowed replies addressed to this actor
    out_acts : Set[int]
        Ids of windowed replies sent by this actor
    builds : int
        Number of times the neighbour actor sets were derived from the act sets

    Notes
    -----
    The cached neighbour sets are valid only for the step that produced them;
    any mutation of the act sets also invalidates them. An EgoNet is never
    discarded: once the actor leaves the window it is merely inactive.
    """

    def __init__(self, community: Community, actor_id: int, step_joined: int) -> None:
        self.community = community
        self.actor_id = actor_id
        self.step_joined = step_joined
        self.in_acts: Set[int] = set()
        self.out_acts: Set[int] = set()
        self.builds = 0
        self._in_actors: FrozenSet[int] = frozenset()
        self._out_actors: FrozenSet[int] = frozenset()
        self._build_step: Optional[int] = None

    def add_in(self, act_id: int) -> None:
        self._add(self.in_acts, act_id, "add_in")

    def remove_in(self, act_id: int) -> None:
        self._remove(self.in_acts, act_id, "remove_in")

    def add_out(self, act_id: int) -> None:
        self._add(self.out_acts, act_id, "add_out")

    def remove_out(self, act_id: int) -> None:
        self._remove(self.out_acts, act_id, "remove_out")

    def _add(self, acts: Set[int], act_id: int, operation: str) -> None:
        if act_id in acts:
            raise DataIntegrityError(
                f"Act {act_id} is already in the ego network of actor {self.actor_id}",
                act_id=act_id,
                actor_id=self.actor_id,
                operation=operation
            )
        acts.add(act_id)
        self._build_step = None

    def _remove(self, acts: Set[int], act_id: int, operation: str) -> None:
        try:
            acts.remove(act_id)
        except KeyError:
            raise DataIntegrityError(
                f"Act {act_id} is not in the ego network of actor {self.actor_id}",
                act_id=act_id,
                actor_id=self.actor_id,
                operation=operation
            ) from None
        self._build_step = None

    def in_degree(self) -> int:
        return len(self.in_acts)

    def out_degree(self) -> int:
        return len(self.out_acts)

    def is_inactive(self) -> bool:
        return not self.in_acts and not self.out_acts

    def joined_in_step(self, step: int) -> bool:
        return self.step_joined == step

    def build_actor_sets(self, step: int, force: bool = False) -> ActorSets:
        """
        Return the distinct neighbour actors as ``(in_actors, out_actors)``.

        ``in_actors`` are the sources of acts in ``in_acts``; ``out_actors``
        are the targets of acts in ``out_acts``. The sets are derived again
        only when ``step`` differs from the cached step, the act sets changed,
        or ``force`` is set.
        """
        if force or self._build_step != step:
            community = self.community
            self._in_actors = frozenset(community.get_act(act_id).src for act_id in self.in_acts)
            self._out_actors = frozenset(
                community.target_of(community.get_act(act_id)) for act_id in self.out_acts
            )
            self._build_step = step
            self.builds += 1
        return self._in_actors, self._out_actors

    def overlaps(self, other: "EgoNet", step: int) -> Overlaps:
        """
        Count shared neighbour actors with another ego network.

        Returns
        -------
        Tuple[int, int, int, int]
            ``(ii, io, oo, oi)``: sizes of this.in & other.in, this.in &
            other.out, this.out & other.out and this.out & other.in
        """
        in_actors, out_actors = self.build_actor_sets(step)
        other_in, other_out = other.build_actor_sets(step)
        return (
            len(in_actors & other_in),
            len(in_actors & other_out),
            len(out_actors & other_out),
            len(out_actors & other_in),
        )

    def __repr__(self) -> str:
        return (
            f"EgoNet(actor_id={self.actor_id}, step_joined={self.step_joined}, "
            f"in={len(self.in_acts)}, out={len(self.out_acts)})"
        )
