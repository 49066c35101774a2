"""
Actor/node ID mapping for community graphs.

Networkit graphs address nodes with consecutive integers starting at 0, while
actor ids in an act log are arbitrary (and usually sparse) integers. Node ids
are handed out in order of first appearance, so the mapping is a list of
actors indexed by node id plus a reverse lookup.
"""

from typing import Dict, Iterator, List


class IDMapper:
    """
    Assigns graph node ids to actor ids.

    Examples
    --------
    >>> mapper = IDMapper()
    >>> mapper.map_next(1042), mapper.map_next(7), mapper.map_next(1042)
    (0, 1, 0)
    >>> mapper.actor_of(1)
    7
    """

    def __init__(self) -> None:
        self._actors: List[int] = []
        self._nodes: Dict[int, int] = {}

    def map_next(self, actor_id: int) -> int:
        """Return the node id of ``actor_id``, assigning the next free one if needed."""
        node = self._nodes.get(actor_id)
        if node is None:
            node = self._nodes[actor_id] = len(self._actors)
            self._actors.append(actor_id)
        return node

    def actor_of(self, node: int) -> int:
        """
        Actor id behind a node id.

        Raises
        ------
        KeyError
            If no actor was assigned ``node``
        """
        if not 0 <= node < len(self._actors):
            raise KeyError(f"Node {node} has no actor")
        return self._actors[node]

    def size(self) -> int:
        return len(self._actors)

    def __len__(self) -> int:
        return len(self._actors)

    def __iter__(self) -> Iterator[int]:
        """Actor ids in node-id order."""
        return iter(self._actors)

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
