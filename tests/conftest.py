"""
Shared fixtures for the Lavi test suite.

Communities are described as compact tuples:
``(id, src, reference_or_None, time)``; a ``None`` reference makes a Call.
"""

from pathlib import Path
from typing import Iterable, Optional, Tuple

import pytest

from lavi.community.model import Call, Community, CommunityBuilder, Reply

ActSpec = Tuple[int, int, Optional[int], float]

# 1 call, 9 replies, 5 actors, strictly increasing timestamps
TEN_ACTS = [
    (1, 1, None, 1.0),
    (2, 2, 1, 2.0),
    (3, 3, 1, 3.0),
    (4, 1, 2, 4.0),
    (5, 4, 3, 5.0),
    (6, 2, 5, 6.0),
    (7, 5, 1, 7.0),
    (8, 1, 7, 8.0),
    (9, 3, 4, 9.0),
    (10, 4, 8, 10.0),
]

# Small community with non-trivial neighbourhood overlaps
OVERLAP_ACTS = [
    (1, 1, None, 1.0),
    (2, 2, 1, 2.0),
    (3, 3, 1, 3.0),
    (4, 3, 2, 4.0),
    (5, 1, 4, 5.0),
    (6, 4, 2, 6.0),
    (7, 2, 6, 7.0),
]


def build_community(specs: Iterable[ActSpec], name: str = "test") -> Community:
    builder = CommunityBuilder(name)
    for act_id, src, reference, time in specs:
        if reference is None:
            builder.add_act(Call(act_id, src, time))
        else:
            builder.add_act(Reply(act_id, src, reference, time))
    return builder.freeze()


@pytest.fixture
def ten_act_community() -> Community:
    return build_community(TEN_ACTS, name="ten")


@pytest.fixture
def overlap_community() -> Community:
    return build_community(OVERLAP_ACTS, name="overlap")


@pytest.fixture
def timeless_community() -> Community:
    return build_community([(a, s, r, 42.0) for a, s, r, _ in TEN_ACTS], name="timeless")


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def community_factory():
    """Build a community from ``(id, src, reference_or_None, time)`` tuples."""
    return build_community
