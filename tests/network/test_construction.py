"""
Tests for community graph construction.
"""

import pytest

nk = pytest.importorskip("networkit")

from lavi.analysis.frames import FrameAnalyst
from lavi.common.exceptions import ConfigurationError
from lavi.community.model import Call, CommunityBuilder, Reply
from lavi.network.construction import (
    build_community_graph,
    build_frame_graph,
    get_graph_info,
)


class TestBuildCommunityGraph:
    """Test building reply multigraphs."""

    def test_one_edge_per_reply(self, ten_act_community):
        graph, mapper = build_community_graph(ten_act_community)

        assert graph.numberOfNodes() == ten_act_community.actor_count
        assert graph.numberOfEdges() == 9
        assert graph.isDirected()
        assert not graph.isWeighted()

    def test_nodes_in_actor_order(self, ten_act_community):
        _, mapper = build_community_graph(ten_act_community)

        assert list(mapper) == [1, 2, 3, 4, 5]

    def test_edge_direction(self, ten_act_community):
        graph, mapper = build_community_graph(ten_act_community)
        nodes = {actor: node for node, actor in enumerate(mapper)}

        # act 2: actor 2 replies to actor 1
        assert graph.hasEdge(nodes[2], nodes[1])
        assert graph.degreeIn(nodes[1]) == 5
        assert mapper.actor_of(nodes[1]) == 1

    def test_repeated_exchanges_kept(self, community_factory):
        community = community_factory([(1, 1, None, 0.0), (2, 2, 1, 1.0), (3, 2, 1, 2.0)])

        graph, _ = build_community_graph(community)

        assert graph.numberOfNodes() == 2
        assert graph.numberOfEdges() == 2

    def test_subset_of_acts(self, ten_act_community):
        acts = ten_act_community.acts[:4]

        graph, mapper = build_community_graph(ten_act_community, acts)

        assert mapper.size() == 3
        assert graph.numberOfEdges() == 3

    def test_weighted_community(self):
        builder = CommunityBuilder()
        builder.add_act(Call(1, 1, 0.0))
        builder.add_act(Reply(2, 2, 1, 1.0, weight=2.5))
        community = builder.freeze()

        graph, _ = build_community_graph(community)

        # weighting follows the community, decided from its leading call
        assert not graph.isWeighted()


class TestFrameGraph:
    """Test graphs of an analyst's current window."""

    def test_requires_setup(self, ten_act_community):
        with pytest.raises(ConfigurationError, match="not initialized"):
            build_frame_graph(FrameAnalyst(ten_act_community))

    def test_window_graph(self, ten_act_community):
        analyst = FrameAnalyst(ten_act_community)
        analyst.setup(4)
        steps = analyst.iter_steps()
        next(steps)
        next(steps)

        graph, mapper = build_frame_graph(analyst)

        # window holds acts 3..6, all replies
        assert graph.numberOfEdges() == 4
        assert set(mapper) == {1, 2, 3, 4}


class TestGraphInfo:
    """Test graph summaries."""

    def test_info(self, community_factory):
        community = community_factory(
            [(1, 1, None, 0.0), (2, 2, 1, 1.0), (3, 3, None, 2.0)]
        )

        info = get_graph_info(*build_community_graph(community))

        assert info["nodes"] == 3
        assert info["edges"] == 1
        assert info["directed"]
        assert info["isolated"] == 1
        assert info["self_loops"] == 0
        assert info["max_in_degree"] == 1
        assert info["mean_out_degree"] == pytest.approx(1 / 3)
        assert info["actors"] == [1, 2, 3]
        assert info["most_replied_to"] == 1

    def test_self_loops(self, community_factory):
        community = community_factory([(1, 1, None, 0.0), (2, 1, 1, 1.0)])

        info = get_graph_info(*build_community_graph(community))

        assert info["self_loops"] == 1

    def test_most_replied_to_tie(self, community_factory):
        """Equal in-degrees resolve to the actor with the lowest node id."""
        community = community_factory(
            [(1, 1, None, 0.0), (2, 2, 1, 1.0), (3, 1, 2, 2.0)]
        )

        info = get_graph_info(*build_community_graph(community))

        assert info["max_in_degree"] == 1
        assert info["most_replied_to"] == 1
