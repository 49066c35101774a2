"""
Community graph construction.

Builds Networkit multigraphs from a community's replies: every reply becomes
one edge from its source actor to its target actor, so repeated exchanges
between the same pair remain separate edges. Graph direction and weighting
follow the community (decided from its first act).
"""

from typing import Any, Dict, Optional, Sequence, Tuple

import networkit as nk
import numpy as np

from ..analysis.frames import FrameAnalyst
from ..common.exceptions import ConfigurationError
from ..common.id_mapper import IDMapper
from ..common.logging_config import get_logger, log_function_entry
from ..community.model import Act, Call, Community, Reply

logger = get_logger(__name__)


def build_community_graph(
    community: Community,
    acts: Optional[Sequence[Act]] = None
) -> Tuple[nk.Graph, IDMapper]:
    """
    Build the reply multigraph of a community or of a subset of its acts.

    Parameters
    ----------
    community : Community
        Community used to resolve reply targets
    acts : Sequence[Act], optional
        Acts to include. If None, all acts are used and every registered
        actor becomes a node, including actors that never replied or were
        replied to.

    Returns
    -------
    graph : nk.Graph
        Multigraph with one edge per reply; weighted if the community is
        weighted (replies without a weight count 1.0)
    id_mapper : IDMapper
        Mapping from actor ids to node ids

    Examples
    --------
    >>> graph, mapper = build_community_graph(community)
    >>> graph.numberOfEdges() == sum(1 for _ in community.replies())
    True

    Notes
    -----
    When ``acts`` is given, only actors touched by those acts are nodes:
    sources of calls and replies and targets of replies.
    """
    log_function_entry("build_community_graph",
                       community=community.name,
                       acts="all" if acts is None else len(acts))

    id_mapper = IDMapper()
    if acts is None:
        acts = community.acts
        for actor_id in sorted(community.actors):
            id_mapper.map_next(actor_id)

    edges = []
    for act in acts:
        if isinstance(act, Reply):
            source = id_mapper.map_next(act.src)
            target = id_mapper.map_next(community.target_of(act))
            edges.append((source, target, 1.0 if act.weight is None else float(act.weight)))
        elif isinstance(act, Call):
            id_mapper.map_next(act.src)
        else:
            raise TypeError(f"Unsupported act type: {type(act).__name__}")

    weighted = community.is_weighted
    graph = nk.Graph(id_mapper.size(), weighted=weighted, directed=community.is_directed)
    for source, target, weight in edges:
        if weighted:
            graph.addEdge(source, target, weight)
        else:
            graph.addEdge(source, target)

    logger.debug("Community graph built: %d nodes, %d edges, directed=%s, weighted=%s",
                 graph.numberOfNodes(), graph.numberOfEdges(), graph.isDirected(), weighted)
    return graph, id_mapper


def build_frame_graph(analyst: FrameAnalyst) -> Tuple[nk.Graph, IDMapper]:
    """
    Build the reply multigraph of the acts currently in an analyst's window.

    Raises
    ------
    ConfigurationError
        If the analyst has not been set up
    """
    if analyst.frame_size is None:
        raise ConfigurationError(
            "Analyst is not initialized yet; call setup() first",
            function="build_frame_graph"
        )
    return build_community_graph(analyst.community, analyst.window_acts)


def get_graph_info(graph: nk.Graph, id_mapper: IDMapper) -> Dict[str, Any]:
    """
    Summarise a community graph.

    Returns
    -------
    Dict[str, Any]
        ``nodes``, ``edges``, ``directed``, ``weighted``, ``self_loops``,
        ``isolated`` (actors without any edge), ``mean_out_degree``,
        ``max_in_degree``, ``actors`` (actor ids in node order) and
        ``most_replied_to`` (actor id with the highest in-degree, lowest node
        id on ties; None for an empty graph)
    """
    out_degrees = np.array([graph.degreeOut(u) for u in graph.iterNodes()], dtype=np.int64)
    in_degrees = np.array([graph.degreeIn(u) for u in graph.iterNodes()], dtype=np.int64)

    if graph.isDirected():
        isolated = int(np.count_nonzero((out_degrees + in_degrees) == 0))
    else:
        isolated = int(np.count_nonzero(out_degrees == 0))

    return {
        "nodes": graph.numberOfNodes(),
        "edges": graph.numberOfEdges(),
        "directed": graph.isDirected(),
        "weighted": graph.isWeighted(),
        "self_loops": graph.numberOfSelfLoops(),
        "isolated": isolated,
        "mean_out_degree": float(out_degrees.mean()) if out_degrees.size else 0.0,
        "max_in_degree": int(in_degrees.max()) if in_degrees.size else 0,
        "actors": list(id_mapper),
        "most_replied_to": id_mapper.actor_of(int(np.argmax(in_degrees))) if in_degrees.size else None,
    }
