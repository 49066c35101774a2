"""
Network construction from communities.

- Reply multigraph of a whole community or of an analyst's current window
- Graph summaries
"""

from .construction import build_community_graph, build_frame_graph, get_graph_info
