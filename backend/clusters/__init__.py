from .engine import Cluster, ClusterRenderEngine
from .greedy import greedy_clusters
from .style import MarkerStyle, style_for

__all__ = [
    "Cluster",
    "ClusterRenderEngine",
    "MarkerStyle",
    "greedy_clusters",
    "style_for",
]
