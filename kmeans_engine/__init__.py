"""
K-means clustering engine with saturating centroid updates.
"""

from .config import InitMode, KMeansConfig
from .kmeans import KMeans
from .utils import saturate_cast
from .version import __version__

__all__ = ["KMeans", "KMeansConfig", "InitMode", "saturate_cast"]
