"""
NetworkX Library
================

Reference implementation of the library interface, keeping the graph in a
``networkx.Graph`` (undirected) or ``networkx.DiGraph`` (directed).
Not tuned for speed; it serves as a correctness baseline.
"""

import logging
import threading
from typing import Optional

import networkx as nx

from . import Interface

logger = logging.getLogger(__name__)


class NetworkXLibrary(Interface):
    """
    Graph library backed by NetworkX.

    NetworkX graphs are not thread safe, so every operation is serialized
    through a single lock.

    Parameters
    ----------
    directed : bool
        Whether edges are directed
    """

    def __init__(self, directed: bool):
        super().__init__(directed)
        self._graph: nx.Graph = nx.DiGraph() if directed else nx.Graph()
        self._lock = threading.Lock()

    @property
    def graph(self) -> nx.Graph:
        """The underlying NetworkX graph."""
        return self._graph

    def num_vertices(self) -> int:
        with self._lock:
            return self._graph.number_of_nodes()

    def num_edges(self) -> int:
        with self._lock:
            return self._graph.number_of_edges()

    def has_vertex(self, vertex_id: int) -> bool:
        with self._lock:
            return self._graph.has_node(vertex_id)

    def has_edge(self, source: int, destination: int) -> bool:
        with self._lock:
            return self._graph.has_edge(source, destination)

    def get_weight(self, source: int, destination: int) -> Optional[float]:
        with self._lock:
            data = self._graph.get_edge_data(source, destination)
        if data is None:
            return None
        return data.get("weight")

    def add_vertex(self, vertex_id: int) -> bool:
        with self._lock:
            if self._graph.has_node(vertex_id):
                return False
            self._graph.add_node(vertex_id)
            return True

    def remove_vertex(self, vertex_id: int) -> bool:
        with self._lock:
            if not self._graph.has_node(vertex_id):
                return False
            self._graph.remove_node(vertex_id)
            return True

    def add_edge(self, source: int, destination: int, weight: float) -> bool:
        with self._lock:
            if not (self._graph.has_node(source) and self._graph.has_node(destination)):
                return False
            if self._graph.has_edge(source, destination):
                return False
            self._graph.add_edge(source, destination, weight=weight)
            return True

    def remove_edge(self, source: int, destination: int) -> bool:
        with self._lock:
            if not self._graph.has_edge(source, destination):
                return False
            self._graph.remove_edge(source, destination)
            return True
