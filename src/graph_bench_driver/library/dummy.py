"""
Dummy library: accepts every operation and stores nothing.

Useful to measure the overhead of the driver itself.
"""

from typing import Optional

from . import Interface


class DummyLibrary(Interface):

    def num_vertices(self) -> int:
        return 0

    def num_edges(self) -> int:
        return 0

    def has_vertex(self, vertex_id: int) -> bool:
        return False

    def has_edge(self, source: int, destination: int) -> bool:
        return False

    def get_weight(self, source: int, destination: int) -> Optional[float]:
        return None

    def add_vertex(self, vertex_id: int) -> bool:
        return True

    def remove_vertex(self, vertex_id: int) -> bool:
        return True

    def add_edge(self, source: int, destination: int, weight: float) -> bool:
        return True

    def remove_edge(self, source: int, destination: int) -> bool:
        return True
