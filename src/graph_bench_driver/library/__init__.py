"""
Graph Library Registry
======================

The driver evaluates pluggable graph libraries. Each implementation exposes
the common :class:`Interface` and is registered under a name; the
configuration resolves ``--library NAME`` to a factory once, at
initialisation time.

Built-in libraries
------------------
dummy
    Accepts every update and stores nothing
networkx
    Graph kept in a NetworkX Graph/DiGraph
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class Interface(ABC):
    """
    Common capabilities of a graph library under test.

    Vertices are identified by integers. Weights are floats.
    """

    def __init__(self, directed: bool):
        self._directed = directed
        self._timeout = 0

    def is_directed(self) -> bool:
        return self._directed

    def set_timeout(self, seconds: int) -> None:
        """Budget for a single operation, in seconds (0 => no timeout)."""
        self._timeout = seconds

    def get_timeout(self) -> int:
        return self._timeout

    def on_thread_init(self, thread_id: int) -> None:
        """Hook invoked by each worker thread before its first operation."""

    def on_thread_destroy(self, thread_id: int) -> None:
        """Hook invoked by each worker thread after its last operation."""

    def build(self) -> None:
        """Create a new snapshot of the graph, for libraries that need one."""

    @abstractmethod
    def num_vertices(self) -> int:
        ...

    @abstractmethod
    def num_edges(self) -> int:
        ...

    @abstractmethod
    def has_vertex(self, vertex_id: int) -> bool:
        ...

    @abstractmethod
    def has_edge(self, source: int, destination: int) -> bool:
        ...

    @abstractmethod
    def get_weight(self, source: int, destination: int) -> Optional[float]:
        """Weight of the edge, or None if the edge does not exist."""

    @abstractmethod
    def add_vertex(self, vertex_id: int) -> bool:
        """Insert a vertex. Returns False if it already exists."""

    @abstractmethod
    def remove_vertex(self, vertex_id: int) -> bool:
        """Remove a vertex and its edges. Returns False if it does not exist."""

    @abstractmethod
    def add_edge(self, source: int, destination: int, weight: float) -> bool:
        """Insert an edge. Returns False if it already exists or an endpoint is missing."""

    @abstractmethod
    def remove_edge(self, source: int, destination: int) -> bool:
        """Remove an edge. Returns False if it does not exist."""


LibraryFactory = Callable[[bool], Interface]


class LibraryRegistry:
    """
    Mapping from library names to factories.

    Names are case-insensitive. A factory takes the directedness of the
    graph and returns a new, uniquely owned :class:`Interface` instance.

    Examples
    --------
    >>> from graph_bench_driver.library import DummyLibrary
    >>> registry = LibraryRegistry()
    >>> @registry.register_library("mine")
    ... class MyLibrary(DummyLibrary):
    ...     pass
    >>> "mine" in registry
    True
    """

    def __init__(self):
        self._factories: Dict[str, LibraryFactory] = {}
        self._descriptions: Dict[str, str] = {}

    def register(
        self, name: str, factory: LibraryFactory, description: str = ""
    ) -> None:
        key = name.lower()
        if not key:
            raise ValueError("Library name cannot be empty")
        if key in self._factories:
            raise ValueError(f"Library already registered: {name}")
        self._factories[key] = factory
        self._descriptions[key] = description
        logger.debug(f"Registered library {key}")

    def register_library(self, name: str, description: str = ""):
        """Decorator form of :meth:`register`."""

        def decorator(factory):
            self.register(name, factory, description)
            return factory

        return decorator

    def get(self, name: str) -> LibraryFactory:
        """
        Retrieve the factory registered as `name`.

        Raises
        ------
        ConfigurationError
            If no library with that name exists
        """
        key = (name or "").lower()
        if key not in self._factories:
            raise ConfigurationError(
                f"Library not recognised: `{name}'. "
                f"Available libraries: {', '.join(self.names()) or 'none'}",
                parameter="library",
            )
        return self._factories[key]

    def names(self) -> List[str]:
        return sorted(self._factories)

    def describe(self) -> str:
        """One line per library, for the help text."""
        lines = []
        for key in self.names():
            description = self._descriptions[key]
            lines.append(f"  {key}: {description}" if description else f"  {key}")
        return "\n".join(lines)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._factories

    def __len__(self) -> int:
        return len(self._factories)


from .dummy import DummyLibrary  # noqa: E402
from .networkx_library import NetworkXLibrary  # noqa: E402

LIBRARIES = LibraryRegistry()
LIBRARIES.register("dummy", DummyLibrary, "accepts every update, stores nothing")
LIBRARIES.register("networkx", NetworkXLibrary, "NetworkX Graph/DiGraph")

__all__ = [
    "Interface",
    "LibraryFactory",
    "LibraryRegistry",
    "LIBRARIES",
    "DummyLibrary",
    "NetworkXLibrary",
]
