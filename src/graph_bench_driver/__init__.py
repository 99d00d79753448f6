"""
Graph Benchmark Driver
======================

Configuration layer of a driver benchmarking graph libraries: parsing of
the run parameters, selection of the library under test and access to the
results database.

Modules
-------
configuration
    The Configuration class and its process-wide accessor
library
    The library interface and the registry of known implementations
database
    SQLite store for parameters and results
logger
    Serialized logging to standard output
"""

__version__ = "0.1.0"

from .errors import ConfigurationError
from .library import LIBRARIES, Interface, LibraryRegistry
from .database import Database
from .configuration import (
    Configuration,
    ThreadsType,
    THREADS_READ,
    THREADS_WRITE,
    THREADS_TOTAL,
    configuration,
    reset_configuration,
)
from .logger import configure_logging, get_logger

__all__ = [
    "Configuration",
    "ConfigurationError",
    "Database",
    "Interface",
    "LibraryRegistry",
    "LIBRARIES",
    "ThreadsType",
    "THREADS_READ",
    "THREADS_WRITE",
    "THREADS_TOTAL",
    "configuration",
    "reset_configuration",
    "configure_logging",
    "get_logger",
    "__version__",
]
