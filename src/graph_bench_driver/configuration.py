"""
Driver Configuration
====================

Holds the parameters of a benchmark run. The configuration is initialised
exactly once, early in the life of the process, from the command line
(optionally complemented by a YAML parameter file). Afterwards it is only
read, by graph loaders, experiments and result writers, possibly from many
threads at once.

Two resources are derived from the parameters:

- the graph library under test, resolved by name through a
  :class:`~graph_bench_driver.library.LibraryRegistry`
- the results database, opened on first use

Usage
-----
>>> from graph_bench_driver import configuration, THREADS_TOTAL
>>> cfg = configuration()
>>> cfg.initialise(["--library", "dummy", "-r", "4", "-w", "2"])
>>> cfg.num_threads(THREADS_TOTAL)
6

Notes
-----
The class is not safe for concurrent mutation. Initialise it from a single
thread before spawning the workers. Only the lazy creation of the
database handle is guarded by a lock.
"""

import argparse
import atexit
import logging
import math
import socket
import sys
import threading
from enum import Enum
from typing import Any, Dict, Optional, Sequence

import numpy as np

from . import __version__
from .config import (
    DEFAULT_BUILD_FREQUENCY_MS,
    DEFAULT_COEFF_AGING,
    DEFAULT_EF_EDGES,
    DEFAULT_EF_VERTICES,
    DEFAULT_GRAPH_DIRECTED,
    DEFAULT_MAX_WEIGHT,
    DEFAULT_NUM_REPETITIONS,
    DEFAULT_NUM_THREADS_READ,
    DEFAULT_NUM_THREADS_WRITE,
    DEFAULT_SEED,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_SEED,
    load_parameter_file,
)
from .database import Database
from .errors import ConfigurationError
from .library import LIBRARIES, Interface, LibraryFactory, LibraryRegistry

logger = logging.getLogger(__name__)


class ThreadsType(Enum):
    """Category of worker threads."""

    THREADS_READ = "read"
    THREADS_WRITE = "write"
    THREADS_TOTAL = "total"


THREADS_READ = ThreadsType.THREADS_READ
THREADS_WRITE = ThreadsType.THREADS_WRITE
THREADS_TOTAL = ThreadsType.THREADS_TOTAL

# Keys accepted in a parameter file that differ from the argparse dest
_FILE_ALIASES = {
    "path": "graph",
    "log": "update_log",
}

# Fields copied from the staging instance when initialisation succeeds
_COMMITTED_FIELDS = (
    "_build_frequency",
    "_coeff_aging",
    "_database_path",
    "_ef_vertices",
    "_ef_edges",
    "_graph_directed",
    "_library_name",
    "_library_factory",
    "_max_weight",
    "_num_repetitions",
    "_num_threads_read",
    "_num_threads_write",
    "_path_graph_to_load",
    "_seed",
    "_timeout_seconds",
    "_update_log",
    "_validate_output",
)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser reporting grammar errors as ConfigurationError."""

    def error(self, message):
        raise ConfigurationError(message)


def _as_int(value: Any, parameter: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(
            f"Invalid value for {parameter}: {value!r} (expected an integer)", parameter
        )
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ConfigurationError(
        f"Invalid value for {parameter}: {value!r} (expected an integer)", parameter
    )


def _as_float(value: Any, parameter: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(
            f"Invalid value for {parameter}: {value!r} (expected a number)", parameter
        )
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Invalid value for {parameter}: {value!r} (expected a number)", parameter
        ) from None
    if not math.isfinite(result):
        raise ConfigurationError(
            f"Invalid value for {parameter}: {value!r} (must be finite)", parameter
        )
    return result


def _as_bool(value: Any, parameter: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
    raise ConfigurationError(
        f"Invalid value for {parameter}: {value!r} (expected true or false)", parameter
    )


def _expand_threads(values: Dict[str, Any]) -> Dict[str, Any]:
    """Replace the `threads` shorthand with the read/write counts it stands for."""
    expanded = dict(values)
    threads = expanded.pop("threads", None)
    if threads is not None:
        expanded.setdefault("threads_read", threads)
        expanded.setdefault("threads_write", threads)
    return expanded


class Configuration:
    """
    Parameters of a benchmark run.

    Parameters
    ----------
    registry : LibraryRegistry, optional
        Where library names are resolved (default: the built-in registry)
    logger : logging.Logger, optional
        Destination of the configuration log records

    Examples
    --------
    >>> cfg = Configuration()
    >>> cfg.initialise(["--library", "networkx", "--graph", "/tmp/g.edges", "-u"])
    >>> cfg.is_graph_directed()
    False
    >>> cfg.generate_graph_library().is_directed()
    False
    """

    def __init__(
        self,
        registry: Optional[LibraryRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._registry = registry if registry is not None else LIBRARIES
        self._logger = logger if logger is not None else logging.getLogger(__name__)

        self._build_frequency = DEFAULT_BUILD_FREQUENCY_MS
        self._coeff_aging = DEFAULT_COEFF_AGING
        self._database_path = ""
        self._ef_vertices = DEFAULT_EF_VERTICES
        self._ef_edges = DEFAULT_EF_EDGES
        self._graph_directed = DEFAULT_GRAPH_DIRECTED
        self._library_name = ""
        self._library_factory: Optional[LibraryFactory] = None
        self._max_weight = DEFAULT_MAX_WEIGHT
        self._num_repetitions = DEFAULT_NUM_REPETITIONS
        self._num_threads_read = DEFAULT_NUM_THREADS_READ
        self._num_threads_write = DEFAULT_NUM_THREADS_WRITE
        self._path_graph_to_load = ""
        self._seed = DEFAULT_SEED
        self._timeout_seconds = DEFAULT_TIMEOUT_SECONDS
        self._update_log = ""
        self._validate_output = False

        self._initialised = False
        self._database: Optional[Database] = None
        self._database_closed = False
        self._database_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Initialisation
    # ------------------------------------------------------------------

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = _ArgumentParser(
            prog="gfe-config",
            description="Graph benchmark driver",
            epilog="Available libraries:\n" + self._registry.describe(),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument("-c", "--config", help="YAML file with the parameters of the run")
        parser.add_argument("-l", "--library", help="The library to evaluate")
        parser.add_argument("-G", "--graph", "--path", dest="graph", help="The graph to load")
        parser.add_argument(
            "-u", "--undirected", action=argparse.BooleanOptionalAction,
            help="Whether the graph to load is undirected",
        )
        parser.add_argument(
            "--update-log", "--log", dest="update_log",
            help="Perform the aging experiment by replaying the given log of updates",
        )
        parser.add_argument("-j", "--threads", help="Number of threads for both reads and writes")
        parser.add_argument("-r", "--threads-read", dest="threads_read", help="Number of threads for the read operations")
        parser.add_argument("-w", "--threads-write", dest="threads_write", help="Number of threads for the write operations")
        parser.add_argument("-R", "--repetitions", help="Number of repetitions of each experiment")
        parser.add_argument("-t", "--timeout", help="Max time per operation, in seconds (0 = no timeout)")
        parser.add_argument("--seed", help="Random seed used in the experiments")
        parser.add_argument("--max-weight", dest="max_weight", help="Max weight assigned to the edges of unweighted graphs")
        parser.add_argument(
            "-a", "--aging-coeff", dest="aging_coeff",
            help="Additional updates to perform, as a fraction of the final graph size",
        )
        parser.add_argument("--ef-vertices", dest="ef_vertices", help="Expansion factor for the vertices")
        parser.add_argument("-e", "--ef-edges", dest="ef_edges", help="Expansion factor for the edges")
        parser.add_argument(
            "-b", "--build-frequency", dest="build_frequency",
            help="Min interval between snapshot builds in the aging experiment, in milliseconds",
        )
        parser.add_argument(
            "-v", "--validate", action=argparse.BooleanOptionalAction,
            help="Validate the output of the executed algorithms",
        )
        parser.add_argument("-d", "--database", help="SQLite file where to store the results")
        return parser

    def _read_parameter_file(self, path: str, known: Sequence[str]) -> Dict[str, Any]:
        try:
            content = load_parameter_file(path)
        except (FileNotFoundError, ValueError) as e:
            raise ConfigurationError(str(e), "config") from e

        values = {}
        for key, value in content.items():
            dest = key.replace("-", "_")
            dest = _FILE_ALIASES.get(dest, dest)
            if dest not in known or dest == "config":
                raise ConfigurationError(
                    f"Unknown parameter `{key}' in {path}", parameter=key
                )
            values[dest] = value
        return values

    def _apply(self, values: Dict[str, Any]) -> None:
        library_name = values.get("library")
        if not library_name:
            raise ConfigurationError("Missing mandatory argument --library", "library")
        self._library_factory = self._registry.get(str(library_name))
        self._library_name = str(library_name).lower()

        if values.get("graph") is not None:
            self.set_graph(str(values["graph"]))
        if values.get("undirected") is not None:
            self._graph_directed = not _as_bool(values["undirected"], "undirected")
        if values.get("update_log") is not None:
            self._update_log = str(values["update_log"])

        if values.get("threads_read") is not None:
            self.set_num_thread_read(values["threads_read"])
        if values.get("threads_write") is not None:
            self.set_num_thread_write(values["threads_write"])

        if values.get("repetitions") is not None:
            self.set_num_repetitions(values["repetitions"])
        if values.get("timeout") is not None:
            self.set_timeout(values["timeout"])
        if values.get("seed") is not None:
            self.set_seed(values["seed"])
        if values.get("max_weight") is not None:
            self.set_max_weight(values["max_weight"])
        if values.get("aging_coeff") is not None:
            self.set_coeff_aging(values["aging_coeff"])
        if values.get("ef_vertices") is not None:
            self.set_ef_vertices(values["ef_vertices"])
        if values.get("ef_edges") is not None:
            self.set_ef_edges(values["ef_edges"])
        if values.get("build_frequency") is not None:
            self.set_build_frequency(values["build_frequency"])
        if values.get("validate") is not None:
            self._validate_output = _as_bool(values["validate"], "validate")
        if values.get("database") is not None:
            self.set_database_path(str(values["database"]))

    def initialise(self, argv: Optional[Sequence[str]] = None) -> None:
        """
        Initialise the configuration from the command line arguments.

        Must be invoked once, before any other subsystem reads the
        configuration. Either every parameter is applied, or none is: the
        values are validated on a staging instance and committed only when
        all of them, and the library lookup, succeed.

        Parameters
        ----------
        argv : sequence of str, optional
            Command line arguments, without the program name
            (default: sys.argv[1:])

        Raises
        ------
        ConfigurationError
            If the configuration was already initialised, the library is
            missing or unknown, or a parameter is invalid
        """
        if self._initialised:
            raise ConfigurationError("The configuration has already been initialised")
        if argv is None:
            argv = sys.argv[1:]

        parser = self._build_parser()
        args = parser.parse_args(list(argv))
        arguments = vars(args)

        # the command line overrides the parameter file
        values: Dict[str, Any] = {}
        if args.config:
            values.update(
                _expand_threads(self._read_parameter_file(args.config, list(arguments)))
            )
        values.update(
            _expand_threads(
                {k: v for k, v in arguments.items() if v is not None and k != "config"}
            )
        )

        staged = Configuration(registry=self._registry, logger=self._logger)
        staged._apply(values)

        for field in _COMMITTED_FIELDS:
            setattr(self, field, getattr(staged, field))
        self._initialised = True

        for name, value in self.parameters().items():
            self._logger.info(f"[Configuration] {name}: {value}")

    def is_initialised(self) -> bool:
        return self._initialised

    # ------------------------------------------------------------------
    # Setters, used during the initialisation
    # ------------------------------------------------------------------

    def set_build_frequency(self, millisecs) -> None:
        """Min time between two invocations of build() in the aging experiment."""
        value = _as_int(millisecs, "build_frequency")
        if value < 0:
            raise ConfigurationError(
                f"Invalid value for the build frequency: {value} (must be >= 0)",
                "build_frequency",
            )
        self._build_frequency = value

    def set_coeff_aging(self, value) -> None:
        """How many updates to perform w.r.t. the size of the loaded graph."""
        coeff = _as_float(value, "aging_coeff")
        if coeff < 0:
            raise ConfigurationError(
                f"The aging coefficient must be >= 0: {coeff}", "aging_coeff"
            )
        self._coeff_aging = coeff

    def set_ef_vertices(self, value) -> None:
        factor = _as_float(value, "ef_vertices")
        if factor < 1:
            raise ConfigurationError(
                f"The expansion factor for the vertices must be >= 1: {factor}",
                "ef_vertices",
            )
        self._ef_vertices = factor

    def set_ef_edges(self, value) -> None:
        factor = _as_float(value, "ef_edges")
        if factor < 1:
            raise ConfigurationError(
                f"The expansion factor for the edges must be >= 1: {factor}",
                "ef_edges",
            )
        self._ef_edges = factor

    def set_max_weight(self, value) -> None:
        """Max weight assigned by the readers to the edges of unweighted graphs."""
        weight = _as_float(value, "max_weight")
        if weight < 0:
            raise ConfigurationError(
                f"The max weight must be non negative: {weight}", "max_weight"
            )
        self._max_weight = weight

    def set_num_repetitions(self, value) -> None:
        repetitions = _as_int(value, "repetitions")
        if repetitions < 1:
            raise ConfigurationError(
                f"The number of repetitions must be >= 1: {repetitions}", "repetitions"
            )
        self._num_repetitions = repetitions

    def set_num_thread_read(self, value) -> None:
        threads = _as_int(value, "threads_read")
        if threads < 1:
            raise ConfigurationError(
                f"The number of read threads must be >= 1: {threads}", "threads_read"
            )
        self._num_threads_read = threads

    def set_num_thread_write(self, value) -> None:
        threads = _as_int(value, "threads_write")
        if threads < 1:
            raise ConfigurationError(
                f"The number of write threads must be >= 1: {threads}", "threads_write"
            )
        self._num_threads_write = threads

    def set_timeout(self, seconds) -> None:
        """Budget per operation, in seconds. 0 disables the timeout."""
        value = _as_int(seconds, "timeout")
        if value < 0:
            raise ConfigurationError(
                f"The timeout must be >= 0: {value}", "timeout"
            )
        self._timeout_seconds = value

    def set_graph(self, graph: str) -> None:
        """
        Set the graph to load.

        The path is not checked here: the file only needs to be readable
        by the graph loader.
        """
        self._path_graph_to_load = graph

    def set_seed(self, value) -> None:
        seed = _as_int(value, "seed")
        if not 0 <= seed <= MAX_SEED:
            raise ConfigurationError(
                f"The seed must be a 64-bit unsigned integer: {seed}", "seed"
            )
        self._seed = seed

    def set_database_path(self, path: str) -> None:
        self._database_path = path

    # ------------------------------------------------------------------
    # Graph library
    # ------------------------------------------------------------------

    def generate_graph_library(self) -> Interface:
        """
        Create a new instance of the library under evaluation.

        Every call returns a distinct instance, for a directed or undirected
        graph depending on the configuration.

        Raises
        ------
        ConfigurationError
            If the configuration has not been initialised
        """
        if not self._initialised or self._library_factory is None:
            raise ConfigurationError(
                "The configuration has not been initialised, no library to generate",
                "library",
            )
        return self._library_factory(self._graph_directed)

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    def has_database(self) -> bool:
        """Whether the parameters and results need to be stored in a database."""
        return bool(self._database_path)

    def db(self) -> Database:
        """
        Handle to the database where the results are stored.

        The connection is opened on the first call and reused afterwards.

        Raises
        ------
        ConfigurationError
            If no database has been configured, or the handle was closed
        """
        if not self.has_database():
            raise ConfigurationError("No database configured", "database")
        with self._database_lock:
            if self._database_closed:
                raise ConfigurationError("The database has already been closed", "database")
            if self._database is None:
                self._database = Database(self._database_path)
            return self._database

    def save_parameters(self) -> None:
        """Store the parameters of the run into the database."""
        parameters = dict(self.parameters())
        parameters["hostname"] = socket.gethostname()
        parameters["driver_version"] = __version__
        self.db().store_parameters(parameters)

    def close(self) -> None:
        """
        Release the database handle, if it was ever opened.

        Afterwards db() and save_parameters() fail: a run never gets a
        second handle.
        """
        with self._database_lock:
            database, self._database = self._database, None
            self._database_closed = True
        if database is not None:
            database.close()

    def __enter__(self) -> "Configuration":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_library_name(self) -> str:
        return self._library_name

    def get_update_log(self) -> str:
        """Log of updates to replay in the aging experiment."""
        return self._update_log

    def is_graph_directed(self) -> bool:
        return self._graph_directed

    def validate_output(self) -> bool:
        return self._validate_output

    def coefficient_aging(self) -> float:
        """Surplus of updates w.r.t. the final graph to load."""
        return self._coeff_aging

    def num_repetitions(self) -> int:
        return self._num_repetitions

    def num_threads(self, threads_type: ThreadsType) -> int:
        """
        Number of worker threads of the given category.

        Parameters
        ----------
        threads_type : ThreadsType
            THREADS_READ, THREADS_WRITE or THREADS_TOTAL (their sum)
        """
        if threads_type is ThreadsType.THREADS_READ:
            return self._num_threads_read
        if threads_type is ThreadsType.THREADS_WRITE:
            return self._num_threads_write
        if threads_type is ThreadsType.THREADS_TOTAL:
            return self._num_threads_read + self._num_threads_write
        raise ValueError(f"Invalid threads type: {threads_type!r}")

    def get_path_graph(self) -> str:
        return self._path_graph_to_load

    def get_timeout_per_operation(self) -> int:
        """Budget to complete a single operation, in seconds (0 => no timeout)."""
        return self._timeout_seconds

    def has_timeout(self) -> bool:
        return self._timeout_seconds != 0

    def get_ef_edges(self) -> float:
        return self._ef_edges

    def get_ef_vertices(self) -> float:
        return self._ef_vertices

    def get_build_frequency(self) -> int:
        """Min interval between two snapshot builds, in milliseconds."""
        return self._build_frequency

    def seed(self) -> int:
        return self._seed

    def max_weight(self) -> float:
        return self._max_weight

    def get_database_path(self) -> str:
        return self._database_path

    def random_generator(self, offset: int = 0) -> np.random.Generator:
        """
        Random generator seeded from the configured seed.

        Experiments that need independent streams pass distinct offsets;
        the same offset always yields the same sequence.
        """
        return np.random.default_rng(self._seed + offset)

    def parameters(self) -> Dict[str, Any]:
        """All the parameters of the run, as stored by save_parameters()."""
        return {
            "aging": self._coeff_aging,
            "build_frequency": self._build_frequency,
            "database": self._database_path,
            "directed": self._graph_directed,
            "ef_edges": self._ef_edges,
            "ef_vertices": self._ef_vertices,
            "graph": self._path_graph_to_load,
            "library": self._library_name,
            "max_weight": self._max_weight,
            "num_repetitions": self._num_repetitions,
            "num_threads_read": self._num_threads_read,
            "num_threads_write": self._num_threads_write,
            "seed": self._seed,
            "timeout": self._timeout_seconds,
            "update_log": self._update_log,
            "validate_output": self._validate_output,
        }

    def __repr__(self) -> str:
        return (
            f"Configuration(library={self._library_name!r}, "
            f"graph={self._path_graph_to_load!r}, initialised={self._initialised})"
        )


_configuration: Optional[Configuration] = None


def configuration() -> Configuration:
    """
    The process-wide configuration, created with the defaults on first call.

    Call it from the main thread before spawning any worker.
    """
    global _configuration
    if _configuration is None:
        _configuration = Configuration()
        atexit.register(_configuration.close)
    return _configuration


def reset_configuration() -> None:
    """Close and discard the process-wide configuration."""
    global _configuration
    if _configuration is not None:
        atexit.unregister(_configuration.close)
        _configuration.close()
    _configuration = None
