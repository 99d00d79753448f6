#!/usr/bin/env python3
"""
Driver Entry Point
==================

Initialises the process configuration from the command line, records the
parameters in the results database (when one is given) and checks that the
selected library can be instantiated.

Usage:
    python -m graph_bench_driver.main --library networkx --graph g.el [options]
    gfe-config --help  # If installed via setup.py
"""

import sys
from typing import Optional, Sequence

from .configuration import THREADS_TOTAL, configuration
from .errors import ConfigurationError
from .logger import configure_logging, get_logger

logger = get_logger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point. Returns the exit status."""
    configure_logging()
    cfg = configuration()

    try:
        cfg.initialise(argv)
        if cfg.has_database():
            cfg.save_parameters()
            logger.info(f"Parameters saved to: {cfg.get_database_path()}")
        library = cfg.generate_graph_library()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info(f"Library: {type(library).__name__} (directed: {library.is_directed()})")
    logger.info(f"Worker threads: {cfg.num_threads(THREADS_TOTAL)}")
    if not cfg.has_timeout():
        logger.info("No timeout per operation")
    cfg.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
