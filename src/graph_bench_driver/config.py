"""
Default Settings
================

Default values for every run parameter of the benchmark driver, and the
loader for YAML parameter files. Centralizing these keeps the command line,
parameter files and the Configuration class consistent.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

# Random seed used in various places in the experiments
DEFAULT_SEED = 5051789

# Aging workload
DEFAULT_BUILD_FREQUENCY_MS = 5 * 60 * 1000
DEFAULT_COEFF_AGING = 0.0
DEFAULT_EF_VERTICES = 1.0
DEFAULT_EF_EDGES = 1.0

# Graph loading
DEFAULT_GRAPH_DIRECTED = True
DEFAULT_MAX_WEIGHT = 1.0

# Execution
DEFAULT_NUM_REPETITIONS = 5
DEFAULT_NUM_THREADS_READ = 1
DEFAULT_NUM_THREADS_WRITE = 1
DEFAULT_TIMEOUT_SECONDS = 3600  # 0 => no timeout

MAX_SEED = 2 ** 64 - 1

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_parameter_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML parameter file.

    Keys are option names as given on the command line, without the
    leading dashes (e.g. ``threads-read: 4``).

    Parameters
    ----------
    path : str or Path
        Location of the YAML file

    Returns
    -------
    Dict[str, Any]
        Parameter name -> value. Empty if the document is empty.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the document is not a mapping
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Parameter file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        content = yaml.safe_load(f)

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Parameter file {config_path} must contain a mapping")
    return {str(k): v for k, v in content.items()}
