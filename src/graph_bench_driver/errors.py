"""
Errors raised by the driver configuration.
"""

from typing import Optional


class ConfigurationError(Exception):
    """
    Raised when the driver cannot be configured.

    Covers unknown libraries, parameter values outside their domain and
    operations that need a resource (library factory, database) that was
    never set up.

    Parameters
    ----------
    message : str
        Human readable description of the problem
    parameter : str, optional
        Name of the offending parameter, if any
    """

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter
