"""Configuration exception module.

This module defines exception types specific to the configuration system.
"""

from starmap.core.exceptions import StarmapError


class ConfigError(StarmapError):
    """Exception raised for configuration errors.

    This includes errors such as:
    - Invalid configuration format
    - Configuration validation failures
    - File access errors
    """
