"""starmap configuration system.

Configuration is read from a YAML file and ``STARMAP_*`` environment
variables, validated with pydantic, and converted by the CLI into explicit
sync options.

Example usage:
```python
from starmap.core.config import load_config

config = load_config()
concurrency = config.sync.concurrency
```
"""

from .schema import LoggingConfig, ModelsDevSettings, ProviderSettings, StarmapConfig, SyncSettings
from .loader import load_config
from .exceptions import ConfigError

__all__ = [
    "StarmapConfig",
    "SyncSettings",
    "ModelsDevSettings",
    "ProviderSettings",
    "LoggingConfig",
    "load_config",
    "ConfigError",
]
