"""pathsfilter Core - Shared types, configuration, logging and validation.

Import specific functions from submodules:
    from pathsfilter.core.config import ConfigManager
    from pathsfilter.core import constants
    from pathsfilter.core import logging
    from pathsfilter.core import validators
"""

from pathsfilter.core import config, constants, logging, validators

__all__ = [
    "config",
    "constants",
    "logging",
    "validators",
]
