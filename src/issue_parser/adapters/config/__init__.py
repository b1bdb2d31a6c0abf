"""
Config adapters - Load AppConfig from files, the environment, and the CLI.
"""

from .environment import ENV_PREFIX, EnvironmentConfigProvider
from .file_config import CONFIG_FILE_NAMES, FileConfigProvider


__all__ = [
    "CONFIG_FILE_NAMES",
    "ENV_PREFIX",
    "EnvironmentConfigProvider",
    "FileConfigProvider",
]
