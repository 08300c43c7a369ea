"""Application configuration helpers."""

from __future__ import annotations

from .env import env_int, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .heuristics import (
    CommonFieldSpec,
    HeuristicsConfig,
    get_heuristics_config,
    load_heuristics,
)
from .logging import configure_logging
from .reconciliation import ReconciliationConfig, get_reconciliation_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "CommonFieldSpec",
    "ConfigurationError",
    "DatabaseConfig",
    "HeuristicsConfig",
    "MissingConfigurationError",
    "ReconciliationConfig",
    "StorageConfig",
    "configure_logging",
    "env_int",
    "get_database_config",
    "get_database_uri",
    "get_heuristics_config",
    "get_reconciliation_config",
    "get_storage_config",
    "load_heuristics",
    "require_env_var",
    "require_env_vars",
]
