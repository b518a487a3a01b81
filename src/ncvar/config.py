"""
ncvar Configuration Module

This module contains global configuration, constants, and default settings
for the ncvar library.
"""

import logging
import threading
from pathlib import Path
from dataclasses import dataclass

logger = logging.getLogger(__name__)


# =============================================================================
# Thread Safety
# =============================================================================

# Global lock for every storage engine call; the engine is not reentrant-safe
ENGINE_LOCK = threading.RLock()


# =============================================================================
# Defaults
# =============================================================================

# On-disk format used when NetCDF4Engine creates a new file
DEFAULT_FORMAT = "NETCDF4"

# Maximum number of NumericAccess instances kept by access_for()
ACCESS_CACHE_SIZE = 64

# How discovery treats a variable whose name is already in the catalog
DUPLICATE_OVERWRITE = "overwrite"
DUPLICATE_ERROR = "error"

DEFAULT_LOG_LEVEL = "WARNING"


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class NcVarConfig:
    """
    ncvar configuration with sensible defaults.

    Attributes
    ----------
    duplicate_variables : str
        ``"overwrite"`` keeps the later of two same-named variables found
        during discovery, ``"error"`` raises ``CatalogError``
    allow_cast : bool
        Default ``cast`` argument of the exact-type accessors
    file_format : str
        Format passed to netCDF4 when creating files
    log_level : str
        Level applied by ``configure_logging()``
    """

    duplicate_variables: str = DUPLICATE_OVERWRITE
    allow_cast: bool = False
    file_format: str = DEFAULT_FORMAT
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if self.duplicate_variables not in (DUPLICATE_OVERWRITE, DUPLICATE_ERROR):
            raise ValueError(
                f"duplicate_variables must be '{DUPLICATE_OVERWRITE}' or "
                f"'{DUPLICATE_ERROR}', got {self.duplicate_variables!r}"
            )

    @classmethod
    def load_from_file(cls, config_path: Path | None = None) -> 'NcVarConfig':
        """
        Load configuration from TOML file if exists, otherwise use defaults.

        Parameters
        ----------
        config_path : Path, optional
            Path to configuration file. If None, searches for config.toml
            in current directory or ~/.ncvar/

        Returns
        -------
        NcVarConfig
            Configuration instance
        """
        search_paths = [
            config_path,
            Path.cwd() / 'config.toml',
            Path.home() / '.ncvar' / 'config.toml'
        ]

        for path in search_paths:
            if path and Path(path).exists():
                try:
                    import tomllib
                    with open(path, 'rb') as f:
                        data = tomllib.load(f)
                    section = data.get('ncvar', {})
                    return cls(
                        duplicate_variables=section.get('duplicate_variables', cls.duplicate_variables),
                        allow_cast=bool(section.get('allow_cast', cls.allow_cast)),
                        file_format=section.get('file_format', cls.file_format),
                        log_level=section.get('log_level', cls.log_level),
                    )
                except (OSError, ValueError) as e:
                    logger.warning(f"Failed to load config from {path}: {e}")

        return cls()


def configure_logging(cfg: 'NcVarConfig | None' = None) -> None:
    """Apply ``cfg.log_level`` to the ``ncvar`` logger hierarchy."""
    cfg = cfg or config
    logging.getLogger('ncvar').setLevel(cfg.log_level.upper())


# =============================================================================
# Global Config Instance
# =============================================================================

config = NcVarConfig()
