"""Configuration management for photo copying."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .metadata_pool import default_worker_count

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


class Config:
    """Tool settings loaded from an optional YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches standard locations
                and falls back to built-in defaults when nothing is found.
        """
        self.config_path = config_path or self._find_config_file()
        self.config: Dict[str, Any] = {}
        if self.config_path:
            self._load_config()

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        # Only tool-specific names are picked up from the working directory
        possible_paths = [
            Path.cwd() / "photo_copier.local.yml",
            Path.cwd() / "photo_copier.yml",
            Path(__file__).parent / "config.local.yml",
            Path(__file__).parent / "config.yml",
        ]

        for config_file in possible_paths:
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return str(config_file.resolve())

        logger.debug("No configuration file found, using defaults")
        return None

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise ConfigurationError(str(e), op="load config", path=self.config_path) from e

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path like 'photo_copier.process.workers'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_worker_count(self) -> int:
        """Get number of metadata workers."""
        return self.get('photo_copier.process.workers') or default_worker_count()

    def should_verify_copies(self) -> bool:
        """Check if copies should be verified by hash."""
        return bool(self.get('photo_copier.process.verify_copies', False))

    def get_min_free_space_mb(self) -> int:
        """Get space to keep free on the target after copying, in MB."""
        return self.get('photo_copier.safety.min_free_space_mb', 0)

    def get_log_level(self) -> str:
        """Get logging level."""
        return str(self.get('photo_copier.logging.level', 'INFO')).upper()

    def get_log_dir(self) -> Optional[str]:
        """Get directory for the log file, if file logging is enabled."""
        return self.get('photo_copier.logging.log_dir')

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages
        """
        errors = []

        workers = self.get('photo_copier.process.workers')
        if workers is not None and (not isinstance(workers, int) or workers < 1 or workers > 64):
            errors.append(f"Invalid workers value: {workers} (must be 1-64)")

        min_free = self.get_min_free_space_mb()
        if not isinstance(min_free, int) or min_free < 0:
            errors.append(f"Invalid min_free_space_mb value: {min_free} (must be >= 0)")

        level = self.get_log_level()
        if level not in LOG_LEVELS:
            errors.append(f"Invalid log level: {level} (must be one of {', '.join(LOG_LEVELS)})")

        return errors

    def __str__(self) -> str:
        """String representation of configuration."""
        return f"Config(path={self.config_path}, workers={self.get_worker_count()})"


def parse_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a YYYY-MM-DD date as local midnight.

    Args:
        value: Date string, empty or None for no bound
        end_of_day: Move the result to 23:59:59 of that day

    Raises:
        ConfigurationError: If the date is malformed
    """
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError as e:
        raise ConfigurationError(f"invalid date '{value}', use YYYY-MM-DD") from e
    if end_of_day:
        parsed += timedelta(hours=23, minutes=59, seconds=59)
    return parsed


@dataclass(frozen=True)
class RunOptions:
    """Finished per-run settings handed to the pipeline."""
    source_dir: Path
    target_dir: Path
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    dry_run: bool = False
    allow_override: bool = False
    verbose: bool = False

    @classmethod
    def from_raw(cls, source_dir: Optional[str], target_dir: Optional[str],
                 from_date: Optional[str] = None, until_date: Optional[str] = None,
                 dry_run: bool = False, allow_override: bool = False,
                 verbose: bool = False) -> 'RunOptions':
        """Validate raw option values and build RunOptions."""
        if not source_dir or not target_dir:
            raise ConfigurationError("source and target are required")

        start_date = parse_date(from_date)
        end_date = parse_date(until_date, end_of_day=True)
        if start_date and end_date and start_date > end_date:
            raise ConfigurationError("from date must not be after until date")

        return cls(
            source_dir=Path(source_dir).expanduser(),
            target_dir=Path(target_dir).expanduser(),
            start_date=start_date,
            end_date=end_date,
            dry_run=dry_run,
            allow_override=allow_override,
            verbose=verbose,
        )

    def describe_range(self) -> str:
        """Human-readable date range for log output."""
        if self.start_date is None and self.end_date is None:
            return "all dates"
        start = self.start_date.strftime(DATE_FORMAT) if self.start_date else "any"
        end = self.end_date.strftime(DATE_FORMAT) if self.end_date else "any"
        return f"{start} to {end}"
