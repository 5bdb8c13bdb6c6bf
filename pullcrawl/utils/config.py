"""
Configuration management for the crawler.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from ..crawler.fetcher import DEFAULT_USER_AGENT
from ..crawler.frontier import FRONTIER_TYPES


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    seed_urls: List[str] = field(default_factory=list)
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = 30
    retry_attempts: int = 2
    retry_backoff: float = 0.5
    headers: Dict[str, str] = field(default_factory=dict)
    frontier_order: str = 'lifo'
    max_pages: Optional[int] = None
    select: Optional[str] = None
    resolve_links: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = 'INFO'
    file: Optional[str] = None
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    prometheus_port: int = 8000
    metrics_enabled: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def transport_options(self) -> Dict[str, Any]:
        """Options forwarded to the fetcher."""
        return {
            'user_agent': self.crawler.user_agent,
            'request_timeout': self.crawler.request_timeout,
            'retry_attempts': self.crawler.retry_attempts,
            'retry_backoff': self.crawler.retry_backoff,
            'headers': dict(self.crawler.headers),
        }


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = "config.yaml"):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self, require_seeds: bool = True) -> Config:
        """
        Load configuration from YAML file.

        Without a path the defaults are used. Sections missing from the file
        keep their defaults too.
        """
        config_data: Dict[str, Any] = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r') as file:
                config_data = yaml.safe_load(file) or {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a mapping")

        try:
            self._config = Config(
                crawler=CrawlerConfig(**(config_data.get('crawler') or {})),
                logging=LoggingConfig(**(config_data.get('logging') or {})),
                monitoring=MonitoringConfig(**(config_data.get('monitoring') or {}))
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

        self._validate_config(require_seeds)
        return self._config

    def _validate_config(self, require_seeds: bool = True):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")

        crawler = self._config.crawler

        if require_seeds and not crawler.seed_urls:
            raise ValueError("At least one seed URL must be provided")

        if any(not isinstance(url, str) for url in crawler.seed_urls):
            raise ValueError("seed_urls must be strings")

        if crawler.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

        if crawler.retry_attempts < 0:
            raise ValueError("retry_attempts must be non-negative")

        if crawler.retry_backoff < 0:
            raise ValueError("retry_backoff must be non-negative")

        if crawler.max_pages is not None and crawler.max_pages < 1:
            raise ValueError("max_pages must be at least 1")

        if crawler.frontier_order not in FRONTIER_TYPES:
            raise ValueError(f"frontier_order must be one of {sorted(FRONTIER_TYPES)}")

        if not hasattr(logging, self._config.logging.level.upper()):
            raise ValueError(f"Unknown log level: {self._config.logging.level}")

        logging.getLogger(__name__).debug("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def load_config(config_path: Optional[str] = "config.yaml", require_seeds: bool = True) -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config(require_seeds=require_seeds)
