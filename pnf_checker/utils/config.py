"""Configuration management for the PNF checker."""

import os
import yaml
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .errors import ConfigurationError


DEFAULT_CUTOVER_DATE = date(2023, 4, 1)
DEFAULT_CNP_EXTENSION_MONTHS = 6
DEFAULT_RELEVANCE_WINDOW_YEARS = 3


@dataclass(frozen=True)
class RuleConfig:
    """Regulatory constants used by the decision engine."""
    cutover_date: date
    cnp_extension_months: int = DEFAULT_CNP_EXTENSION_MONTHS
    relevance_window_years: int = DEFAULT_RELEVANCE_WINDOW_YEARS


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str
    format: str
    file: Optional[str] = None


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class Config:
    """Main configuration class."""
    rules: RuleConfig
    logging: LoggingConfig
    server: ServerConfig

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "Config":
        """
        Load configuration from file and environment variables.

        Environment variables override config file values:
        - PNF_CUTOVER_DATE
        - PNF_CNP_EXTENSION_MONTHS
        - PNF_RELEVANCE_WINDOW_YEARS
        - LOG_LEVEL
        - LOG_FILE

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigurationError: If the cutover date is missing or malformed
        """
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        pnf_data = config_data.get("pnf", {}) or {}

        # Rule configuration with environment overrides
        cutover_raw = os.getenv("PNF_CUTOVER_DATE", pnf_data.get("cutover_date"))
        rules_config = RuleConfig(
            cutover_date=parse_cutover_date(cutover_raw),
            cnp_extension_months=_int_setting(
                "pnf.cnp_extension_months",
                os.getenv("PNF_CNP_EXTENSION_MONTHS", pnf_data.get("cnp_extension_months", DEFAULT_CNP_EXTENSION_MONTHS))
            ),
            relevance_window_years=_int_setting(
                "pnf.relevance_window_years",
                os.getenv("PNF_RELEVANCE_WINDOW_YEARS", pnf_data.get("relevance_window_years", DEFAULT_RELEVANCE_WINDOW_YEARS))
            )
        )

        # Logging configuration
        log_data = config_data.get("logging", {}) or {}
        logging_config = LoggingConfig(
            level=os.getenv("LOG_LEVEL", log_data.get("level", "INFO")),
            format=log_data.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            file=os.getenv("LOG_FILE", log_data.get("file")) or None
        )

        # Server configuration
        server_data = config_data.get("server", {}) or {}
        server_config = ServerConfig(
            host=server_data.get("host", "127.0.0.1"),
            port=_int_setting("server.port", server_data.get("port", 8000))
        )

        return cls(
            rules=rules_config,
            logging=logging_config,
            server=server_config,
        )

    @classmethod
    def default(cls) -> "Config":
        """Configuration used when no config file is available."""
        return cls(
            rules=RuleConfig(cutover_date=DEFAULT_CUTOVER_DATE),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                file=os.getenv("LOG_FILE") or None
            ),
            server=ServerConfig(),
        )


def parse_cutover_date(value: Any) -> date:
    """
    Turn a configured cutover value into a date.

    YAML already yields a ``date`` for unquoted ISO values; strings are
    parsed as ``YYYY-MM-DD``.

    Raises:
        ConfigurationError: If the value is missing or not a valid date
    """
    if value is None or value == "":
        raise ConfigurationError.cutover_missing()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ConfigurationError.invalid_value("pnf.cutover_date", value, e) from e


def _int_setting(key: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError.invalid_value(key, value, e) from e
    if number < 0:
        raise ConfigurationError.invalid_value(key, value)
    return number
