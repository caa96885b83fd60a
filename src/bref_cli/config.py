"""Configuration loading utilities for bref-cli."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigError

_DEFAULT_CONFIG_PATH = Path("bref.json")


@dataclass
class AwsConfig:
    """Credentials profile and region handed to boto3 and the Serverless CLI."""

    profile: Optional[str] = None
    region: Optional[str] = None


@dataclass
class DashboardConfig:
    image: str = "bref/dashboard"
    port: int = 8000
    ready_marker: str = "Dashboard started"  # printed by the container once listening
    poll_interval: float = 0.1
    aws_dir: Optional[str] = None  # defaults to ~/.aws


@dataclass
class DiagnosticsConfig:
    window_hours: float = 24.0


@dataclass
class ShortUrlConfig:
    endpoint: Optional[str] = None  # disabled when unset
    timeout: int = 10


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    """Top-level configuration."""

    aws: AwsConfig = field(default_factory=AwsConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    short_url: ShortUrlConfig = field(default_factory=ShortUrlConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AppConfig":
        def section(name: str) -> Dict[str, Any]:
            data = payload.get(name, {}) or {}
            # 以下划线开头的键是注释
            return {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(
            aws=AwsConfig(**{**AwsConfig().__dict__, **section("aws")}),
            dashboard=DashboardConfig(
                **{**DashboardConfig().__dict__, **section("dashboard")}
            ),
            diagnostics=DiagnosticsConfig(
                **{**DiagnosticsConfig().__dict__, **section("diagnostics")}
            ),
            short_url=ShortUrlConfig(
                **{**ShortUrlConfig().__dict__, **section("short_url")}
            ),
            logging=LoggingConfig(**{**LoggingConfig().__dict__, **section("logging")}),
        )


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from `path` or ``bref.json`` in the working directory.

    Without a config file the defaults apply. An explicit `path` that does not
    exist is an error.

    Environment variables (higher priority than config file):
    - AWS_PROFILE: credentials profile
    - AWS_REGION or AWS_DEFAULT_REGION: region
    - BREF_SHORT_URL_ENDPOINT: short-URL service endpoint
    - BREF_LOG_LEVEL: logging level
    """
    load_dotenv()

    if path and not Path(path).is_file():
        raise FileNotFoundError(f"Could not find configuration file: {path}")

    candidate = Path(path) if path else _DEFAULT_CONFIG_PATH
    if candidate.is_file():
        with candidate.open("r", encoding="utf-8") as handle:
            try:
                payload = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ConfigError(str(candidate), str(exc)) from exc
        if not isinstance(payload, dict):
            raise ConfigError(str(candidate), "top level must be a JSON object")
        try:
            config = AppConfig.from_dict(payload)
        except (TypeError, AttributeError) as exc:
            raise ConfigError(str(candidate), str(exc)) from exc
    else:
        config = AppConfig()

    env_profile = os.getenv("AWS_PROFILE")
    if env_profile:
        config.aws.profile = env_profile

    env_region = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
    if env_region:
        config.aws.region = env_region

    env_short_url = os.getenv("BREF_SHORT_URL_ENDPOINT")
    if env_short_url:
        config.short_url.endpoint = env_short_url

    env_level = os.getenv("BREF_LOG_LEVEL")
    if env_level:
        config.logging.level = env_level.upper()

    if not config.dashboard.aws_dir:
        config.dashboard.aws_dir = str(Path.home() / ".aws")

    return config
