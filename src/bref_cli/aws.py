"""boto3 session and client construction."""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .config import AwsConfig
from .errors import ApiError


def create_session(config: AwsConfig) -> boto3.session.Session:
    """Build a session from explicit profile/region values.

    Unset values fall through to boto3's own credential and region chain.
    """
    try:
        return boto3.session.Session(
            profile_name=config.profile,
            region_name=config.region,
        )
    except BotoCoreError as exc:
        raise ApiError(str(exc), region=config.region) from exc


def create_client(service: str, config: AwsConfig, session: Optional[Any] = None) -> Any:
    session = session or create_session(config)
    try:
        return session.client(service, region_name=config.region)
    except BotoCoreError as exc:
        raise ApiError(str(exc), region=config.region) from exc


def client_region(client: Any) -> Optional[str]:
    return getattr(getattr(client, "meta", None), "region_name", None)
