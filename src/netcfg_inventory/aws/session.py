from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError

DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class AuthContext:
    """
    Holds the resolved boto3 session used to construct AWS clients.
    region is the bootstrap region for account-wide calls (STS, DescribeRegions).
    """

    session: Any
    profile: Optional[str]
    region: str


class AuthError(RuntimeError):
    pass


def resolve_session(profile: Optional[str], region: Optional[str] = None) -> AuthContext:
    """
    Build a boto3 session from the default credential chain, or from a named
    profile in the shared config/credentials files when profile is given.
    """
    bootstrap_region = region or DEFAULT_REGION
    try:
        if profile:
            session = boto3.Session(profile_name=profile, region_name=bootstrap_region)
        else:
            session = boto3.Session(region_name=bootstrap_region)
    except BotoCoreError as e:
        raise AuthError(f"Failed to create AWS session (profile={profile or 'default'}): {e}") from e
    if session.get_credentials() is None:
        raise AuthError(
            "No AWS credentials found. Configure a profile (--profile) or the standard AWS_* environment variables."
        )
    return AuthContext(session=session, profile=profile, region=bootstrap_region)


def make_client(
    service_name: str,
    ctx: AuthContext,
    region: Optional[str] = None,
    connection_pool_size: Optional[int] = None,
) -> Any:
    """
    Construct a boto3 client for service_name in region (defaults to the
    context's bootstrap region). connection_pool_size sizes the HTTP pool so
    concurrent listings in one region do not queue on connections.
    """
    kwargs: dict[str, Any] = {"region_name": region or ctx.region}
    if connection_pool_size is not None and connection_pool_size >= 1:
        kwargs["config"] = BotoConfig(max_pool_connections=connection_pool_size)
    return ctx.session.client(service_name, **kwargs)
