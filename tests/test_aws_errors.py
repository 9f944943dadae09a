from __future__ import annotations

import types

import pytest
from botocore.exceptions import ClientError, NoCredentialsError, ProfileNotFound

from netcfg_inventory.aws import identity, regions, session
from netcfg_inventory.aws.session import AuthContext, AuthError
from netcfg_inventory.util.errors import (
    AuthResolutionError,
    AwsClientError,
    ConfigError,
    DatasetError,
    DatasetNotFoundError,
    ExitCode,
    as_exit_code,
    map_aws_error,
)


def _ctx() -> AuthContext:
    return AuthContext(session=types.SimpleNamespace(), profile=None, region="us-east-1")


def _client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "nope"}}, operation)


def test_map_aws_error_wraps_botocore_errors() -> None:
    mapped = map_aws_error(NoCredentialsError(), "listing")
    assert isinstance(mapped, AwsClientError)
    assert str(mapped).startswith("listing: ")
    assert map_aws_error(ValueError("plain"), "listing") is None


def test_exit_codes() -> None:
    assert as_exit_code(ConfigError("x")) == ExitCode.CONFIG_ERROR
    assert as_exit_code(ValueError("x")) == ExitCode.CONFIG_ERROR
    assert as_exit_code(AuthResolutionError("x")) == ExitCode.AUTH_ERROR
    assert as_exit_code(AwsClientError("x")) == ExitCode.AWS_ERROR
    assert as_exit_code(DatasetNotFoundError("x")) == ExitCode.RUNTIME_ERROR
    assert as_exit_code(DatasetError("x")) == ExitCode.RUNTIME_ERROR
    assert as_exit_code(RuntimeError("x")) == 1


def test_resolve_session_maps_missing_profile(monkeypatch) -> None:
    def _raise(**kwargs):
        raise ProfileNotFound(profile=kwargs.get("profile_name"))

    monkeypatch.setattr(session.boto3, "Session", _raise)

    with pytest.raises(AuthError, match="ghost"):
        session.resolve_session("ghost")


def test_resolve_session_requires_credentials(monkeypatch) -> None:
    class _NoCreds:
        def __init__(self, **kwargs):
            self.kwargs = kwargs

        def get_credentials(self):
            return None

    monkeypatch.setattr(session.boto3, "Session", _NoCreds)

    with pytest.raises(AuthError, match="No AWS credentials"):
        session.resolve_session(None)


def test_resolve_session_uses_bootstrap_region(monkeypatch) -> None:
    class _Session:
        def __init__(self, **kwargs):
            self.kwargs = kwargs

        def get_credentials(self):
            return object()

    monkeypatch.setattr(session.boto3, "Session", _Session)

    ctx = session.resolve_session("audit", "eu-central-1")

    assert ctx.region == "eu-central-1"
    assert ctx.profile == "audit"
    assert ctx.session.kwargs == {"profile_name": "audit", "region_name": "eu-central-1"}


def test_make_client_sets_pool_size() -> None:
    created = {}

    class _Session:
        def client(self, service_name, **kwargs):
            created.update(kwargs, service=service_name)
            return object()

    ctx = AuthContext(session=_Session(), profile=None, region="us-east-1")
    session.make_client("ec2", ctx, region="eu-west-1", connection_pool_size=20)

    assert created["service"] == "ec2"
    assert created["region_name"] == "eu-west-1"
    assert created["config"].max_pool_connections == 20


def test_get_account_id_maps_errors(monkeypatch) -> None:
    class _Sts:
        def get_caller_identity(self):
            raise _client_error("GetCallerIdentity")

    monkeypatch.setattr(identity, "get_sts_client", lambda ctx: _Sts())

    with pytest.raises(AwsClientError, match="caller identity"):
        identity.get_account_id(_ctx())


def test_get_account_id_returns_account(monkeypatch) -> None:
    class _Sts:
        def get_caller_identity(self):
            return {"Account": "123456789012", "Arn": "arn:aws:iam::123456789012:user/x"}

    monkeypatch.setattr(identity, "get_sts_client", lambda ctx: _Sts())

    assert identity.get_account_id(_ctx()) == "123456789012"


def test_get_enabled_regions_sorted_and_unique(monkeypatch) -> None:
    class _Ec2:
        def describe_regions(self):
            return {"Regions": [{"RegionName": "us-west-2"}, {"RegionName": "eu-west-1"}, {"RegionName": "us-west-2"}]}

    monkeypatch.setattr(regions, "get_ec2_client", lambda ctx: _Ec2())

    assert regions.get_enabled_regions(_ctx()) == ["eu-west-1", "us-west-2"]


def test_get_enabled_regions_maps_errors(monkeypatch) -> None:
    class _Ec2:
        def describe_regions(self):
            raise _client_error("DescribeRegions")

    monkeypatch.setattr(regions, "get_ec2_client", lambda ctx: _Ec2())

    with pytest.raises(AwsClientError, match="listing regions"):
        regions.get_enabled_regions(_ctx())
