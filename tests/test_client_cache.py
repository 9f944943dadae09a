from __future__ import annotations

import types

from netcfg_inventory.aws import clients
from netcfg_inventory.aws.session import AuthContext


def _ctx() -> AuthContext:
    return AuthContext(session=types.SimpleNamespace(), profile=None, region="us-east-1")


def test_client_cache_reuses_by_service_and_region(monkeypatch) -> None:
    monkeypatch.delenv("NETCFG_INV_DISABLE_CLIENT_CACHE", raising=False)
    calls = []

    def _fake_make_client(service_name, ctx, region=None, connection_pool_size=None):
        calls.append((service_name, region, connection_pool_size))
        return object()

    monkeypatch.setattr(clients, "make_client", _fake_make_client)
    clients.clear_client_cache()
    ctx = _ctx()

    c1 = clients.get_ec2_client(ctx, region="eu-west-1")
    c2 = clients.get_ec2_client(ctx, region="eu-west-1")
    c3 = clients.get_ec2_client(ctx, region="us-west-2")
    sts = clients.get_sts_client(ctx)

    assert c1 is c2
    assert c1 is not c3
    assert sts is not clients.get_ec2_client(ctx)
    assert calls == [
        ("ec2", "eu-west-1", None),
        ("ec2", "us-west-2", None),
        ("sts", "us-east-1", None),
        ("ec2", "us-east-1", None),
    ]
    clients.clear_client_cache()


def test_client_pool_size_passed_to_make_client(monkeypatch) -> None:
    monkeypatch.delenv("NETCFG_INV_DISABLE_CLIENT_CACHE", raising=False)
    calls = []

    def _fake_make_client(service_name, ctx, region=None, connection_pool_size=None):
        calls.append(connection_pool_size)
        return object()

    monkeypatch.setattr(clients, "make_client", _fake_make_client)
    clients.clear_client_cache()
    clients.set_client_connection_pool_size(25)

    clients.get_ec2_client(_ctx(), region="eu-west-1")

    assert calls == [25]
    clients.set_client_connection_pool_size(None)
    clients.clear_client_cache()


def test_disabled_cache_builds_new_clients(monkeypatch) -> None:
    monkeypatch.setenv("NETCFG_INV_DISABLE_CLIENT_CACHE", "1")
    monkeypatch.setattr(clients, "make_client", lambda *args, **kwargs: object())
    ctx = _ctx()

    assert clients.get_ec2_client(ctx) is not clients.get_ec2_client(ctx)
