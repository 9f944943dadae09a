from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from netcfg_inventory.collect.kinds import RESOURCE_KINDS
from netcfg_inventory.collect.region import Ec2ResourceLister, collect_region, list_resource_kind
from netcfg_inventory.dataset.model import REGION_SNAPSHOT_KEYS
from netcfg_inventory.util.errors import AwsClientError
from netcfg_inventory.util.serialization import REDACTED_VALUE

KINDS = {kind.key: kind for kind in RESOURCE_KINDS}


class FakeLister:
    """Serves canned pages per kind: {key: {cursor: (items, next)}}."""

    def __init__(self, region, pages=None, fail_on=None):
        self.region = region
        self._pages = pages or {}
        self._fail_on = fail_on
        self._lock = threading.Lock()
        self.calls = []

    def list_page(self, kind, cursor):
        with self._lock:
            self.calls.append((kind.key, cursor))
        if kind.key == self._fail_on:
            raise AwsClientError(f"{kind.operation} failed")
        per_kind = self._pages.get(kind.key, {None: ([], None)})
        return per_kind[cursor]


def test_resource_kinds_match_snapshot_keys() -> None:
    assert tuple(k.key for k in RESOURCE_KINDS) == REGION_SNAPSHOT_KEYS
    single_call = {k.key for k in RESOURCE_KINDS if not k.paginated}
    assert single_call == {"vpcs", "vpnConnections", "vpnGateways"}


def test_collect_region_returns_all_thirteen_collections() -> None:
    lister = FakeLister(
        "eu-west-1",
        pages={
            "vpcs": {None: ([{"VpcId": "vpc-1"}], None)},
            "subnets": {
                None: ([{"SubnetId": "subnet-1"}], "t1"),
                "t1": ([], "t2"),
                "t2": ([{"SubnetId": "subnet-2"}], None),
            },
        },
    )

    snapshot = collect_region(lister, max_workers=4)

    assert set(snapshot.keys()) == set(REGION_SNAPSHOT_KEYS)
    assert snapshot["vpcs"] == [{"VpcId": "vpc-1"}]
    assert [s["SubnetId"] for s in snapshot["subnets"]] == ["subnet-1", "subnet-2"]
    assert snapshot["natGateways"] == []
    subnet_calls = [cursor for key, cursor in lister.calls if key == "subnets"]
    assert subnet_calls == [None, "t1", "t2"]


def test_single_call_kind_ignores_returned_cursor() -> None:
    lister = FakeLister("us-east-1", pages={"vpnGateways": {None: ([{"VpnGatewayId": "vgw-1"}], "ignored")}})

    items = list_resource_kind(lister, KINDS["vpnGateways"])

    assert items == [{"VpnGatewayId": "vgw-1"}]
    assert lister.calls == [("vpnGateways", None)]


def test_collect_region_fails_when_any_listing_fails() -> None:
    lister = FakeLister("us-east-1", fail_on="networkAcls")

    with pytest.raises(AwsClientError, match="describe_network_acls"):
        collect_region(lister)


class _FakeEc2:
    def __init__(self):
        self.calls = []

    def describe_subnets(self, **kwargs):
        self.calls.append(("describe_subnets", kwargs))
        if "NextToken" not in kwargs:
            return {"Subnets": [{"SubnetId": "subnet-a"}], "NextToken": "tok"}
        return {"Subnets": [{"SubnetId": "subnet-b"}]}

    def describe_vpn_connections(self, **kwargs):
        self.calls.append(("describe_vpn_connections", kwargs))
        return {
            "VpnConnections": [
                {
                    "VpnConnectionId": "vpn-1",
                    "CustomerGatewayConfiguration": "<xml>psk</xml>",
                    "Options": {"TunnelOptions": [{"OutsideIpAddress": "1.2.3.4", "PreSharedKey": "abc"}]},
                    "VgwTelemetry": [
                        {"LastStatusChange": datetime(2024, 1, 1, tzinfo=timezone.utc), "Status": "UP"}
                    ],
                }
            ]
        }

    def describe_nat_gateways(self, **kwargs):
        raise ClientError(
            {"Error": {"Code": "UnauthorizedOperation", "Message": "denied"}},
            "DescribeNatGateways",
        )


def test_ec2_lister_passes_next_token_only_when_present() -> None:
    ec2 = _FakeEc2()
    lister = Ec2ResourceLister(ec2, "ap-south-1")

    items = list_resource_kind(lister, KINDS["subnets"])

    assert [i["SubnetId"] for i in items] == ["subnet-a", "subnet-b"]
    assert ec2.calls == [("describe_subnets", {}), ("describe_subnets", {"NextToken": "tok"})]


def test_ec2_lister_sanitizes_and_redacts_records() -> None:
    lister = Ec2ResourceLister(_FakeEc2(), "ap-south-1")

    items, cursor = lister.list_page(KINDS["vpnConnections"], None)

    assert cursor is None
    vpn = items[0]
    assert vpn["CustomerGatewayConfiguration"] == REDACTED_VALUE
    assert vpn["Options"]["TunnelOptions"][0]["PreSharedKey"] == REDACTED_VALUE
    assert vpn["Options"]["TunnelOptions"][0]["OutsideIpAddress"] == "1.2.3.4"
    assert vpn["VgwTelemetry"][0]["LastStatusChange"] == "2024-01-01T00:00:00+00:00"


def test_ec2_lister_wraps_client_errors() -> None:
    lister = Ec2ResourceLister(_FakeEc2(), "ap-south-1")

    with pytest.raises(AwsClientError, match="describe_nat_gateways in ap-south-1"):
        lister.list_page(KINDS["natGateways"], None)
