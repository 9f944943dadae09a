from __future__ import annotations

from typing import Any, Dict, List, Tuple, TypedDict

RawRecord = Dict[str, Any]


class RawTag(TypedDict):
    Key: str
    Value: str


class RegionSnapshot(TypedDict):
    vpcs: List[RawRecord]
    subnets: List[RawRecord]
    routeTables: List[RawRecord]
    natGateways: List[RawRecord]
    transitGateways: List[RawRecord]
    internetGateways: List[RawRecord]
    vpcEndpoints: List[RawRecord]
    vpcPeeringConnections: List[RawRecord]
    vpnConnections: List[RawRecord]
    vpnGateways: List[RawRecord]
    networkInterfaces: List[RawRecord]
    securityGroups: List[RawRecord]
    networkAcls: List[RawRecord]


class AccountRecord(TypedDict):
    regions: Dict[str, RegionSnapshot]


class MultiAccountDataset(TypedDict):
    accounts: Dict[str, AccountRecord]


REGION_SNAPSHOT_KEYS: Tuple[str, ...] = (
    "vpcs",
    "subnets",
    "routeTables",
    "natGateways",
    "transitGateways",
    "internetGateways",
    "vpcEndpoints",
    "vpcPeeringConnections",
    "vpnConnections",
    "vpnGateways",
    "networkInterfaces",
    "securityGroups",
    "networkAcls",
)


def empty_dataset() -> MultiAccountDataset:
    return {"accounts": {}}


def empty_account() -> AccountRecord:
    return {"regions": {}}
