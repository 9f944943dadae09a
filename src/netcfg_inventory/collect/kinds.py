from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ResourceKind:
    """
    One EC2 listing that feeds a RegionSnapshot collection.

    key: collection name inside the snapshot (e.g. "routeTables")
    operation: boto3 client method (e.g. "describe_route_tables")
    response_key: list field in the response (e.g. "RouteTables")
    paginated: True when the operation returns a NextToken cursor
    """

    key: str
    operation: str
    response_key: str
    paginated: bool = True


RESOURCE_KINDS: Tuple[ResourceKind, ...] = (
    ResourceKind("vpcs", "describe_vpcs", "Vpcs", paginated=False),
    ResourceKind("subnets", "describe_subnets", "Subnets"),
    ResourceKind("routeTables", "describe_route_tables", "RouteTables"),
    ResourceKind("natGateways", "describe_nat_gateways", "NatGateways"),
    ResourceKind("transitGateways", "describe_transit_gateways", "TransitGateways"),
    ResourceKind("internetGateways", "describe_internet_gateways", "InternetGateways"),
    ResourceKind("vpcEndpoints", "describe_vpc_endpoints", "VpcEndpoints"),
    ResourceKind("vpcPeeringConnections", "describe_vpc_peering_connections", "VpcPeeringConnections"),
    ResourceKind("vpnConnections", "describe_vpn_connections", "VpnConnections", paginated=False),
    ResourceKind("vpnGateways", "describe_vpn_gateways", "VpnGateways", paginated=False),
    ResourceKind("networkInterfaces", "describe_network_interfaces", "NetworkInterfaces"),
    ResourceKind("securityGroups", "describe_security_groups", "SecurityGroups"),
    ResourceKind("networkAcls", "describe_network_acls", "NetworkAcls"),
)
