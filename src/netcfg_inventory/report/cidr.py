from __future__ import annotations

from typing import Dict, List, Set, Tuple, TypedDict

from ..dataset.adapter import DatasetAdapter
from ..dataset.model import MultiAccountDataset

VPC_CIDR_HEADER: Tuple[str, ...] = ("Account ID", "Region", "VPC CIDR", "VPC ID", "Name")
VPC_CIDR_SUBNET_HEADER: Tuple[str, ...] = ("Subnet CIDR", "Subnet ID")
GLOBAL_VPC_CIDR_HEADER: Tuple[str, ...] = ("VPC CIDR",)


class GlobalVpcCidrResult(TypedDict):
    vpcCidrBlocks: List[str]


class SubnetCidrRecord(TypedDict):
    subnetCidrBlock: str
    name: str


class _VpcCidrRecordBase(TypedDict):
    vpcCidrBlock: str
    name: str


class VpcCidrRecord(_VpcCidrRecordBase, total=False):
    subnets: Dict[str, SubnetCidrRecord]


class RegionCidrRecord(TypedDict):
    vpcs: Dict[str, VpcCidrRecord]


class AccountCidrRecord(TypedDict):
    regions: Dict[str, RegionCidrRecord]


class VpcCidrResult(TypedDict):
    accounts: Dict[str, AccountCidrRecord]


def global_vpc_cidrs(
    dataset: MultiAccountDataset,
    *,
    include_default_vpcs: bool = False,
    duplicates_only: bool = False,
) -> GlobalVpcCidrResult:
    """
    Flat, sorted list of distinct VPC CIDR blocks across every account and region.
    With duplicates_only, only blocks seen on more than one VPC are returned.
    Default VPCs are skipped unless include_default_vpcs is set.
    """
    seen: Set[str] = set()
    duplicates: Set[str] = set()

    for account in DatasetAdapter(dataset).accounts:
        for region in account.regions:
            for vpc in region.vpcs:
                if vpc.is_default and not include_default_vpcs:
                    continue
                if vpc.cidr_block in seen:
                    duplicates.add(vpc.cidr_block)
                seen.add(vpc.cidr_block)

    return {"vpcCidrBlocks": sorted(duplicates if duplicates_only else seen)}


def vpc_cidr_report(
    dataset: MultiAccountDataset,
    *,
    include_subnets: bool = False,
    include_default_vpcs: bool = False,
) -> VpcCidrResult:
    """
    Nested account -> region -> VPC report of CIDR block and Name tag,
    optionally with each VPC's subnets keyed by subnet id.
    """
    result: VpcCidrResult = {"accounts": {}}

    for account in DatasetAdapter(dataset).accounts:
        this_account: AccountCidrRecord = {"regions": {}}
        result["accounts"][account.account_id] = this_account

        for region in account.regions:
            this_region: RegionCidrRecord = {"vpcs": {}}
            this_account["regions"][region.region_name] = this_region

            for vpc in region.vpcs:
                if vpc.is_default and not include_default_vpcs:
                    continue

                record: VpcCidrRecord = {"vpcCidrBlock": vpc.cidr_block, "name": vpc.name}
                if include_subnets:
                    record["subnets"] = {
                        subnet.subnet_id: {"subnetCidrBlock": subnet.cidr_block, "name": subnet.name}
                        for subnet in vpc.subnets
                    }
                this_region["vpcs"][vpc.vpc_id] = record

    return result


def vpc_cidr_rows(result: VpcCidrResult, *, include_subnets: bool = False) -> List[List[str]]:
    """
    Flatten a VPC CIDR report into a header row plus one row per VPC and,
    when include_subnets is set, one extra row per subnet.
    """
    header = list(VPC_CIDR_HEADER)
    if include_subnets:
        header.extend(VPC_CIDR_SUBNET_HEADER)
    rows: List[List[str]] = [header]

    for account_id, account in result["accounts"].items():
        for region_name, region in account["regions"].items():
            for vpc_id, vpc in region["vpcs"].items():
                vpc_row = [account_id, region_name, vpc["vpcCidrBlock"], vpc_id, vpc["name"]]
                if include_subnets:
                    vpc_row.extend(["", ""])
                rows.append(vpc_row)

                if not include_subnets:
                    continue
                for subnet_id, subnet in (vpc.get("subnets") or {}).items():
                    rows.append(
                        [
                            account_id,
                            region_name,
                            vpc["vpcCidrBlock"],
                            vpc_id,
                            subnet["name"],
                            subnet["subnetCidrBlock"],
                            subnet_id,
                        ]
                    )
    return rows


def global_vpc_cidr_rows(result: GlobalVpcCidrResult) -> List[List[str]]:
    rows: List[List[str]] = [list(GLOBAL_VPC_CIDR_HEADER)]
    rows.extend([cidr] for cidr in result["vpcCidrBlocks"])
    return rows
