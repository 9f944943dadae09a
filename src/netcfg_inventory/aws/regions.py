from __future__ import annotations

from typing import List

from ..util.errors import map_aws_error
from .clients import get_ec2_client
from .session import AuthContext


def get_enabled_regions(ctx: AuthContext) -> List[str]:
    """
    Return sorted list of region names enabled for the account (e.g., 'eu-west-1').
    """
    ec2 = get_ec2_client(ctx)
    try:
        resp = ec2.describe_regions()
    except Exception as e:
        mapped = map_aws_error(e, "AWS error while listing regions")
        if mapped:
            raise mapped from e
        raise
    regions = [r["RegionName"] for r in resp.get("Regions", []) if r.get("RegionName")]
    # Deterministic order
    return sorted(set(regions))
