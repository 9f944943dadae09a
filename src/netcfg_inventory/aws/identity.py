from __future__ import annotations

from ..util.errors import map_aws_error
from .clients import get_sts_client
from .session import AuthContext


def get_account_id(ctx: AuthContext) -> str:
    """
    Return the account id of the calling identity (STS GetCallerIdentity).
    """
    sts = get_sts_client(ctx)
    try:
        resp = sts.get_caller_identity()
    except Exception as e:
        mapped = map_aws_error(e, "AWS error while resolving caller identity")
        if mapped:
            raise mapped from e
        raise
    return str(resp["Account"])
