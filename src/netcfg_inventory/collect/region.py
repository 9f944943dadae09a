from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..dataset.model import RawRecord, RegionSnapshot
from ..logging import get_logger
from ..util.concurrency import parallel_map_ordered
from ..util.errors import map_aws_error
from ..util.pagination import fetch_all
from ..util.serialization import sanitize_for_json
from .kinds import RESOURCE_KINDS, ResourceKind

LOG = get_logger(__name__)

DEFAULT_WORKERS_RESOURCE = len(RESOURCE_KINDS)


class ResourceLister(Protocol):
    """
    Issues one listing call for a resource kind in a single region.
    For single-call kinds the cursor is always None and the returned cursor is ignored.
    """

    region: str

    def list_page(self, kind: ResourceKind, cursor: Optional[str]) -> Tuple[Sequence[RawRecord], Optional[str]]:
        ...


class Ec2ResourceLister:
    """ResourceLister backed by a boto3 EC2 client bound to one region."""

    def __init__(self, ec2: Any, region: str) -> None:
        self._ec2 = ec2
        self.region = region

    def list_page(self, kind: ResourceKind, cursor: Optional[str]) -> Tuple[List[RawRecord], Optional[str]]:
        kwargs: Dict[str, Any] = {}
        if cursor:
            kwargs["NextToken"] = cursor
        try:
            resp = getattr(self._ec2, kind.operation)(**kwargs)
        except Exception as e:
            mapped = map_aws_error(e, f"AWS error during {kind.operation} in {self.region}")
            if mapped:
                raise mapped from e
            raise
        items = [sanitize_for_json(it) for it in resp.get(kind.response_key) or []]
        return items, resp.get("NextToken")


def list_resource_kind(lister: ResourceLister, kind: ResourceKind) -> List[RawRecord]:
    """
    Return every record of one kind. Paginated kinds follow the cursor until
    exhausted; single-call kinds issue exactly one call.
    """
    if kind.paginated:
        return fetch_all(lambda cursor: lister.list_page(kind, cursor))
    items, _ = lister.list_page(kind, None)
    return list(items)


def collect_region(
    lister: ResourceLister,
    *,
    max_workers: int = DEFAULT_WORKERS_RESOURCE,
) -> RegionSnapshot:
    """
    Collect all thirteen resource kinds for the lister's region concurrently.
    Any failing listing fails the whole region; no partial snapshot is returned.
    """
    region = lister.region
    LOG.debug("Beginning network configuration download", extra={"region": region})

    def _list(kind: ResourceKind) -> List[RawRecord]:
        return list_resource_kind(lister, kind)

    results = parallel_map_ordered(_list, RESOURCE_KINDS, max_workers=max_workers)
    snapshot: Dict[str, List[RawRecord]] = {kind.key: items for kind, items in zip(RESOURCE_KINDS, results)}

    LOG.debug(
        "Download complete",
        extra={"region": region, "counts": {k: len(v) for k, v in snapshot.items()}},
    )
    return snapshot  # type: ignore[return-value]
