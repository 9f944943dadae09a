from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..dataset.model import (
    REGION_SNAPSHOT_KEYS,
    MultiAccountDataset,
    RegionSnapshot,
    empty_account,
    empty_dataset,
)
from ..dataset.store import dataset_exists, load_dataset, save_dataset
from ..logging import get_logger
from ..util.concurrency import parallel_map_ordered
from .region import DEFAULT_WORKERS_RESOURCE, ResourceLister, collect_region

LOG = get_logger(__name__)

DEFAULT_WORKERS_REGION = 8


@dataclass(frozen=True)
class DownloadSummary:
    account_id: str
    regions: List[str]
    data_file: Path
    counts: Dict[str, int] = field(default_factory=dict)


def merge_account(
    dataset: MultiAccountDataset,
    account_id: str,
    regions: Dict[str, RegionSnapshot],
) -> MultiAccountDataset:
    """
    Replace the whole region map of account_id with regions.
    Other accounts' entries are left untouched (same objects).
    """
    account = empty_account()
    for name, snapshot in regions.items():
        account["regions"][name] = snapshot
    dataset["accounts"][account_id] = account
    return dataset


def count_resources(regions: Dict[str, RegionSnapshot]) -> Dict[str, int]:
    counts = {key: 0 for key in REGION_SNAPSHOT_KEYS}
    for snapshot in regions.values():
        for key in REGION_SNAPSHOT_KEYS:
            counts[key] += len(snapshot.get(key) or [])  # type: ignore[misc]
    return counts


def download_account(
    data_file: Union[str, Path],
    *,
    resolve_account_id: Callable[[], str],
    list_regions: Callable[[], Sequence[str]],
    make_lister: Callable[[str], ResourceLister],
    workers_region: int = DEFAULT_WORKERS_REGION,
    workers_resource: int = DEFAULT_WORKERS_RESOURCE,
    on_region_done: Optional[Callable[[str], None]] = None,
) -> DownloadSummary:
    """
    Collect every region of the calling account and fold the result into the
    dataset at data_file, replacing only that account's region map.

    When data_file does not exist yet, an empty placeholder for the account is
    saved before collection starts. A failure in any region aborts the run
    before the final save, leaving the last persisted file in place.
    """
    path = Path(data_file)

    account_id = resolve_account_id()
    LOG.info("Running download for account %s", account_id, extra={"account_id": account_id})

    regions = list(dict.fromkeys(r for r in list_regions() if r))
    LOG.info("Regions in scope: %d", len(regions), extra={"regions": regions})

    dataset: MultiAccountDataset
    if not dataset_exists(path):
        dataset = empty_dataset()
        dataset["accounts"][account_id] = empty_account()
        save_dataset(path, dataset)
        LOG.info("Created dataset file %s", path)
    else:
        dataset = load_dataset(path)

    def _collect(region: str) -> Tuple[str, RegionSnapshot]:
        snapshot = collect_region(make_lister(region), max_workers=workers_resource)
        if on_region_done is not None:
            on_region_done(region)
        return region, snapshot

    collected: Dict[str, RegionSnapshot] = {}
    for region, snapshot in parallel_map_ordered(_collect, regions, max_workers=workers_region):
        collected[region] = snapshot

    merge_account(dataset, account_id, collected)
    save_dataset(path, dataset)

    counts = count_resources(collected)
    LOG.info(
        "Download complete for account %s",
        account_id,
        extra={"account_id": account_id, "counts": counts},
    )
    return DownloadSummary(account_id=account_id, regions=regions, data_file=path, counts=counts)
