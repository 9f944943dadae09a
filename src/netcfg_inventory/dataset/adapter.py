from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .model import AccountRecord, MultiAccountDataset, RawRecord, RegionSnapshot


@dataclass(frozen=True)
class Tag:
    key: str
    value: str


def _tags_of(record: Mapping[str, Any]) -> Tuple[Tag, ...]:
    raw = record.get("Tags") or []
    return tuple(Tag(key=str(t.get("Key") or ""), value=str(t.get("Value") or "")) for t in raw)


def find_tag(tags: Iterable[Tag], key: str) -> Optional[Tag]:
    """
    Return the tag with the given key when exactly one such tag exists.
    Zero or several matches yield None.
    """
    matches = [t for t in tags if t.key == key]
    return matches[0] if len(matches) == 1 else None


class _Tagged:
    tags: Tuple[Tag, ...]

    def get_tag(self, key: str) -> Optional[Tag]:
        return find_tag(self.tags, key)

    @property
    def name(self) -> str:
        tag = self.get_tag("Name")
        return tag.value if tag is not None else ""


@dataclass(frozen=True)
class SubnetView(_Tagged):
    subnet_id: str
    cidr_block: str
    vpc_id: str
    tags: Tuple[Tag, ...] = ()

    @classmethod
    def from_raw(cls, raw: RawRecord) -> SubnetView:
        return cls(
            subnet_id=str(raw.get("SubnetId", "")),
            cidr_block=str(raw.get("CidrBlock", "")),
            vpc_id=str(raw.get("VpcId", "")),
            tags=_tags_of(raw),
        )


@dataclass(frozen=True)
class VpcView(_Tagged):
    vpc_id: str
    cidr_block: str
    is_default: bool
    tags: Tuple[Tag, ...] = ()
    subnets: Tuple[SubnetView, ...] = ()

    @classmethod
    def from_raw(cls, raw: RawRecord, subnets: Iterable[SubnetView] = ()) -> VpcView:
        return cls(
            vpc_id=str(raw.get("VpcId", "")),
            cidr_block=str(raw.get("CidrBlock", "")),
            is_default=bool(raw.get("IsDefault", False)),
            tags=_tags_of(raw),
            subnets=tuple(subnets),
        )


@dataclass
class RegionView:
    region_name: str
    snapshot: RegionSnapshot
    _subnets_by_vpc: Optional[Dict[str, List[SubnetView]]] = field(default=None, init=False, repr=False, compare=False)

    def _subnet_index(self) -> Dict[str, List[SubnetView]]:
        if self._subnets_by_vpc is None:
            index: Dict[str, List[SubnetView]] = {}
            for raw in self.snapshot.get("subnets") or []:
                subnet = SubnetView.from_raw(raw)
                index.setdefault(subnet.vpc_id, []).append(subnet)
            self._subnets_by_vpc = index
        return self._subnets_by_vpc

    @property
    def vpcs(self) -> List[VpcView]:
        index = self._subnet_index()
        out: List[VpcView] = []
        for raw in self.snapshot.get("vpcs") or []:
            vpc_id = str(raw.get("VpcId", ""))
            out.append(VpcView.from_raw(raw, index.get(vpc_id, ())))
        return out


@dataclass
class AccountView:
    account_id: str
    record: AccountRecord

    @property
    def regions(self) -> List[RegionView]:
        regions = self.record.get("regions") or {}
        return [RegionView(name, snapshot) for name, snapshot in regions.items()]


class DatasetAdapter:
    """
    Read-only navigation over a MultiAccountDataset:
    account -> region -> VPC -> subnet, in the dataset's key order.
    """

    def __init__(self, dataset: MultiAccountDataset) -> None:
        self._dataset = dataset

    @property
    def accounts(self) -> List[AccountView]:
        accounts = self._dataset.get("accounts") or {}
        return [AccountView(account_id, record) for account_id, record in accounts.items()]
