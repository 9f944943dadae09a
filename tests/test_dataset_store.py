from __future__ import annotations

import json

import pytest

from netcfg_inventory.dataset import store
from netcfg_inventory.dataset.model import REGION_SNAPSHOT_KEYS, empty_dataset
from netcfg_inventory.dataset.store import dataset_exists, load_dataset, save_dataset
from netcfg_inventory.util.errors import DatasetError, DatasetNotFoundError


def _sample_dataset():
    snapshot = {key: [] for key in REGION_SNAPSHOT_KEYS}
    snapshot["vpcs"] = [
        {
            "VpcId": "vpc-1",
            "CidrBlock": "10.0.0.0/16",
            "IsDefault": False,
            "Tags": [{"Key": "Name", "Value": "Prod ü"}, {"Key": "Name", "Value": "dup"}],
        }
    ]
    snapshot["subnets"] = [{"SubnetId": "subnet-1", "VpcId": "vpc-1", "CidrBlock": "10.0.1.0/24"}]
    return {"accounts": {"123": {"regions": {"us-east-1": snapshot}}, "456": {"regions": {}}}}


def test_save_then_load_round_trips(tmp_path) -> None:
    path = tmp_path / "data" / "dataset.json"
    dataset = _sample_dataset()

    save_dataset(path, dataset)

    assert dataset_exists(path)
    assert load_dataset(path) == dataset
    assert list(load_dataset(path)["accounts"]) == ["123", "456"]


def test_save_leaves_no_temp_files(tmp_path) -> None:
    path = tmp_path / "dataset.json"
    save_dataset(path, empty_dataset())
    save_dataset(path, _sample_dataset())

    assert [p.name for p in tmp_path.iterdir()] == ["dataset.json"]


def test_failed_save_keeps_previous_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "dataset.json"
    save_dataset(path, _sample_dataset())
    before = path.read_text(encoding="utf-8")

    def _broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(store.os, "replace", _broken_replace)

    with pytest.raises(DatasetError, match="disk full"):
        save_dataset(path, empty_dataset())

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["dataset.json"]


def test_unserializable_dataset_raises_dataset_error(tmp_path) -> None:
    with pytest.raises(DatasetError):
        save_dataset(tmp_path / "dataset.json", {"accounts": {"a": object()}})


def test_load_missing_file_raises_not_found(tmp_path) -> None:
    with pytest.raises(DatasetNotFoundError):
        load_dataset(tmp_path / "missing.json")


def test_load_rejects_malformed_documents(tmp_path) -> None:
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    wrong_shape = tmp_path / "shape.json"
    wrong_shape.write_text(json.dumps({"regions": {}}), encoding="utf-8")

    with pytest.raises(DatasetError):
        load_dataset(bad_json)
    with pytest.raises(DatasetError, match="accounts"):
        load_dataset(wrong_shape)
