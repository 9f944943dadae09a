from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from ..util.errors import DatasetError, DatasetNotFoundError
from .model import MultiAccountDataset

PathLike = Union[str, Path]


def dataset_exists(path: PathLike) -> bool:
    return Path(path).is_file()


def load_dataset(path: PathLike) -> MultiAccountDataset:
    """
    Load the whole multi-account dataset into memory.
    """
    p = Path(path)
    if not p.is_file():
        raise DatasetNotFoundError(f"Dataset file not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DatasetError(f"Failed to read dataset file {p}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("accounts"), dict):
        raise DatasetError(f"Dataset file {p} must contain an 'accounts' object")
    return data  # type: ignore[return-value]


def save_dataset(path: PathLike, dataset: MultiAccountDataset) -> None:
    """
    Persist the whole dataset, replacing any existing file.

    The document is written to a temporary file in the target directory and
    renamed over the destination, so readers see either the old or the new file.
    """
    p = Path(path)
    directory = p.parent if str(p.parent) else Path(".")
    directory.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(dataset, f, ensure_ascii=False, separators=(",", ":"))
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, p)
    except (OSError, TypeError, ValueError) as e:
        _discard(tmp_name)
        raise DatasetError(f"Failed to write dataset file {p}: {e}") from e
    except BaseException:
        _discard(tmp_name)
        raise


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass
