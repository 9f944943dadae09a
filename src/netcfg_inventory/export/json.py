from __future__ import annotations

import json
from typing import IO, Any


def write_json(result: Any, stream: IO[str]) -> None:
    """
    Write a report object as one compact JSON document followed by a newline.
    Key order follows the report's insertion order.
    """
    stream.write(json.dumps(result, ensure_ascii=False, separators=(",", ":")))
    stream.write("\n")
