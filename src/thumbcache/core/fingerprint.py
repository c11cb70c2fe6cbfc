"""Cache keys for rendered thumbnails.

A thumbnail is named after what produced it:

    {md5(source)}_{md5(history)}.{format}

where `history` is a canonical text encoding of every operation in call
order followed by a save record (driver, format, quality). The encoding
only uses operation names, field names and JSON scalars, so a given chain
maps to the same file name on every platform and Python version.
"""

import hashlib
import json
from collections.abc import Iterable
from dataclasses import dataclass

from thumbcache.core.operations import Operation

THUMB_NAME_PATTERN = r"^[0-9a-f]{32}_[0-9a-f]{32}\.[a-z0-9]+$"


@dataclass(frozen=True)
class SaveRecord:
    """The final history entry: how the image is encoded."""

    driver: str
    format: str
    quality: int

    def encode(self) -> str:
        return _encode_record("save", (("driver", self.driver), ("format", self.format), ("quality", self.quality)))


def _encode_record(name: str, items: Iterable[tuple[str, object]]) -> str:
    body = ",".join(f"{key}={json.dumps(value)}" for key, value in items)
    return f"{name}({body})"


def encode_operation(operation: Operation) -> str:
    """`crop(width=200,height=200,x=0,y=0)` style text for one operation."""
    return _encode_record(operation.kind.value, operation.params().items())


def encode_history(operations: Iterable[Operation], save: SaveRecord | None = None) -> str:
    """Canonical, order-preserving text for a whole argument history."""
    records = [encode_operation(op) for op in operations]
    if save is not None:
        records.append(save.encode())
    return ";".join(records)


def md5(text: str) -> str:
    # Content addressing only, not a security boundary
    return hashlib.md5(text.encode("utf-8")).hexdigest()  # noqa: S324


def source_key(source: str) -> str:
    """Prefix shared by every thumbnail of `source`."""
    return md5(source)


def fingerprint(source: str, operations: Iterable[Operation], save: SaveRecord) -> str:
    """`{md5(source)}_{md5(history)}`, the cache key without extension."""
    return f"{source_key(source)}_{md5(encode_history(operations, save))}"


def target_name(source: str, operations: Iterable[Operation], save: SaveRecord) -> str:
    """File name a thumbnail is cached under."""
    return f"{fingerprint(source, operations, save)}.{save.format}"
