"""Deferred image operations.

Each operation is a frozen record of one transformation call with every
parameter already resolved (defaults filled in, values validated). The
pipeline keeps them in call order; nothing is executed until the cache
resolver renders a thumbnail and dispatches them one by one onto the
image driver.
"""

from dataclasses import astuple, dataclass, fields
from enum import Enum
from typing import Any


class OperationKind(Enum):
    """Operations a thumbnail can be built from."""

    CROP = "crop"
    FIT = "fit"
    RESIZE = "resize"
    RESIZE_CANVAS = "resizeCanvas"


@dataclass(frozen=True)
class Operation:
    """Base for the operation variants. Field order is the encoding order."""

    kind = None  # set by each variant

    def params(self) -> dict[str, Any]:
        """Resolved parameters, in field order."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def values(self) -> tuple:
        return astuple(self)


@dataclass(frozen=True)
class Crop(Operation):
    kind = OperationKind.CROP

    width: int
    height: int
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class Fit(Operation):
    kind = OperationKind.FIT

    width: int
    height: int
    upsize: bool = True
    position: str = "center"


@dataclass(frozen=True)
class Resize(Operation):
    kind = OperationKind.RESIZE

    width: int | None
    height: int
    aspect_ratio: bool = True
    upsize: bool = True


@dataclass(frozen=True)
class ResizeCanvas(Operation):
    kind = OperationKind.RESIZE_CANVAS

    width: int | None
    height: int
    anchor: str = "center"
    relative: bool = False
    bgcolor: str = "#ffffff"


def apply_operation(processor, image, operation: Operation):
    """Run one operation against a decoded image and return the result."""
    if isinstance(operation, Crop):
        return processor.crop(image, operation.width, operation.height, operation.x, operation.y)
    if isinstance(operation, Fit):
        return processor.fit(image, operation.width, operation.height, operation.upsize, operation.position)
    if isinstance(operation, Resize):
        return processor.resize(
            image, operation.width, operation.height, operation.aspect_ratio, operation.upsize
        )
    if isinstance(operation, ResizeCanvas):
        return processor.resize_canvas(
            image,
            operation.width,
            operation.height,
            operation.anchor,
            operation.relative,
            operation.bgcolor,
        )
    raise TypeError(f"Unknown operation: {operation!r}")
