"""Dimension arithmetic for the image operations.

Everything here works on plain (width, height) tuples so the sizing rules
can be tested without decoding a single pixel. A dimension of None means
"not requested": resize leaves it unconstrained, canvas resize keeps the
source's.
"""

import math

Size = tuple[int, int]
Point = tuple[int, int]

# anchor -> (horizontal, vertical) factor: 0 = start, 1 = middle, 2 = end
_ANCHOR_FACTORS = {
    "top-left": (0, 0),
    "top": (1, 0),
    "top-right": (2, 0),
    "left": (0, 1),
    "center": (1, 1),
    "right": (2, 1),
    "bottom-left": (0, 2),
    "bottom": (1, 2),
    "bottom-right": (2, 2),
}

ANCHORS = tuple(_ANCHOR_FACTORS)


def _along(length: int, factor: int) -> int:
    if factor == 0:
        return 0
    if factor == 1:
        return int(math.ceil(length / 2))
    return length


def pivot(size: Size, anchor: str) -> Point:
    """Return the point of a box of `size` that `anchor` names."""
    try:
        fx, fy = _ANCHOR_FACTORS[anchor]
    except KeyError:
        raise ValueError(f"Unknown anchor: {anchor!r}") from None
    return _along(size[0], fx), _along(size[1], fy)


def aligned_offset(outer: Size, inner: Size, anchor: str) -> Point:
    """Top-left of `inner` inside `outer` when both are aligned on `anchor`.

    Negative values mean `inner` overhangs `outer` on that side.
    """
    ox, oy = pivot(outer, anchor)
    ix, iy = pivot(inner, anchor)
    return ox - ix, oy - iy


def _scale(value: float) -> int:
    # Half away from zero, never below one pixel
    return max(1, int(math.floor(value + 0.5)))


def resize_size(
    source: Size,
    width: int | None,
    height: int | None,
    aspect_ratio: bool = True,
    upsize: bool = True,
) -> Size:
    """Compute the output size of a constrained resize.

    A width-dominant candidate (height applied first, then width) and a
    height-dominant candidate (width first, then height) are computed; the
    height-dominant one wins when it fits inside the requested box.
    With `upsize`, no dimension may grow past the source's.
    """
    if width is None and height is None:
        raise ValueError("Width or height needs to be defined")

    src_w, src_h = source
    ratio = src_w / src_h

    def apply_width(size: Size) -> Size:
        w, h = size
        if width is None:
            return size
        w = min(width, src_w) if upsize else width
        if aspect_ratio:
            h = _scale(w / ratio)
            if upsize:
                h = min(h, src_h)
        return w, h

    def apply_height(size: Size) -> Size:
        w, h = size
        if height is None:
            return size
        h = min(height, src_h) if upsize else height
        if aspect_ratio:
            w = _scale(h * ratio)
            if upsize:
                w = min(w, src_w)
        return w, h

    dominant_w = apply_width(apply_height(source))
    dominant_h = apply_height(apply_width(source))

    # With a single driving side both orders agree
    if width is None or height is None:
        return dominant_h
    if dominant_h[0] <= width and dominant_h[1] <= height:
        return dominant_h
    return dominant_w


def fit_crop_box(source: Size, width: int, height: int, position: str = "center") -> tuple[int, int, int, int]:
    """Largest region of `source` with the aspect ratio of width x height.

    Returns a Pillow-style (left, top, right, bottom) box aligned on `position`.
    """
    src_w, src_h = source
    target_ratio = width / height

    crop_w, crop_h = src_w, _scale(src_w / target_ratio)
    if crop_h > src_h:
        crop_w, crop_h = _scale(src_h * target_ratio), src_h

    left, top = aligned_offset(source, (crop_w, crop_h), position)
    return left, top, left + crop_w, top + crop_h


def fit_size(crop: Size, width: int, height: int, upsize: bool = True) -> Size:
    """Final size of a fit once the cropped region is scaled to width x height."""
    if upsize:
        return min(width, crop[0]), min(height, crop[1])
    return width, height


def canvas_size(source: Size, width: int | None, height: int | None, relative: bool = False) -> Size:
    """Output size of a canvas resize. Unset dimensions keep the source's."""
    src_w, src_h = source
    if relative:
        new_w = src_w + (width or 0)
        new_h = src_h + (height or 0)
    else:
        new_w = src_w if width is None else width
        new_h = src_h if height is None else height

    # Non-positive results count back from the source size
    if new_w <= 0:
        new_w += src_w
    if new_h <= 0:
        new_h += src_h
    return new_w, new_h
