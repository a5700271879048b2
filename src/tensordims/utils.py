"""Shared helpers for shape arithmetic, parsing and printing."""

__docformat__ = "restructuredtext"
__all__ = [
    "DIM_SEPARATOR",
    "FREE_DIM",
    "FREE_PLACEHOLDERS",
    "MISMATCH_MARKER",
    "check_index",
    "format_dims",
    "parse_dims",
    "product",
]

import math
import operator
import re
from collections.abc import Iterable, Sequence

from tensordims.errors import IndexOutOfRange

FREE_DIM = -1
FREE_PLACEHOLDERS = ("*", "?", "_", "-1")
DIM_SEPARATOR = "×"
MISMATCH_MARKER = " (!)"

_TOKEN_SPLIT = re.compile(rf"[,{DIM_SEPARATOR}]")
_TOTAL_SIZE_SUFFIX = re.compile(r"\s*\[\s*(\d+|\?)\s*\]\s*$")
_SIZE_TOKEN = re.compile(r"[0-9]+")
_NEGATIVE_TOKEN = re.compile(r"-[0-9]+")


def product(dims: Iterable[int]) -> int:
    """
    Multiply dimension sizes.

    :param dims: Dimension sizes
    :return: Product of the sizes, 1 for an empty sequence
    """
    return math.prod(dims)


def check_index(index: int, rank: int) -> int:
    """
    Normalize a dimension index against a rank.

    :param index: Requested index, negative values count from the end
    :param rank: Number of dimensions
    :return: Non-negative index
    """
    try:
        index = operator.index(index)
    except TypeError:
        raise TypeError(f"Dimension index must be an int, got {type(index).__name__}") from None
    if index < -rank or index >= rank:
        raise IndexOutOfRange(f"Index {index} is out of range for rank {rank}")
    return index + rank if index < 0 else index


def format_dims(
    dims: Sequence[int | str],
    hide_trailing_ones: bool = False,
    total_size: int | str | None = None,
) -> str:
    """
    Render dimensions joined by the multiplication glyph.

    Integer entries are literal sizes. String entries are already rendered
    free dimensions; they are never trimmed as trailing ones.

    :param dims: Entries to render
    :param hide_trailing_ones: Whether to drop trailing literal 1 entries
    :param total_size: Appended as `` [N]`` when not None
    :return: Rendered shape
    """
    items = list(dims)
    if hide_trailing_ones:
        while len(items) > 1 and isinstance(items[-1], int) and items[-1] == 1:
            items.pop()

    text = DIM_SEPARATOR.join(str(item) for item in items)
    if total_size is not None:
        text += f" [{total_size}]"
    return text


def _parse_token(token: str) -> int:
    if token in FREE_PLACEHOLDERS:
        return FREE_DIM
    if not token:
        raise ValueError("Empty dimension")
    if _NEGATIVE_TOKEN.fullmatch(token):
        raise ValueError(f"Negative dimension {token} is not allowed")
    if not _SIZE_TOKEN.fullmatch(token):
        raise ValueError(f"Invalid dimension '{token}'")
    return int(token)


def parse_dims(text: str) -> list[int]:
    """
    Parse a human-entered shape such as ``"2, *, 3"``.

    Tokens are separated by commas or by the print glyph. A trailing total-size
    suffix and the mismatch marker produced by printing are ignored.

    :param text: Shape text
    :return: Parsed entries, free placeholders as FREE_DIM
    """
    text = text.strip()
    if text.endswith(MISMATCH_MARKER.strip()):
        text = text[: -len(MISMATCH_MARKER.strip())].rstrip()
    text = _TOTAL_SIZE_SUFFIX.sub("", text)
    if not text:
        raise ValueError("No dimensions given")

    dims = [_parse_token(token.strip()) for token in _TOKEN_SPLIT.split(text)]

    if dims.count(FREE_DIM) > 1:
        raise ValueError("Multiple free dimensions are not allowed")

    return dims
