"""Immutable tensor shape with known dimension sizes."""

__docformat__ = "restructuredtext"
__all__ = ["FixedShape"]

import operator
from collections.abc import Iterator

import numpy as np

from tensordims.errors import InvalidShape
from tensordims.utils import check_index, format_dims, product


def _as_size(size) -> int:
    try:
        return operator.index(size)
    except TypeError:
        raise InvalidShape(f"Dimension size must be an integer, got {size!r}") from None


class FixedShape:
    """
    Ordered list of non-negative dimension sizes, rank at least 1.

    A shape is never mutated in place; a changed shape is a new instance.
    """

    __slots__ = ("_dims",)

    def __init__(self, *sizes: int):
        dims = tuple(_as_size(size) for size in sizes)
        if any(size < 0 for size in dims):
            raise InvalidShape(f"Dimension sizes must be non-negative, got {list(dims)}")
        # Empty construction is the rank-1, size-0 default
        self._dims = dims or (0,)

    @classmethod
    def from_array(cls, array) -> "FixedShape":
        """
        Describe the layout of an existing array.

        :param array: Anything numpy can view as an array
        :return: Shape of the array, ``[1]`` for scalars
        """
        shape = np.shape(array)
        return cls(*shape) if shape else cls(1)

    @staticmethod
    def get_backward_compatible_dims(count: int, column_hint: int | None) -> "FixedShape":
        """
        Reconstruct a shape for legacy data stored as a flat count.

        :param count: Number of elements
        :param column_hint: Suggested number of columns, ignored when it does not
            divide count or is not positive
        :return: ``[count // column_hint, column_hint]`` or ``[count]``
        """
        if count == 0:
            return FixedShape(0)
        if column_hint is not None and column_hint > 0 and count % column_hint == 0:
            return FixedShape(count // column_hint, column_hint)
        return FixedShape(count)

    @property
    def entries(self) -> tuple[int, ...]:
        return self._dims

    @property
    def rank(self) -> int:
        return len(self._dims)

    @property
    def element_count(self) -> int:
        return product(self._dims)

    def as_tuple(self) -> tuple[int, ...]:
        return self._dims

    def print(self, hide_trailing_ones: bool = False, print_total_size: bool = False) -> str:
        """
        Render the shape for diagnostics, e.g. ``5×3×2 [30]``.

        :param hide_trailing_ones: Whether to omit trailing dimensions of size 1
        :param print_total_size: Whether to append the element count
        :return: Rendered shape
        """
        return format_dims(
            self._dims,
            hide_trailing_ones=hide_trailing_ones,
            total_size=self.element_count if print_total_size else None,
        )

    def __getitem__(self, index: int) -> int:
        return self._dims[check_index(index, self.rank)]

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __len__(self) -> int:
        return self.rank

    def __eq__(self, other) -> bool:
        if not isinstance(other, FixedShape):
            return NotImplemented
        return self._dims == other._dims

    def __hash__(self) -> int:
        return hash(self._dims)

    def __str__(self) -> str:
        return self.print()

    def __repr__(self) -> str:
        return f"FixedShape{self._dims}" if self.rank > 1 else f"FixedShape({self._dims[0]})"
