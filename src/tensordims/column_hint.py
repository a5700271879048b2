"""Column-hint reshaping for buffer descriptors."""

__docformat__ = "restructuredtext"
__all__ = ["MemoryBlock", "reshape_for_column_hint"]

import operator

import numpy as np

from tensordims.errors import InvalidShape
from tensordims.fixed_shape import FixedShape
from tensordims.inferable_shape import InferableShape
from tensordims.utils import product


def _as_int(value, what: str) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidShape(f"{what} must be an integer, got {value!r}") from None


def _as_hint(value) -> int | None:
    return None if value is None else _as_int(value, "Column hint")


def _keep_structure(count: int, prior: FixedShape) -> FixedShape:
    """
    Fit a new element count into the prior shape where possible.

    :param count: New element count
    :param prior: Current shape
    :return: Prior shape, prior shape with a rescaled leading entry, or ``[count]``
    """
    if prior.element_count == count:
        return prior

    if prior.rank > 1:
        trailing = product(prior.entries[1:])
        if trailing != 0 and count % trailing == 0:
            return FixedShape(count // trailing, *prior.entries[1:])

    return FixedShape(count)


def reshape_for_column_hint(
    count: int, column_hint: int | None, prior: FixedShape | None = None
) -> FixedShape:
    """
    Decide the shape of a buffer from its element count and column hint.

    A usable hint collapses any prior shape to ``[count // column_hint,
    column_hint]``. An unset, non-positive or non-dividing hint is ignored.
    An empty buffer never takes the hint.

    :param count: Number of elements in the buffer
    :param column_hint: Suggested number of columns
    :param prior: Current shape of the buffer
    :return: New shape whose element count equals count
    """
    count = _as_int(count, "Element count")
    if count < 0:
        raise InvalidShape(f"Element count must be non-negative, got {count}")
    column_hint = _as_hint(column_hint)

    if column_hint is None or column_hint <= 0 or count == 0 or count % column_hint != 0:
        return _keep_structure(count, prior if prior is not None else FixedShape(count))

    return FixedShape(count // column_hint, column_hint)


class MemoryBlock:
    """
    Descriptor of a flat data buffer and its logical layout.

    The block owns one shape and a column hint. Assigning either the hint or the
    element count recomputes the shape from ``(count, column_hint, dims)``.

    :param dims: Initial shape, ``[0]`` when omitted
    :param column_hint: Suggested number of columns
    :param name: Block name used in verbose output
    :param verbose: Whether to print reshape decisions
    """

    def __init__(
        self,
        dims: FixedShape | InferableShape | None = None,
        column_hint: int | None = None,
        name: str = "",
        verbose: bool = False,
    ):
        self.name = name
        self.verbose = verbose
        self._column_hint = _as_hint(column_hint)
        self._dims = FixedShape()
        self.dims_are_custom = False
        if dims is not None:
            self.dims = dims

    @classmethod
    def from_legacy(cls, count: int, column_hint: int | None, name: str = "") -> "MemoryBlock":
        """
        Create a block for data saved as a flat count and a column hint.

        :param count: Number of elements
        :param column_hint: Saved column hint
        :param name: Block name
        :return: Block with a backward compatible shape
        """
        dims = FixedShape.get_backward_compatible_dims(count, column_hint)
        return cls(dims, column_hint=column_hint, name=name)

    @property
    def dims(self) -> FixedShape:
        return self._dims

    @dims.setter
    def dims(self, shape: FixedShape | InferableShape) -> None:
        if isinstance(shape, InferableShape):
            is_custom = shape.is_custom
            fixed = shape.to_fixed()
        elif isinstance(shape, FixedShape):
            is_custom = False
            fixed = shape
        else:
            raise TypeError(f"Expected a shape, got {type(shape).__name__}")

        self._reshape(fixed.element_count, fixed)
        self.dims_are_custom = is_custom

    @property
    def column_hint(self) -> int | None:
        return self._column_hint

    @column_hint.setter
    def column_hint(self, value: int | None) -> None:
        self._column_hint = _as_hint(value)
        self._reshape(self.count, self._dims)

    @property
    def count(self) -> int:
        return self._dims.element_count

    @count.setter
    def count(self, value: int) -> None:
        self._reshape(value, self._dims)

    def _reshape(self, count: int, prior: FixedShape) -> None:
        self._dims = reshape_for_column_hint(count, self._column_hint, prior)
        if self.verbose:
            print(f"{self.name:<20} {self._dims.print(print_total_size=True)}")

    def view(self, buffer) -> np.ndarray:
        """
        Reshape a flat buffer into this block's layout.

        :param buffer: Flat data, anything numpy can view as an array
        :return: Array view shaped as :attr:`dims`
        """
        array = np.asarray(buffer)
        if array.size != self.count:
            raise ValueError(
                f"Buffer of {array.size} elements does not fit block {self.name!r} "
                f"with shape {self._dims.print(print_total_size=True)}"
            )
        return array.reshape(self._dims.as_tuple())

    def __repr__(self) -> str:
        return (
            f"MemoryBlock(name={self.name!r}, dims={self._dims!r}, "
            f"column_hint={self._column_hint})"
        )
