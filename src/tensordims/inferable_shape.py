"""Tensor shape with at most one free dimension inferred from a target size."""

__docformat__ = "restructuredtext"
__all__ = ["FREE_DIM", "InferableShape"]

import operator
import warnings
from collections.abc import Iterable

from tensordims.errors import InvalidShape, ShapeUnresolved
from tensordims.fixed_shape import FixedShape
from tensordims.utils import (
    FREE_DIM,
    MISMATCH_MARKER,
    check_index,
    format_dims,
    parse_dims,
    product,
)


def _validate_dims(sizes: Iterable) -> list[int]:
    """
    Check raw entries, allowing a single FREE_DIM.

    :param sizes: Raw entries
    :return: Entries as a list of ints
    """
    dims = []
    for size in sizes:
        try:
            dims.append(operator.index(size))
        except TypeError:
            raise InvalidShape(f"Dimension size must be an integer, got {size!r}") from None

    if any(size < 0 and size != FREE_DIM for size in dims):
        raise InvalidShape(f"Dimension sizes must be non-negative or {FREE_DIM}, got {dims}")
    if dims.count(FREE_DIM) > 1:
        raise InvalidShape(f"At most one free dimension is allowed, got {dims}")
    return dims


class InferableShape:
    """
    Shape whose single free entry is computed from ``target_size``.

    The free entry is kept as FREE_DIM in :attr:`entries`; indexing returns
    the computed value. ``is_custom`` tells persistence layers whether the
    entries were authored explicitly (set or parsed) or are a code default.

    :param sizes: Dimension sizes, FREE_DIM marks the free entry
    :param target_size: Intended total number of elements, 0 while unset
    """

    def __init__(self, *sizes: int, target_size: int = 0):
        self._dims = _validate_dims(sizes)
        self._target_size = 0
        self.target_size = target_size
        self.is_custom = False
        self.last_warning = ""

    @classmethod
    def from_text(cls, text: str, target_size: int = 0) -> "InferableShape":
        shape = cls(target_size=target_size)
        shape.parse(text)
        return shape

    @property
    def entries(self) -> tuple[int, ...]:
        return tuple(self._dims)

    @property
    def rank(self) -> int:
        return len(self._dims)

    @property
    def target_size(self) -> int:
        return self._target_size

    @target_size.setter
    def target_size(self, value: int) -> None:
        try:
            value = operator.index(value)
        except TypeError:
            raise InvalidShape(f"Target size must be an integer, got {value!r}") from None
        if value < 0:
            raise InvalidShape(f"Target size must be non-negative, got {value}")
        self._target_size = value

    @property
    def has_free_dim(self) -> bool:
        return FREE_DIM in self._dims

    @property
    def free_index(self) -> int | None:
        return self._dims.index(FREE_DIM) if self.has_free_dim else None

    @property
    def known_size(self) -> int:
        """Product of all entries except the free one."""
        return product(size for size in self._dims if size != FREE_DIM)

    @property
    def can_be_computed(self) -> bool:
        if not self._dims:
            return self._target_size > 0
        if not self.has_free_dim:
            return self.known_size == self._target_size

        known = self.known_size
        return self._target_size > 0 and known != 0 and self._target_size % known == 0

    def set(self, sizes: Iterable[int]) -> None:
        """
        Replace all entries with explicitly authored ones.

        :param sizes: New entries, FREE_DIM marks the free entry
        """
        self._dims = _validate_dims(sizes)
        self.is_custom = True
        self.last_warning = ""

    def parse(self, text: str) -> None:
        """
        Replace entries from user text such as ``"1, 5, *, 1, 1"``.

        When no free placeholder is given and the literal product differs from
        the target size, a free entry is prepended so the shape can absorb the
        target size. Malformed text keeps the previous entries and is reported
        through :attr:`last_warning`.

        :param text: Comma-separated sizes, ``*`` marks the free entry
        """
        try:
            dims = parse_dims(text)
        except ValueError as e:
            self.last_warning = f"Cannot parse dimensions '{text}': {e}"
            warnings.warn(self.last_warning, stacklevel=2)
            return

        if FREE_DIM not in dims and product(dims) != self._target_size:
            dims.insert(0, FREE_DIM)

        self._dims = dims
        self.is_custom = True
        self.last_warning = ""

    def _compute_free_dim(self) -> int:
        if not self.can_be_computed:
            raise ShapeUnresolved(
                f"Cannot compute free dimension of {self._dims} for target size {self._target_size}"
            )
        return self._target_size // self.known_size

    def resolved_entries(self) -> tuple[int, ...]:
        """
        Get entries with the free dimension computed.

        :return: Entries with no FREE_DIM left
        """
        if not self._dims:
            return (self._compute_free_dim(),)
        if not self.has_free_dim:
            return tuple(self._dims)

        free_size = self._compute_free_dim()
        return tuple(free_size if size == FREE_DIM else size for size in self._dims)

    def to_fixed(self) -> FixedShape:
        return FixedShape(*self.resolved_entries())

    def print(self, hide_trailing_ones: bool = False, print_total_size: bool = False) -> str:
        """
        Render the shape for diagnostics.

        An unresolved free entry renders as ``?``. A shape that disagrees with
        its target size is suffixed with `` (!)``; an unresolved free entry with
        no target size yet is not a disagreement.

        :param hide_trailing_ones: Whether to omit trailing literal 1 entries
        :param print_total_size: Whether to append the total element count
        :return: Rendered shape
        """
        computable = self.can_be_computed
        if computable and self.has_free_dim:
            free_text = str(self._compute_free_dim())
        else:
            free_text = "?"

        if self._dims:
            items = [free_text if size == FREE_DIM else size for size in self._dims]
        else:
            items = [str(self._target_size) if computable else "?"]

        total_size = None
        if print_total_size:
            if self._target_size:
                total_size = self._target_size
            elif self._dims and not self.has_free_dim:
                total_size = self.known_size
            else:
                total_size = "?"

        text = format_dims(items, hide_trailing_ones=hide_trailing_ones, total_size=total_size)

        open_free_dim = (self.has_free_dim or not self._dims) and self._target_size == 0
        if not computable and not open_free_dim:
            text += MISMATCH_MARKER
        return text

    def __getitem__(self, index: int) -> int:
        if not self._dims:
            # The empty shape stands for a single implicit free entry
            check_index(index, 1)
            return self._compute_free_dim()

        size = self._dims[check_index(index, self.rank)]
        return self._compute_free_dim() if size == FREE_DIM else size

    def __len__(self) -> int:
        return self.rank

    def __eq__(self, other) -> bool:
        if not isinstance(other, InferableShape):
            return NotImplemented
        return self._dims == other._dims and self._target_size == other._target_size

    def __str__(self) -> str:
        return self.print()

    def __repr__(self) -> str:
        dims = ", ".join(str(size) for size in self._dims)
        return f"InferableShape({dims}, target_size={self._target_size})"
