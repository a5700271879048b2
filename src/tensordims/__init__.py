"""Tensor shape descriptors with free-dimension inference."""

__version__ = "2026.1.0"

__docformat__ = "restructuredtext"
__all__ = [
    "FREE_DIM",
    "FixedShape",
    "IndexOutOfRange",
    "InferableShape",
    "InvalidShape",
    "MemoryBlock",
    "ShapeUnresolved",
    "__version__",
    "reshape_for_column_hint",
]

from tensordims.column_hint import MemoryBlock, reshape_for_column_hint
from tensordims.errors import IndexOutOfRange, InvalidShape, ShapeUnresolved
from tensordims.fixed_shape import FixedShape
from tensordims.inferable_shape import FREE_DIM, InferableShape
