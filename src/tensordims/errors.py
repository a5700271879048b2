"""Exceptions raised for structural shape violations."""

__docformat__ = "restructuredtext"
__all__ = ["IndexOutOfRange", "InvalidShape", "ShapeUnresolved"]


class InvalidShape(ValueError):
    """A shape was constructed or set with entries it cannot hold."""


class IndexOutOfRange(IndexError):
    """A dimension index lies outside the shape's rank."""


class ShapeUnresolved(RuntimeError):
    """A free dimension cannot be computed from the target size."""
