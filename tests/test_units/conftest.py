"""Shared fixtures for unit tests."""

import onnx
import pytest

from tensordims import FixedShape, MemoryBlock


@pytest.fixture
def test_dims():
    """Create a rank-3 shape used across tests."""
    return FixedShape(5, 3, 2)


@pytest.fixture
def make_block():
    """Create memory blocks from initial dims."""

    def _make_block(*sizes, column_hint=None):
        return MemoryBlock(FixedShape(*sizes), column_hint=column_hint)

    return _make_block


@pytest.fixture
def simple_model():
    """Create ONNX models from value infos and initializers."""

    def _make_model(inputs, outputs, initializers=()):
        graph = onnx.helper.make_graph(
            [], "test_graph", list(inputs), list(outputs), initializer=list(initializers)
        )
        return onnx.helper.make_model(graph)

    return _make_model
