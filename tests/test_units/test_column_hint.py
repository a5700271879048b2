"""Unit tests for column-hint reshaping and memory blocks."""

import numpy as np
import pytest

from tensordims import (
    FixedShape,
    InferableShape,
    InvalidShape,
    MemoryBlock,
    ShapeUnresolved,
    reshape_for_column_hint,
)


class TestReshapeForColumnHint:
    """Tests for the stateless reshape decision."""

    def test_dividing_hint(self):
        """Test a dividing hint gives [rows, columns]."""
        assert reshape_for_column_hint(12, 3, FixedShape(12)) == FixedShape(4, 3)

    def test_collapses_higher_rank(self):
        """Test a valid hint collapses any prior rank to 2-D."""
        assert reshape_for_column_hint(24, 6, FixedShape(2, 3, 4)) == FixedShape(4, 6)

    @pytest.mark.parametrize("hint", [None, 0, -3, 7])
    def test_inapplicable_hint_keeps_prior(self, hint):
        """Test inapplicable hints leave a matching prior shape untouched."""
        prior = FixedShape(2, 6)
        assert reshape_for_column_hint(12, hint, prior) is prior

    def test_keeps_trailing_structure(self):
        """Test a new count rescales the leading entry when possible."""
        assert reshape_for_column_hint(18, None, FixedShape(2, 6)) == FixedShape(3, 6)

    def test_falls_back_to_flat(self):
        """Test a count that does not fit the prior structure becomes flat."""
        assert reshape_for_column_hint(10, None, FixedShape(2, 6)) == FixedShape(10)

    def test_zero_count_ignores_hint(self):
        """Test an empty buffer never takes the hint."""
        assert reshape_for_column_hint(0, 3, FixedShape()) == FixedShape(0)

    def test_no_prior(self):
        """Test a missing prior shape."""
        assert reshape_for_column_hint(9, None) == FixedShape(9)

    def test_negative_count(self):
        """Test a negative count is rejected."""
        with pytest.raises(InvalidShape, match="non-negative"):
            reshape_for_column_hint(-1, 3)

    @pytest.mark.parametrize(
        ("count", "hint", "prior"),
        [
            (12, 3, FixedShape(6, 2)),
            (12, 7, FixedShape(12)),
            (30, 5, FixedShape(5, 3, 2)),
            (8, None, FixedShape(2, 4)),
        ],
    )
    def test_idempotent(self, count, hint, prior):
        """Test reapplying the decision does not change the result."""
        once = reshape_for_column_hint(count, hint, prior)
        assert reshape_for_column_hint(count, hint, once) == once
        assert once.element_count == count


class TestMemoryBlockColumnHint:
    """Tests for column hints on memory blocks."""

    def test_column_hint_used_when_divisible(self, make_block):
        """Test a dividing hint reshapes a flat block."""
        block = make_block(12)
        block.column_hint = 3

        assert block.count == 12
        assert block.dims.rank == 2
        assert block.dims[0] == 4
        assert block.dims[1] == 3

    @pytest.mark.parametrize(
        ("initial", "hint", "expected", "comment"),
        [
            ((12,), 7, (12,), "column hint ignored when not divisible"),
            ((12,), 3, (4, 3), "column hint used when divisible"),
            ((6, 2), 3, (4, 3), "column hint used for matrices while count remains constant"),
            ((2, 3, 2), 4, (3, 4), "higher rank collapsed by a valid hint"),
            ((2, 6), 0, (2, 6), "non-positive hint leaves matrix untouched"),
        ],
    )
    def test_column_hint(self, make_block, initial, hint, expected, comment):
        """Test column hint application on existing shapes."""
        block = make_block(*initial)
        block.column_hint = hint

        expected_dims = FixedShape(*expected)
        assert block.count == expected_dims.element_count, comment
        assert block.dims == expected_dims, comment

    def test_use_column_hint_when_setting_count_after_it(self):
        """Test a hint set before the count applies on count assignment."""
        block = MemoryBlock(FixedShape())

        block.column_hint = 3
        assert block.dims.element_count == 0
        assert block.dims.rank == 1
        assert block.column_hint == 3

        block.count = 12
        assert block.dims.element_count == 12
        assert block.dims.rank == 2
        assert block.dims == FixedShape(4, 3)

    def test_count_without_hint(self):
        """Test setting the count on a flat block."""
        block = MemoryBlock()
        block.count = 7
        assert block.dims == FixedShape(7)

    def test_count_with_non_dividing_hint(self):
        """Test a non-dividing hint is ignored on count assignment."""
        block = MemoryBlock(column_hint=5)
        block.count = 12
        assert block.dims == FixedShape(12)
        assert block.column_hint == 5

    def test_negative_count(self):
        """Test a negative count is rejected."""
        block = MemoryBlock()
        with pytest.raises(InvalidShape):
            block.count = -4

    def test_hint_applied_on_dims_assignment(self):
        """Test assigning dims re-runs the hint."""
        block = MemoryBlock(column_hint=4)
        block.dims = FixedShape(2, 2, 2)
        assert block.dims == FixedShape(2, 4)

    def test_clearing_hint_keeps_shape(self, make_block):
        """Test clearing the hint leaves the current shape."""
        block = make_block(12, column_hint=3)
        assert block.dims == FixedShape(4, 3)
        block.column_hint = None
        assert block.dims == FixedShape(4, 3)

    @pytest.mark.parametrize("hint", [2.5, "3", [3]])
    def test_non_integer_hint_rejected(self, make_block, hint):
        """Test a non-integer hint is rejected and leaves the block usable."""
        block = make_block(4, 2, column_hint=4)
        with pytest.raises(InvalidShape, match="Column hint must be an integer"):
            block.column_hint = hint

        assert block.column_hint == 4
        assert block.dims == FixedShape(2, 4)

        block.count = 20
        assert block.dims == FixedShape(5, 4)

    def test_non_integer_hint_in_constructor(self):
        """Test the constructor validates the hint too."""
        with pytest.raises(InvalidShape, match="Column hint"):
            MemoryBlock(FixedShape(12), column_hint=1.5)

    def test_non_integer_count_rejected(self, make_block):
        """Test a non-integer count leaves the shape unchanged."""
        block = make_block(12, column_hint=3)
        with pytest.raises(InvalidShape, match="Element count must be an integer"):
            block.count = 12.0
        assert block.dims == FixedShape(4, 3)

    def test_from_legacy(self):
        """Test building a block from a legacy count and hint."""
        block = MemoryBlock.from_legacy(10, 2, name="legacy")
        assert block.dims == FixedShape(5, 2)
        assert block.column_hint == 2


class TestMemoryBlockDims:
    """Tests for assigning shapes to memory blocks."""

    def test_default_dims(self):
        """Test a new block is empty."""
        block = MemoryBlock()
        assert block.dims == FixedShape(0)
        assert block.count == 0
        assert not block.dims_are_custom

    def test_inferable_dims_are_resolved(self):
        """Test inferable shapes are stored resolved."""
        dims = InferableShape.from_text("*, 4", target_size=8)
        block = MemoryBlock(dims)
        assert block.dims == FixedShape(2, 4)
        assert block.dims_are_custom

    def test_default_inferable_dims_not_custom(self):
        """Test code-default shapes keep the custom flag off."""
        block = MemoryBlock(InferableShape(2, -1, target_size=6))
        assert block.dims == FixedShape(2, 3)
        assert not block.dims_are_custom

    def test_unresolved_inferable_dims(self):
        """Test unresolved shapes cannot be assigned."""
        block = MemoryBlock()
        with pytest.raises(ShapeUnresolved):
            block.dims = InferableShape(3, -1, target_size=7)
        assert block.dims == FixedShape(0)
        assert not block.dims_are_custom

    def test_unresolved_custom_dims_keep_default_flag(self):
        """Test a failed assignment of authored dims keeps the previous flag."""
        block = MemoryBlock(FixedShape(6))
        with pytest.raises(ShapeUnresolved):
            block.dims = InferableShape.from_text("4, *", target_size=6)

        assert block.dims == FixedShape(6)
        assert not block.dims_are_custom

    def test_fixed_dims_reset_custom(self):
        """Test fixed shapes are treated as defaults."""
        block = MemoryBlock(InferableShape.from_text("3", target_size=3))
        assert block.dims_are_custom
        block.dims = FixedShape(3)
        assert not block.dims_are_custom

    def test_wrong_type(self):
        """Test non-shape values are rejected."""
        block = MemoryBlock()
        with pytest.raises(TypeError, match="Expected a shape"):
            block.dims = [3, 4]

    def test_verbose(self, capsys):
        """Test verbose blocks print reshape decisions."""
        block = MemoryBlock(name="weights", verbose=True)
        block.count = 6
        out = capsys.readouterr().out
        assert "weights" in out
        assert "6 [6]" in out


class TestMemoryBlockView:
    """Tests for viewing flat buffers through a block."""

    def test_view_matrix(self, make_block):
        """Test a flat buffer is reshaped into rows and columns."""
        block = make_block(12, column_hint=3)
        matrix = block.view(np.arange(12, dtype=np.float32))
        assert matrix.shape == (4, 3)
        assert matrix[1, 0] == 3

    def test_view_size_mismatch(self, make_block):
        """Test a buffer of the wrong size is rejected."""
        block = make_block(2, 3)
        with pytest.raises(ValueError, match="does not fit"):
            block.view(np.zeros(5))
