"""Read and write shape descriptors from ONNX model metadata."""

__docformat__ = "restructuredtext"
__all__ = [
    "get_initializer_shapes",
    "get_input_shapes",
    "get_output_shapes",
    "make_value_info",
    "shape_from_value_info",
]

import onnx
from onnx import ModelProto, ValueInfoProto

from tensordims.errors import InvalidShape
from tensordims.fixed_shape import FixedShape
from tensordims.inferable_shape import InferableShape
from tensordims.utils import FREE_DIM


def shape_from_value_info(node: ValueInfoProto, has_batch_dim: bool = False) -> InferableShape:
    """
    Extract a shape from an ONNX value info node.

    Symbolic or missing dimensions become the free dimension.

    :param node: ONNX value info node
    :param has_batch_dim: Whether the leading dimension is a batch dimension to infer
    :return: Shape with at most one free entry
    """
    dims = []
    for d in node.type.tensor_type.shape.dim:
        dims.append(d.dim_value if d.WhichOneof("value") == "dim_value" else FREE_DIM)

    if has_batch_dim and dims:
        dims[0] = FREE_DIM

    if dims.count(FREE_DIM) > 1:
        raise InvalidShape(f"Node {node.name} has more than one unknown dimension: {dims}")

    return InferableShape(*dims)


def make_value_info(
    name: str,
    elem_type: int,
    shape: FixedShape | InferableShape,
    free_dim_param: str = "N",
) -> ValueInfoProto:
    """
    Create an ONNX value info node for a shape.

    :param name: Tensor name
    :param elem_type: ONNX element type, e.g. ``TensorProto.FLOAT``
    :param shape: Shape to write, a free entry becomes a symbolic dimension
    :param free_dim_param: Symbol used for the free entry
    :return: Value info node
    """
    dims: list[int | str] = [
        free_dim_param if size == FREE_DIM else size for size in shape.entries
    ]
    return onnx.helper.make_tensor_value_info(name=name, elem_type=elem_type, shape=dims)


def get_input_shapes(model: ModelProto, has_batch_dim: bool = False) -> dict[str, InferableShape]:
    """
    Get shapes of model inputs excluding initializers.

    :param model: ONNX model
    :param has_batch_dim: Whether to treat leading dimensions as free batch dimensions
    :return: Dictionary mapping input names to shapes
    """
    initializers = {initializer.name for initializer in model.graph.initializer}
    return {
        input_i.name: shape_from_value_info(input_i, has_batch_dim)
        for input_i in model.graph.input
        if input_i.name not in initializers
    }


def get_output_shapes(model: ModelProto, has_batch_dim: bool = False) -> dict[str, InferableShape]:
    """
    Get shapes of model outputs.

    :param model: ONNX model
    :param has_batch_dim: Whether to treat leading dimensions as free batch dimensions
    :return: Dictionary mapping output names to shapes
    """
    return {
        output_i.name: shape_from_value_info(output_i, has_batch_dim)
        for output_i in model.graph.output
    }


def get_initializer_shapes(model: ModelProto) -> dict[str, FixedShape]:
    """
    Get shapes of model initializers.

    Scalar initializers are described as ``[1]``.

    :param model: ONNX model
    :return: Dictionary mapping initializer names to shapes
    """
    shapes = {}
    for initializer in model.graph.initializer:
        dims = list(map(int, initializer.dims))
        shapes[initializer.name] = FixedShape(*dims) if dims else FixedShape(1)
    return shapes
