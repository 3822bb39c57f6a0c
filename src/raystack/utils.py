import math
from typing import Sequence, Union

import numpy as np
import torch as t
from jaxtyping import Float, Int, jaxtyped
from PIL import Image
from typeguard import typechecked as typechecker

from raystack.config import EPSILON, device, dtype
from raystack.exceptions import InvariantViolation

VectorLike = Union[t.Tensor, Sequence[float]]

Z_AXIS = (0.0, 0.0, 1.0)


def vec(x: float, y: float, z: float) -> Float[t.Tensor, "3"]:
    return t.tensor([x, y, z], dtype=dtype, device=device)


def as_vec(v: VectorLike) -> Float[t.Tensor, "3"]:
    """Converts lists, tuples or tensors of any float dtype to an engine vector."""
    if isinstance(v, t.Tensor):
        return v.to(dtype=dtype, device=device)
    return t.tensor([float(c) for c in v], dtype=dtype, device=device)


@jaxtyped(typechecker=typechecker)
def dot(v: Float[t.Tensor, "3"], w: Float[t.Tensor, "3"]) -> float:
    return float(t.dot(v, w))


@jaxtyped(typechecker=typechecker)
def cross(v: Float[t.Tensor, "3"], w: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
    return t.cross(v, w, dim=-1)


@jaxtyped(typechecker=typechecker)
def squared_length(v: Float[t.Tensor, "3"]) -> float:
    return float(t.dot(v, v))


@jaxtyped(typechecker=typechecker)
def length(v: Float[t.Tensor, "3"]) -> float:
    return math.sqrt(squared_length(v))


@jaxtyped(typechecker=typechecker)
def is_zero(v: Float[t.Tensor, "3"]) -> bool:
    return squared_length(v) < EPSILON


@jaxtyped(typechecker=typechecker)
def normalize(v: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
    """Unit vector along v; degenerate vectors map to the z axis instead of dividing by zero."""
    if is_zero(v):
        return vec(*Z_AXIS)
    return v / length(v)


@jaxtyped(typechecker=typechecker)
def reflect(direction: Float[t.Tensor, "3"], normal: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
    # Mirror direction about the normal: d + 2 cos(theta1) n, cos(theta1) = -d.n
    cos_theta1 = -dot(direction, normal)
    return direction + 2.0 * cos_theta1 * normal


@jaxtyped(typechecker=typechecker)
def perturb(v: Float[t.Tensor, "3"], max_deviation: float = math.pi / 2) -> Float[t.Tensor, "3"]:
    """Random vector within max_deviation radians of v.

    cos(theta)^2 is drawn uniformly from [cos(max_deviation)^2, 1], which
    favours directions close to v the way a Lambertian lobe does. Deviations
    beyond a right angle are clamped to the hemisphere around v.
    """
    max_deviation = min(max_deviation, math.pi / 2)

    # Frame {v, m, n}: any helper not parallel to v, then re-orthogonalise
    m = vec(1.0, 0.0, 0.0)
    if is_zero(cross(v, m)):
        m = vec(0.0, 1.0, 0.0)
    n = normalize(cross(v, m))
    m = normalize(cross(n, v))

    u1, u2 = t.rand(2, dtype=dtype).tolist()
    lower_bound = math.cos(max_deviation) ** 2
    x = (1.0 - lower_bound) * u1 + lower_bound
    cos_theta = math.sqrt(x)
    sin_theta = math.sqrt(max(0.0, 1.0 - x))
    phi = 2.0 * math.pi * u2

    result = cos_theta * v + (sin_theta * math.cos(phi)) * m + (sin_theta * math.sin(phi)) * n
    if dot(v, result) < 0:
        raise InvariantViolation(f"perturbed vector left the hemisphere around {v.tolist()}")
    return result


@jaxtyped(typechecker=typechecker)
def degrees_to_radians(degrees: float) -> float:
    return degrees * np.pi / 180.0


@jaxtyped(typechecker=typechecker)
def disc_sample(radius: float) -> tuple[float, float]:
    """Uniform random point in a disc of the given radius, centred on the origin."""
    r_u, theta_u = t.rand(2, dtype=dtype).tolist()
    r = math.sqrt(r_u) * radius
    theta = 2.0 * math.pi * theta_u
    return r * math.cos(theta), r * math.sin(theta)


@jaxtyped(typechecker=typechecker)
def tensor_to_image(tensor: Union[Float[t.Tensor, "h w c"], Int[t.Tensor, "h w c"]]) -> Image.Image:
    tensor = tensor.clamp(0, 255)
    array = tensor.cpu().numpy().astype(np.uint8)
    return Image.fromarray(array)
