from typing import Optional

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from raystack.colour import COL_RED, COL_WHITE
from raystack.config import EPSILON
from raystack.exceptions import SceneConfigurationError
from raystack.hittable import Appearance, Ray, Shape
from raystack.materials import Material
from raystack.quadratic import roots
from raystack.utils import VectorLike, as_vec, dot, normalize, squared_length


def _positive_radius(radius: float) -> float:
    if radius <= 0:
        raise SceneConfigurationError(f"radius must be positive, got {radius}")
    return float(radius)


def _sphere_roots(ray: Ray, centre: Float[t.Tensor, "3"], radius: float):
    oc = ray.origin - centre
    half_b = dot(ray.direction, oc)
    c = squared_length(oc) - radius * radius
    return roots(1.0, half_b, c)


class Sphere(Shape):
    DEFAULT_COLOUR = COL_RED

    def __init__(
        self,
        centre: VectorLike,
        radius: float,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        self.centre: Float[t.Tensor, "3"] = as_vec(centre)
        self.radius: float = _positive_radius(radius)

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        t_roots = _sphere_roots(ray, self.centre, self.radius)
        if t_roots is None:
            return None
        near, far = t_roots
        if near > EPSILON:
            return near
        if far > EPSILON:
            return far
        return None

    @jaxtyped(typechecker=typechecker)
    def normal(self, point: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        return (point - self.centre) / self.radius


class Hemisphere(Shape):
    """Half of a sphere, optionally truncated.

    `normal_dir` points towards the half that exists; a hit survives only if
    its distance from the centre along `normal_dir` lies strictly between
    `truncate_min` and `truncate_max` (no upper bound when None). Concave
    hemispheres have their surface normal pointing at the centre, which is
    what the inside of a bowl needs.
    """

    DEFAULT_COLOUR = COL_RED

    def __init__(
        self,
        centre: VectorLike,
        radius: float,
        normal_dir: VectorLike,
        truncate_min: float = 0.0,
        truncate_max: Optional[float] = None,
        convex: bool = True,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        self.centre: Float[t.Tensor, "3"] = as_vec(centre)
        self.radius: float = _positive_radius(radius)
        self.normal_dir: Float[t.Tensor, "3"] = normalize(as_vec(normal_dir))
        self.truncate_min = float(truncate_min)
        self.truncate_max = None if truncate_max is None else float(truncate_max)
        self.convex = convex

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        t_roots = _sphere_roots(ray, self.centre, self.radius)
        if t_roots is None:
            return None
        # Check both roots: in front of the ray and inside the truncation band
        for distance in t_roots:
            if distance > EPSILON:
                proj = dot(ray.at(distance) - self.centre, self.normal_dir)
                if proj > self.truncate_min and (self.truncate_max is None or proj < self.truncate_max):
                    return distance
        return None

    @jaxtyped(typechecker=typechecker)
    def normal(self, point: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        sign = 1.0 if self.convex else -1.0
        return sign * (point - self.centre) / self.radius


class Cylinder(Shape):
    """Infinite cylinder around `axis`; `height` is kept for callers but not used to clip."""

    DEFAULT_COLOUR = COL_WHITE

    def __init__(
        self,
        centre: VectorLike,
        axis: VectorLike,
        height: float,
        radius: float,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        self.centre: Float[t.Tensor, "3"] = as_vec(centre)
        self.axis: Float[t.Tensor, "3"] = normalize(as_vec(axis))
        self.height = float(height)
        self.radius: float = _positive_radius(radius)

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        v = ray.origin - self.centre
        vd = dot(v, ray.direction)
        va = dot(v, self.axis)
        da = dot(ray.direction, self.axis)

        # Quadratic in t after removing the axis-parallel components
        a = 1 - da * da
        half_b = vd - va * da
        c = squared_length(v) - va * va - self.radius * self.radius

        t_roots = roots(a, half_b, c)
        if t_roots is None:
            return None
        near = t_roots if isinstance(t_roots, float) else t_roots[0]
        if near <= 0:
            return None
        return near

    @jaxtyped(typechecker=typechecker)
    def normal(self, point: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        v = point - self.centre
        return (v - dot(v, self.axis) * self.axis) / self.radius
