"""Flat primitives: infinite planes and the bounded shapes lying in a plane.

Plane, disc and annulus share the ray/plane solve and then clip the hit by
distance from their centre. Triangle and parallelogram use the
Moller-Trumbore test, which works directly from a vertex and two edges
without precomputing the plane; the two differ only in how the second
barycentric coordinate is bounded.
"""

from typing import Optional

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from raystack.colour import COL_DEEP_BLUE, COL_DEEP_PINK, COL_LIME_GREEN
from raystack.config import EPSILON
from raystack.exceptions import SceneConfigurationError
from raystack.hittable import Appearance, Ray, Shape
from raystack.materials import Material
from raystack.utils import VectorLike, as_vec, cross, dot, normalize, squared_length


@jaxtyped(typechecker=typechecker)
def plane_distance(ray: Ray, point: Float[t.Tensor, "3"], normal: Float[t.Tensor, "3"]) -> Optional[float]:
    """Distance along the ray to the plane through `point`, or None if parallel or behind."""
    denom = dot(ray.direction, normal)
    if abs(denom) < EPSILON:
        return None
    distance = dot(point - ray.origin, normal) / denom
    return distance if distance > EPSILON else None


@jaxtyped(typechecker=typechecker)
def moller_trumbore(
    ray: Ray,
    vtx_a: Float[t.Tensor, "3"],
    edge_ab: Float[t.Tensor, "3"],
    edge_ac: Float[t.Tensor, "3"],
    parallelogram: bool,
) -> Optional[float]:
    h = cross(ray.direction, edge_ac)
    det = dot(edge_ab, h)
    if -EPSILON < det < EPSILON:
        return None  # ray parallel to the plane
    f = 1 / det
    s = ray.origin - vtx_a
    u = f * dot(s, h)
    if u < 0 or u > 1:
        return None
    q = cross(s, edge_ab)
    v = f * dot(ray.direction, q)
    if parallelogram:
        if v < 0 or v > 1:
            return None
    elif v < 0 or u + v > 1:
        return None

    distance = f * dot(edge_ac, q)
    return distance if distance > EPSILON else None


class FlatShape(Shape):
    """Shape with a single fixed unit normal."""

    normal_dir: Float[t.Tensor, "3"]

    @jaxtyped(typechecker=typechecker)
    def normal(self, point: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        return self.normal_dir


class Plane(FlatShape):
    DEFAULT_COLOUR = COL_DEEP_BLUE

    def __init__(
        self,
        origin: VectorLike,
        normal_dir: VectorLike,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        self.origin: Float[t.Tensor, "3"] = as_vec(origin)
        self.normal_dir = normalize(as_vec(normal_dir))

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        return plane_distance(ray, self.origin, self.normal_dir)


class Triangle(FlatShape):
    DEFAULT_COLOUR = COL_LIME_GREEN
    PARALLELOGRAM = False

    def __init__(
        self,
        vtx_a: VectorLike,
        edge_ab: VectorLike,
        edge_ac: VectorLike,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        self.vtx_a: Float[t.Tensor, "3"] = as_vec(vtx_a)
        self.edge_ab: Float[t.Tensor, "3"] = as_vec(edge_ab)
        self.edge_ac: Float[t.Tensor, "3"] = as_vec(edge_ac)
        self.normal_dir = normalize(cross(self.edge_ab, self.edge_ac))

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        return moller_trumbore(ray, self.vtx_a, self.edge_ab, self.edge_ac, self.PARALLELOGRAM)


class Parallelogram(Triangle):
    """Spanned by the two edges from vertex A; the face opposite A is B + AC."""

    DEFAULT_COLOUR = COL_DEEP_PINK
    PARALLELOGRAM = True


class Disc(FlatShape):
    DEFAULT_COLOUR = COL_DEEP_PINK

    def __init__(
        self,
        centre: VectorLike,
        radius: float,
        normal_dir: VectorLike,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        if radius <= 0:
            raise SceneConfigurationError(f"disc radius must be positive, got {radius}")
        self.centre: Float[t.Tensor, "3"] = as_vec(centre)
        self.radius = float(radius)
        self.normal_dir = normalize(as_vec(normal_dir))

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        distance = plane_distance(ray, self.centre, self.normal_dir)
        if distance is None:
            return None
        r_sq = squared_length(self.centre - ray.at(distance))
        return distance if r_sq + EPSILON < self.radius * self.radius else None


class Annulus(FlatShape):
    DEFAULT_COLOUR = COL_DEEP_PINK

    def __init__(
        self,
        centre: VectorLike,
        outer_radius: float,
        inner_radius: float,
        normal_dir: VectorLike,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        super().__init__(appearance, reflectance, specular, material)
        if not 0 <= inner_radius < outer_radius:
            raise SceneConfigurationError(
                f"annulus needs 0 <= inner_radius < outer_radius, got {inner_radius} and {outer_radius}"
            )
        self.centre: Float[t.Tensor, "3"] = as_vec(centre)
        self.outer_radius = float(outer_radius)
        self.inner_radius = float(inner_radius)
        self.normal_dir = normalize(as_vec(normal_dir))

    @jaxtyped(typechecker=typechecker)
    def intersect(self, ray: Ray) -> Optional[float]:
        distance = plane_distance(ray, self.centre, self.normal_dir)
        if distance is None:
            return None
        r_sq = squared_length(self.centre - ray.at(distance))
        inside_outer = r_sq + EPSILON < self.outer_radius * self.outer_radius
        outside_inner = r_sq - EPSILON > self.inner_radius * self.inner_radius
        return distance if inside_outer and outside_inner else None
