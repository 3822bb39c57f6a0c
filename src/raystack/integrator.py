"""Recursive shading.

trace() follows one ray to its nearest hit and continues it exactly once:
a mirror or Lambertian-perturbed bounce off opaque surfaces, or a
refraction (or total internal reflection) through transmissive ones. The
colour at each level is the shape's own colour blended with whatever the
continuation sees, weighted by the shape's reflectance.

Recursion is bounded by remaining_depth alone; the distance budget and the
importance cutoff only prune work earlier.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import torch as t
from jaxtyping import Float

from raystack.colour import COL_WHITE, Colour, blend
from raystack.config import EPSILON, FAR_HIT_DISTANCE, IMPORTANCE_CUTOFF, PERTURB_ATTEMPTS, dtype
from raystack.hittable import Ray
from raystack.materials import MaterialStack, is_transmissive, refract
from raystack.scene import Scene
from raystack.utils import dot, perturb, reflect

logger = logging.getLogger(__name__)

# Returned for branches too faint to matter; white rather than black so long
# diffuse chains are not artificially darkened
NEGLIGIBLE_COLOUR = COL_WHITE


@dataclass
class PathSegment:
    origin: Float[t.Tensor, "3"]
    end: Float[t.Tensor, "3"]
    shape_index: int
    depth: int


@dataclass
class TraceContext:
    """Optional per-trace state: ray-path recording and anomaly counters.

    Pass one context per thread of work; merge() folds them together.
    """

    record_paths: bool = False
    segments: List[PathSegment] = field(default_factory=list)
    rays_traced: int = 0
    inside_opaque_hits: int = 0
    stack_underflows: int = 0
    perturb_exhaustions: int = 0

    def merge(self, other: "TraceContext") -> None:
        self.segments.extend(other.segments)
        self.rays_traced += other.rays_traced
        self.inside_opaque_hits += other.inside_opaque_hits
        self.stack_underflows += other.stack_underflows
        self.perturb_exhaustions += other.perturb_exhaustions


def _diffuse_direction(
    mirror: Float[t.Tensor, "3"],
    normal: Float[t.Tensor, "3"],
    context: Optional[TraceContext],
) -> Float[t.Tensor, "3"]:
    for _ in range(PERTURB_ATTEMPTS):
        candidate = perturb(mirror)
        if dot(candidate, normal) > EPSILON:
            return candidate
    if context is not None:
        context.perturb_exhaustions += 1
    logger.debug("no perturbed direction above the surface after %d attempts", PERTURB_ATTEMPTS)
    return mirror


def trace(
    scene: Scene,
    ray: Ray,
    remaining_distance: float,
    remaining_depth: int,
    importance: float = 1.0,
    material_stack: Optional[MaterialStack] = None,
    context: Optional[TraceContext] = None,
) -> Optional[Colour]:
    """Colour seen along `ray`, or None when the sample has to be dropped.

    A sample is dropped when the ray turns out to be inside an opaque shape,
    which means earlier refraction bookkeeping or the geometry is
    inconsistent.
    """
    if importance < IMPORTANCE_CUTOFF:
        return NEGLIGIBLE_COLOUR
    if material_stack is None:
        material_stack = MaterialStack()
    if context is not None:
        context.rays_traced += 1

    hit = scene.nearest_hit(ray)
    if hit is None:
        return scene.background

    shape = hit.shape
    local_colour = hit.colour
    normal = hit.normal

    if context is not None and context.record_paths:
        context.segments.append(PathSegment(ray.origin, hit.point, hit.shape_index, remaining_depth))
        logger.debug(
            "hit shape %d (%r) at %s, stack %s",
            hit.shape_index, shape, hit.point.tolist(), [m.name for m in material_stack.media],
        )

    transmitted_colour: Optional[Colour] = local_colour
    if hit.distance < remaining_distance and remaining_depth > 0:
        next_distance = remaining_distance - hit.distance
        next_importance = importance * shape.reflectance
        cos_theta1 = -dot(ray.direction, normal)

        if not is_transmissive(shape.material):
            if cos_theta1 < 0:
                if context is not None:
                    context.inside_opaque_hits += 1
                logger.warning(
                    "ray inside opaque shape %d (%r) at %s, coming from %s in direction %s; stack %s",
                    hit.shape_index, shape, hit.point.tolist(), ray.origin.tolist(),
                    ray.direction.tolist(), [m.name for m in material_stack.media],
                )
                # If it's far away it probably doesn't matter
                return scene.background if hit.distance >= FAR_HIT_DISTANCE else None

            direction = reflect(ray.direction, normal)
            if t.rand((), dtype=dtype).item() > shape.specular:
                direction = _diffuse_direction(direction, normal, context)
            transmitted_colour = trace(
                scene, Ray(hit.point, direction), next_distance, remaining_depth - 1,
                next_importance, material_stack, context,
            )
        else:
            refraction = refract(ray.direction, normal, material_stack, shape.material)
            if refraction.underflow and context is not None:
                context.stack_underflows += 1
            transmitted_colour = trace(
                scene, Ray(hit.point, refraction.direction), next_distance, remaining_depth - 1,
                next_importance, refraction.stack, context,
            )

    if transmitted_colour is None:
        return None
    return blend(local_colour, transmitted_colour, shape.reflectance)
