import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from raystack.camera import Camera
from raystack.colour import COL_VERY_DARK_GREY, Colour
from raystack.config import EPSILON
from raystack.hittable import HitRecord, Ray, Shape
from raystack.utils import VectorLike, as_vec, normalize

logger = logging.getLogger(__name__)


@dataclass
class Light:
    """Disc-shaped emitter.

    Intensity and selection probability are filled in by Scene.finalize().
    The integrator does not sample lights yet, so these are bookkeeping only.
    """

    centre: Float[t.Tensor, "3"]
    radius: float
    direction: Float[t.Tensor, "3"]
    wattage: float
    intensity: float = field(default=0.0, init=False)
    probability: float = field(default=0.0, init=False)

    def __post_init__(self):
        self.centre = as_vec(self.centre)
        self.direction = normalize(as_vec(self.direction))


class Scene:
    """Shapes, lights and a camera, handed to the integrator read-only."""

    def __init__(
        self,
        camera: Camera,
        shapes: Optional[List[Shape]] = None,
        lights: Optional[List[Light]] = None,
        background: Colour = COL_VERY_DARK_GREY,
    ):
        self.camera = camera
        self.shapes: List[Shape] = list(shapes) if shapes is not None else []
        self.lights: List[Light] = list(lights) if lights is not None else []
        self.background = background
        self.finalized = False

    def add(self, shape: Shape) -> None:
        self.shapes.append(shape)

    def extend(self, shapes: List[Shape]) -> None:
        self.shapes.extend(shapes)

    def add_light(self, centre: VectorLike, radius: float, direction: VectorLike, wattage: float) -> Light:
        light = Light(as_vec(centre), float(radius), as_vec(direction), float(wattage))
        self.lights.append(light)
        return light

    def finalize(self) -> "Scene":
        """Computes light intensities and selection probabilities from this scene's lights."""
        total_intensity = 0.0
        for light in self.lights:
            # All lights are discs for now
            light.intensity = light.wattage * math.pi * light.radius**2
            total_intensity += light.intensity
        for light in self.lights:
            light.probability = light.intensity / total_intensity if total_intensity > 0 else 0.0
        self.finalized = True
        logger.info("scene finalized: %d shapes, %d lights", len(self.shapes), len(self.lights))
        return self

    @jaxtyped(typechecker=typechecker)
    def nearest_hit(self, ray: Ray) -> Optional[HitRecord]:
        min_distance = math.inf
        min_index = -1
        for index, shape in enumerate(self.shapes):
            distance = shape.intersect(ray)
            if distance is not None and EPSILON < distance < min_distance:
                min_distance = distance
                min_index = index
        if min_index < 0:
            return None
        return HitRecord(min_distance, ray.at(min_distance), self.shapes[min_index], min_index)

    def __len__(self) -> int:
        return len(self.shapes)
