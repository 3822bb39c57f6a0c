from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from raystack.colour import Colour
from raystack.exceptions import SceneConfigurationError
from raystack.materials import DEFAULT_REFLECTANCE, DEFAULT_SPECULAR, Material
from raystack.utils import as_vec, normalize

# A shape's look: a fixed colour, or a function of the hit point and the shape itself
ColourFunction = Callable[[Float[t.Tensor, "3"], "Shape"], Colour]
Appearance = Union[Colour, ColourFunction]


@dataclass(frozen=True)
class Ray:
    origin: Float[t.Tensor, "3"]
    direction: Float[t.Tensor, "3"]

    def __post_init__(self):
        object.__setattr__(self, "origin", as_vec(self.origin))
        object.__setattr__(self, "direction", normalize(as_vec(self.direction)))

    def at(self, distance: float) -> Float[t.Tensor, "3"]:
        return self.origin + distance * self.direction


@dataclass
class HitRecord:
    """Class to register the nearest ray-shape intersection."""

    distance: float
    point: Float[t.Tensor, "3"]
    shape: "Shape"
    shape_index: int = -1
    normal: Float[t.Tensor, "3"] = field(init=False)

    def __post_init__(self):
        self.normal = self.shape.normal(self.point)

    @property
    def colour(self) -> Colour:
        return self.shape.colour(self.point)


class Shape(ABC):
    """Abstract class for renderable primitives.

    The set of primitives is closed: only the concrete subclasses in
    raystack.sphere and raystack.planar exist, so an unknown kind of shape
    cannot reach the integrator.
    """

    DEFAULT_COLOUR: Colour

    def __init__(
        self,
        appearance: Optional[Appearance] = None,
        reflectance: Optional[float] = None,
        specular: Optional[float] = None,
        material: Material = Material.OPAQUE,
    ):
        self.material = Material(material)
        self.appearance: Appearance = self.DEFAULT_COLOUR if appearance is None else appearance
        self.reflectance = DEFAULT_REFLECTANCE[self.material] if reflectance is None else float(reflectance)
        self.specular = DEFAULT_SPECULAR[self.material] if specular is None else float(specular)
        for name in ("reflectance", "specular"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise SceneConfigurationError(f"{name} must lie in [0, 1], got {value}")

    def colour(self, point: Float[t.Tensor, "3"]) -> Colour:
        if isinstance(self.appearance, Colour):
            return self.appearance
        return self.appearance(point, self)

    @abstractmethod
    def intersect(self, ray: Ray) -> Optional[float]:
        """Smallest intersection distance t > EPSILON along the ray, or None."""

    @abstractmethod
    def normal(self, point: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        """Outward surface normal at a point on the surface."""

    @jaxtyped(typechecker=typechecker)
    def hit(self, ray: Ray) -> Optional[HitRecord]:
        distance = self.intersect(ray)
        if distance is None:
            return None
        return HitRecord(distance, ray.at(distance), self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(material={self.material.name}, reflectance={self.reflectance})"

