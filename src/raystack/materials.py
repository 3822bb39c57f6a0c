import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from raystack.exceptions import MaterialStackUnderflow, SceneConfigurationError
from raystack.utils import dot, reflect

logger = logging.getLogger(__name__)


class Material(IntEnum):
    AIR = 0
    OPAQUE = 1
    GLASS = 2
    WATER = 3


# Indices of refraction; OPAQUE has none because it never transmits
REFRACTIVE_INDEX: dict[Material, Optional[float]] = {
    Material.AIR: 1.0,
    Material.OPAQUE: None,
    Material.GLASS: 1.5,
    Material.WATER: 1.33,
}

# Reflectance used when a shape omits its own
DEFAULT_REFLECTANCE: dict[Material, float] = {
    Material.AIR: 0.0,
    Material.OPAQUE: 0.2,
    Material.GLASS: 1.0,
    Material.WATER: 1.0,
}

# Specular share of the reflectance; the remainder is Lambertian
DEFAULT_SPECULAR: dict[Material, float] = {
    Material.AIR: 0.0,
    Material.OPAQUE: 0.5,
    Material.GLASS: 1.0,
    Material.WATER: 1.0,
}


def is_transmissive(material: Material) -> bool:
    return REFRACTIVE_INDEX[material] is not None


def refractive_index(material: Material) -> float:
    index = REFRACTIVE_INDEX[material]
    if index is None:
        raise SceneConfigurationError(f"{material.name} does not transmit light and has no refractive index")
    return index


@dataclass(frozen=True)
class MaterialStack:
    """Transmissive media the current ray path is inside, innermost last.

    The bottom entry is the ambient medium and is never removed. Stacks are
    immutable: push and pop hand back new stacks, so sibling branches of the
    same hit cannot see each other's entries and exits.
    """

    media: tuple[Material, ...] = (Material.AIR,)

    def __post_init__(self):
        if not self.media:
            raise MaterialStackUnderflow("a material stack needs at least the ambient medium")

    @property
    def top(self) -> Material:
        return self.media[-1]

    @property
    def below_top(self) -> Optional[Material]:
        return self.media[-2] if len(self.media) > 1 else None

    @property
    def depth(self) -> int:
        return len(self.media) - 1

    def push(self, material: Material) -> "MaterialStack":
        if not is_transmissive(material):
            raise SceneConfigurationError(f"cannot enter {material.name} as a medium")
        return MaterialStack(self.media + (material,))

    def pop(self) -> "MaterialStack":
        if len(self.media) == 1:
            raise MaterialStackUnderflow(f"cannot exit the ambient medium {self.top.name}")
        return MaterialStack(self.media[:-1])

    def __len__(self) -> int:
        return len(self.media)


@dataclass(frozen=True)
class Refraction:
    direction: Float[t.Tensor, "3"]
    stack: MaterialStack
    total_internal_reflection: bool
    underflow: bool = False


@jaxtyped(typechecker=typechecker)
def refract(
    direction: Float[t.Tensor, "3"],
    normal: Float[t.Tensor, "3"],
    stack: MaterialStack,
    material: Material,
) -> Refraction:
    """Snell's law at a transmissive surface whose normal points outwards.

    Entering (cos_theta1 > 0) goes from the medium on top of the stack into
    `material`; exiting goes from the top into the medium below it. Total
    internal reflection continues as a mirror reflection with the stack
    unchanged.
    """
    cos_theta1 = -dot(direction, normal)
    entering = cos_theta1 > 0

    eta1 = refractive_index(stack.top)
    underflow = False
    if entering:
        eta2 = refractive_index(material)
    elif stack.below_top is None:
        # Overlapping or inconsistent transmissive geometry; carry on as if exiting into air
        underflow = True
        eta2 = refractive_index(Material.AIR)
        logger.warning("material stack underflow exiting %s; falling back to air", material.name)
    else:
        eta2 = refractive_index(stack.below_top)

    eta_ratio = eta1 / eta2
    cos_theta2_sq = 1 - eta_ratio * eta_ratio * (1 - cos_theta1 * cos_theta1)
    if cos_theta2_sq < 0:
        return Refraction(reflect(direction, normal), stack, True, underflow)

    # Normal is fixed outward, so the transmitted term flips sign with the side we come from
    plus_minus = 1.0 if entering else -1.0
    refract_dir = eta_ratio * direction + (eta_ratio * cos_theta1 - plus_minus * math.sqrt(cos_theta2_sq)) * normal

    if entering:
        new_stack = stack.push(material)
    elif underflow:
        new_stack = stack
    else:
        new_stack = stack.pop()
    return Refraction(refract_dir, new_stack, False, underflow)
