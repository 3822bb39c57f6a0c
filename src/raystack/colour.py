import math
from dataclasses import dataclass

from jaxtyping import jaxtyped
from typeguard import typechecked as typechecker


@dataclass(frozen=True)
class Colour:
    """RGBA colour; r, g, b in [0, 255], a is a blend weight."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def __add__(self, other: "Colour") -> "Colour":
        return Colour(self.r + other.r, self.g + other.g, self.b + other.b, self.a + other.a)

    def scale(self, k: float) -> "Colour":
        return Colour(k * self.r, k * self.g, k * self.b, k * self.a)

    def clamped(self) -> "Colour":
        return Colour(clamp_channel(self.r), clamp_channel(self.g), clamp_channel(self.b), self.a)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.r, self.g, self.b, self.a


def clamp_channel(value: float) -> float:
    if value < 0:
        return 0
    if value > 255:
        return 255
    return value


@jaxtyped(typechecker=typechecker)
def blend(local: Colour, recursive: Colour, reflectance: float) -> Colour:
    """(1 - reflectance) * local + reflectance * recursive, rounded half up and clamped per channel."""
    mixed = local.scale(1 - reflectance) + recursive.scale(reflectance)
    return Colour(*(math.floor(c + 0.5) for c in mixed.as_tuple()[:3]), a=1.0).clamped()


COL_BLACK = Colour(0, 0, 0, 0)
COL_WHITE = Colour(255, 255, 255)
COL_DARK_GREY = Colour(64, 64, 64)
COL_VERY_DARK_GREY = Colour(16, 16, 16)
COL_GREY = Colour(128, 128, 128)
COL_SILVER = Colour(192, 192, 192)
COL_RED = Colour(192, 0, 0)
COL_LIME_GREEN = Colour(112, 160, 0)
COL_YELLOW = Colour(240, 224, 8)
COL_MAUVE = Colour(64, 32, 112)
COL_DEEP_BLUE = Colour(8, 8, 64)
COL_SKY_BLUE = Colour(128, 128, 224)
COL_WARM_GREY = Colour(144, 128, 128)
COL_ORANGE_ORANGE = Colour(224, 124, 32)
COL_GRAPEFRUIT_YELLOW = Colour(248, 210, 112)
COL_DEEP_PINK = Colour(255, 32, 144)
COL_COPPER = Colour(174, 105, 56)
