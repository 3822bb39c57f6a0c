import math
from typing import Optional, Union

from jaxtyping import jaxtyped
from typeguard import typechecked as typechecker

Roots = Optional[Union[float, tuple[float, float]]]


@jaxtyped(typechecker=typechecker)
def roots(a: float, half_b: float, c: float) -> Roots:
    """Real roots of a*t^2 + 2*half_b*t + c = 0.

    Returns None when there is no usable solution, a single float when the
    equation degenerates to a linear one, and otherwise the pair of roots with
    the nearer (smaller) one first.
    """
    if a == 0:
        if half_b == 0:
            # c == 0 would make every t a solution, which gives no direction to go on
            return None
        return -c / (2 * half_b)

    discriminant = half_b * half_b - a * c
    if discriminant < 0:
        return None

    discriminant = math.sqrt(discriminant)
    return (-half_b - discriminant) / a, (-half_b + discriminant) / a
