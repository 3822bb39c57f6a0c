import math
from typing import Optional

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from raystack.hittable import Ray
from raystack.utils import VectorLike, as_vec, cross, degrees_to_radians, disc_sample, normalize


class Camera:
    """Pinhole camera with an orthonormal view basis.

    View space has the camera at the origin looking down -w, with u to the
    right and v up. A pixel maps to normalised device coordinates in
    [-1, 1] and then onto the image plane w = -1, scaled by the field of view.
    """

    def __init__(
        self,
        origin: VectorLike,
        gaze: VectorLike,
        up: VectorLike,
        width: int,
        height: int,
        field_of_view: float = 45.0,  # horizontal, in degrees
        aperture: float = 0.0,
    ):
        self.origin: Float[t.Tensor, "3"] = as_vec(origin)
        self.width: int = width
        self.height: int = height
        self.field_of_view: float = field_of_view
        self.aperture: float = aperture

        fov_radians: float = degrees_to_radians(field_of_view / 2)
        self.fov_scale_width: float = math.tan(fov_radians)
        self.fov_scale_height: float = self.fov_scale_width * height / width

        # Calculate camera basis vectors
        self.up: Float[t.Tensor, "3"] = as_vec(up)
        self.w: Float[t.Tensor, "3"] = normalize(-as_vec(gaze))
        self.u: Float[t.Tensor, "3"] = normalize(cross(self.up, self.w))
        self.v: Float[t.Tensor, "3"] = cross(self.w, self.u)

    @classmethod
    def looking_at(
        cls,
        look_from: VectorLike,
        look_at: VectorLike,
        up: VectorLike,
        width: int,
        height: int,
        field_of_view: float = 45.0,
        aperture: float = 0.0,
    ) -> "Camera":
        gaze = as_vec(look_at) - as_vec(look_from)
        return cls(look_from, gaze, up, width, height, field_of_view, aperture)

    @jaxtyped(typechecker=typechecker)
    def to_uvw(self, xyz: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        trans_xyz = xyz - self.origin
        return t.stack([t.dot(trans_xyz, self.u), t.dot(trans_xyz, self.v), t.dot(trans_xyz, self.w)])

    @jaxtyped(typechecker=typechecker)
    def to_xyz(self, uvw: Float[t.Tensor, "3"]) -> Float[t.Tensor, "3"]:
        return self.origin + uvw[0] * self.u + uvw[1] * self.v + uvw[2] * self.w

    def pixel_to_ndc(self, canvas_x: float, canvas_y: float) -> tuple[float, float]:
        u = canvas_x * 2 / self.width - 1
        v = -(canvas_y * 2 / self.height - 1)
        return u, v

    @jaxtyped(typechecker=typechecker)
    def ray_through(self, ndc_u: float, ndc_v: float) -> Ray:
        """Primary ray through a point given in normalised device coordinates."""
        uvw = as_vec((ndc_u * self.fov_scale_width, ndc_v * self.fov_scale_height, -1.0))
        xyz = self.to_xyz(uvw)
        origin = self.origin
        if self.aperture > 0:
            # Thin-lens sampling; needs heavy sub-sampling to avoid graininess
            du, dv = disc_sample(self.aperture)
            origin = self.to_xyz(as_vec((du, dv, 0.0)))
        return Ray(origin, xyz - origin)

    def ray_for_pixel(self, canvas_x: float, canvas_y: float) -> Ray:
        return self.ray_through(*self.pixel_to_ndc(canvas_x, canvas_y))

    @jaxtyped(typechecker=typechecker)
    def project_to_canvas(self, xyz: Float[t.Tensor, "3"]) -> Optional[tuple[float, float]]:
        """Canvas position of a world point, or None when it is behind the camera."""
        uvw = self.to_uvw(xyz)
        w = float(uvw[2])
        if w >= 0:
            return None
        # project onto plane w = -1
        u = -float(uvw[0]) / w / self.fov_scale_width
        v = -float(uvw[1]) / w / self.fov_scale_height
        return (u + 1) * self.width / 2, (-v + 1) * self.height / 2

    def __repr__(self) -> str:
        return (
            f"Camera(origin={self.origin.tolist()}, gaze={(-self.w).tolist()}, "
            f"{self.width}x{self.height}, fov={self.field_of_view})"
        )

