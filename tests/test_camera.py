import math

import pytest
import torch as t

from raystack.camera import Camera
from raystack.utils import cross, dot, length, vec

from conftest import close


class TestBasis:
    def test_axes(self, camera):
        assert close(camera.w, (0, -1, 0))
        assert close(camera.u, (1, 0, 0))
        assert close(camera.v, (0, 0, 1))

    def test_oblique_basis_is_orthonormal_and_right_handed(self):
        camera = Camera((-3.3, -8, 4.5), (0.4, 1, -0.4), (0, 0, 1), 320, 240)
        for axis in (camera.u, camera.v, camera.w):
            assert length(axis) == pytest.approx(1)
        assert dot(camera.u, camera.v) == pytest.approx(0, abs=1e-12)
        assert dot(camera.v, camera.w) == pytest.approx(0, abs=1e-12)
        assert dot(camera.u, camera.w) == pytest.approx(0, abs=1e-12)
        assert close(cross(camera.u, camera.v), camera.w.tolist())

    def test_looking_at(self):
        camera = Camera.looking_at((0, -5, 0), (0, 0, 0), (0, 0, 1), 16, 12)
        assert close(camera.w, (0, -1, 0))

    def test_field_of_view_scales(self, camera):
        assert camera.fov_scale_width == pytest.approx(math.tan(math.radians(22.5)))
        assert camera.fov_scale_height == pytest.approx(camera.fov_scale_width * 12 / 16)


class TestTransforms:
    def test_uvw_round_trip(self, camera):
        point = vec(1.5, -2.0, 0.25)
        assert close(camera.to_xyz(camera.to_uvw(point)), point.tolist())

    def test_origin_maps_to_zero(self, camera):
        assert close(camera.to_uvw(camera.origin), (0, 0, 0))

    def test_pixel_to_ndc_corners(self, camera):
        assert camera.pixel_to_ndc(0, 0) == (-1, 1)
        assert camera.pixel_to_ndc(16, 12) == (1, -1)
        assert camera.pixel_to_ndc(8, 6) == (0, 0)


class TestRays:
    def test_centre_ray_looks_along_gaze(self, camera):
        ray = camera.ray_for_pixel(8, 6)
        assert close(ray.origin, (0, -5, 0))
        assert close(ray.direction, (0, 1, 0))

    def test_right_of_centre_points_right(self, camera):
        ray = camera.ray_for_pixel(12, 6)
        assert float(ray.direction[0]) > 0
        assert float(ray.direction[2]) == pytest.approx(0, abs=1e-12)

    def test_top_of_image_points_up(self, camera):
        ray = camera.ray_for_pixel(8, 0)
        assert float(ray.direction[2]) > 0

    def test_aperture_moves_origin_within_lens(self):
        camera = Camera((0, -5, 0), (0, 1, 0), (0, 0, 1), 16, 12, aperture=0.1)
        focus = camera.to_xyz(vec(0.0, 0.0, -1.0))
        for _ in range(20):
            ray = camera.ray_through(0.0, 0.0)
            offset = ray.origin - camera.origin
            assert length(offset) <= 0.1 + 1e-12
            assert dot(offset, camera.w) == pytest.approx(0, abs=1e-12)
            # every lens sample still passes through the same point on the image plane
            to_focus = focus - ray.origin
            assert close(ray.direction, (to_focus / t.linalg.norm(to_focus)).tolist())


class TestProjection:
    @pytest.mark.parametrize("x, y", [(3, 4), (8, 6), (0.5, 11.5), (15, 1)])
    def test_inverse_of_ray_for_pixel(self, camera, x, y):
        point = camera.ray_for_pixel(x, y).at(7.0)
        px, py = camera.project_to_canvas(point)
        assert px == pytest.approx(x)
        assert py == pytest.approx(y)

    def test_behind_camera(self, camera):
        assert camera.project_to_canvas(vec(0, -10, 0)) is None
