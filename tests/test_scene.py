import math

import pytest

from raystack.colour import Colour
from raystack.hittable import Ray
from raystack.planar import Plane
from raystack.scene import Light, Scene
from raystack.sphere import Sphere

from conftest import close


class TestLights:
    def test_intensity_and_probability(self, camera):
        scene = Scene(camera)
        small = scene.add_light((0, 0, 5), 1, (0, 0, -1), 10)
        large = scene.add_light((3, 0, 5), 2, (0, 0, -1), 10)
        scene.finalize()
        assert small.intensity == pytest.approx(10 * math.pi)
        assert large.intensity == pytest.approx(40 * math.pi)
        assert small.probability == pytest.approx(0.2)
        assert large.probability == pytest.approx(0.8)

    def test_zero_total_intensity(self, camera):
        scene = Scene(camera)
        light = scene.add_light((0, 0, 5), 1, (0, 0, -1), 0)
        scene.finalize()
        assert light.probability == 0.0

    def test_direction_is_normalized(self):
        light = Light((0, 0, 0), 1.0, (0, 0, -4), 5.0)
        assert close(light.direction, (0, 0, -1))

    def test_finalize_only_counts_own_lights(self, camera):
        first = Scene(camera)
        first.add_light((0, 0, 5), 1, (0, 0, -1), 10)
        first.finalize()
        second = Scene(camera)
        only = second.add_light((0, 0, 5), 1, (0, 0, -1), 1)
        second.finalize()
        assert only.probability == pytest.approx(1.0)


class TestNearestHit:
    def test_nearest_of_several(self, camera):
        far = Sphere((0, 3, 0), 1)
        near = Sphere((0, 0, 0), 1)
        scene = Scene(camera, [far, near])
        hit = scene.nearest_hit(Ray((0, -5, 0), (0, 1, 0)))
        assert hit.shape is near
        assert hit.shape_index == 1
        assert hit.distance == pytest.approx(4)
        assert close(hit.normal, (0, -1, 0))

    def test_ties_keep_first_shape(self, camera):
        a = Plane((0, 0, 0), (0, 0, 1), Colour(1, 1, 1))
        b = Plane((0, 0, 0), (0, 0, 1), Colour(2, 2, 2))
        scene = Scene(camera, [a, b])
        assert scene.nearest_hit(Ray((0, 0, 1), (0, 0, -1))).shape is a

    def test_miss(self, camera):
        scene = Scene(camera, [Sphere((0, 0, 0), 1)])
        assert scene.nearest_hit(Ray((0, -5, 0), (0, -1, 0))) is None

    def test_empty_scene(self, camera):
        assert Scene(camera).nearest_hit(Ray((0, 0, 0), (1, 0, 0))) is None


def test_add_and_extend(camera):
    scene = Scene(camera)
    scene.add(Sphere((0, 0, 0), 1))
    scene.extend([Sphere((3, 0, 0), 1), Plane((0, 0, -1), (0, 0, 1))])
    assert len(scene) == 3
    assert not scene.finalized
    assert scene.finalize() is scene
    assert scene.finalized
