import pytest

from raystack.config import LITTLE_SPACE
from raystack.hittable import Ray
from raystack.planar import Annulus, Disc, Parallelogram
from raystack.scene import Light
from raystack.solids import ball, bowl, box, cuboctahedron, halfball, prism, spotlight
from raystack.sphere import Hemisphere, Sphere
from raystack.utils import as_vec, dot

from conftest import close


def assert_faces_point_outwards(faces, centre):
    centre = as_vec(centre)
    for face in faces:
        inside_face = face.vtx_a + (face.edge_ab + face.edge_ac) / 3
        assert dot(inside_face - centre, face.normal_dir) > 0, face


class TestBall:
    def test_shrunk_by_little_space(self):
        (sphere,) = ball((0, 0, 1), 1)
        assert isinstance(sphere, Sphere)
        assert sphere.radius == pytest.approx(1 - LITTLE_SPACE)

    def test_resting_ball_does_not_touch_floor(self):
        (sphere,) = ball((0, 0, 1), 1)
        assert sphere.intersect(Ray((0, 0, 1), (0, 0, -1))) < 1


class TestHalfball:
    def test_dome_and_cap(self):
        shapes = halfball((0, 0, 1), 1, (0, 0, 1))
        assert [type(s) for s in shapes] == [Hemisphere, Disc]
        dome, cap = shapes
        assert close(dome.normal_dir, (0, 0, -1))
        assert close(cap.normal_dir, (0, 0, 1))

    def test_truncated_both_ends(self):
        shapes = halfball((0, 0, 0), 1, (0, 0, 1), 0.2, 0.8)
        assert [type(s) for s in shapes] == [Hemisphere, Disc, Disc]
        assert close(shapes[2].normal_dir, (0, 0, -1))

    def test_closed_from_outside(self):
        shapes = halfball((0, 0, 0), 1, (0, 0, 1))
        hits = [s.intersect(Ray((0.3, 0, 5), (0, 0, -1))) for s in shapes]
        assert hits[0] is None or hits[0] > hits[1]
        assert hits[1] == pytest.approx(5 + LITTLE_SPACE)


class TestBowl:
    def test_parts(self):
        outer, inner, rim = bowl((0, 0, 1), 1, 0.8, (0, 0, 1))
        assert outer.convex and not inner.convex
        assert isinstance(rim, Annulus)
        assert outer.radius == pytest.approx(1 - LITTLE_SPACE)
        assert inner.radius == pytest.approx(0.8 + LITTLE_SPACE)

    def test_looking_in_sees_concave_inside(self):
        _, inner, _ = bowl((0, 0, 1), 1, 0.8, (0, 0, 1))
        hit = inner.hit(Ray((0, 0, 5), (0, 0, -1)))
        assert hit is not None
        assert close(hit.normal, (0, 0, 1))


class TestPolyhedra:
    def test_box(self):
        faces = box((0, 0, 0), (2, 0, 0), (0, 1, 0), (0, 0, 3))
        assert len(faces) == 6
        assert all(isinstance(f, Parallelogram) for f in faces)
        assert_faces_point_outwards(faces, (1, 0.5, 1.5))

    def test_box_is_inset(self):
        faces = box((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1))
        distances = [f.intersect(Ray((0.5, 0.5, 5), (0, 0, -1))) for f in faces]
        hits = sorted(d for d in distances if d is not None)
        assert hits == [pytest.approx(4 + LITTLE_SPACE), pytest.approx(5 - LITTLE_SPACE)]

    def test_prism(self):
        faces = prism((0, 0, 0), (1, 0, 0), (0.5, 1, 0), (0, 0, 2))
        assert sum(isinstance(f, Parallelogram) for f in faces) == 3
        assert len(faces) == 5
        assert_faces_point_outwards(faces, (0.5, 1 / 3, 1))

    def test_cuboctahedron(self):
        faces = cuboctahedron((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1), reflectance=0.3)
        squares = [f for f in faces if isinstance(f, Parallelogram)]
        assert len(faces) == 14
        assert len(squares) == 6
        assert all(f.reflectance == pytest.approx(0.3) for f in faces)
        assert_faces_point_outwards(faces, (0.5, 0.5, 0.5))

    def test_cuboctahedron_corners_are_cut(self):
        faces = cuboctahedron((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1))
        ray = Ray((-1, -1, -1), (1, 1, 1))
        nearest = min(d for d in (f.intersect(ray) for f in faces) if d is not None)
        # the corner triangle sits where the cube corner used to be, halfway along each edge
        assert float(ray.at(nearest).sum()) == pytest.approx(0.5, abs=0.01)


def test_spotlight():
    shapes, light = spotlight((0, 0, 2), 0.5, (0, 0, -1), 40)
    assert len(shapes) == 3
    assert all(s.reflectance == pytest.approx(0.7) for s in shapes)
    assert isinstance(light, Light)
    assert close(light.centre, (0, 0, 2.05))
    assert light.radius == 0.5
    assert close(light.direction, (0, 0, -1))
    assert isinstance(shapes[1], Hemisphere) and isinstance(shapes[2], Annulus)
