"""Pytest configuration and shared fixtures."""

import random

import pytest
import torch as t

from raystack.camera import Camera
from raystack.colour import Colour
from raystack.scene import Scene
from raystack.sphere import Sphere

SPHERE_COLOUR = Colour(10, 200, 30)


def close(v, expected, tol=1e-6):
    return t.allclose(v, t.as_tensor(expected, dtype=v.dtype), atol=tol)


@pytest.fixture(autouse=True)
def seeded_rng():
    """Makes every test reproducible."""
    t.manual_seed(1234)
    random.seed(1234)


@pytest.fixture
def camera():
    """Camera on the -y axis looking at the origin, z up."""
    return Camera((0, -5, 0), (0, 1, 0), (0, 0, 1), 16, 12)


@pytest.fixture
def sphere_scene(camera):
    """Single matte unit sphere at the origin."""
    return Scene(camera, [Sphere((0, 0, 0), 1.0, SPHERE_COLOUR, reflectance=0.0)]).finalize()
