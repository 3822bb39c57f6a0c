"""raystack: a recursive ray tracer with nested refractive media."""

from raystack.camera import Camera
from raystack.colour import Colour
from raystack.config import RenderConfig
from raystack.exceptions import (
    InvariantViolation,
    MaterialStackUnderflow,
    RayStackError,
    SceneConfigurationError,
)
from raystack.hittable import HitRecord, Ray, Shape
from raystack.integrator import TraceContext, trace
from raystack.materials import Material, MaterialStack, refract
from raystack.planar import Annulus, Disc, Parallelogram, Plane, Triangle
from raystack.quadratic import roots
from raystack.render import Canvas, Renderer, make_tiles, sample_pixel
from raystack.scene import Light, Scene
from raystack.sphere import Cylinder, Hemisphere, Sphere

__version__ = "0.1.0"

__all__ = [
    "Annulus",
    "Camera",
    "Canvas",
    "Colour",
    "Cylinder",
    "Disc",
    "HitRecord",
    "Hemisphere",
    "InvariantViolation",
    "Light",
    "Material",
    "MaterialStack",
    "MaterialStackUnderflow",
    "Parallelogram",
    "Plane",
    "Ray",
    "RayStackError",
    "RenderConfig",
    "Renderer",
    "Scene",
    "SceneConfigurationError",
    "Shape",
    "Sphere",
    "TraceContext",
    "Triangle",
    "make_tiles",
    "refract",
    "roots",
    "sample_pixel",
    "trace",
]
