import argparse
import logging
import math
from pathlib import Path

import torch as t

from raystack.camera import Camera
from raystack.colour import (
    COL_BLACK,
    COL_COPPER,
    COL_DARK_GREY,
    COL_DEEP_BLUE,
    COL_DEEP_PINK,
    COL_GRAPEFRUIT_YELLOW,
    COL_ORANGE_ORANGE,
    COL_VERY_DARK_GREY,
    COL_WHITE,
)
from raystack.config import RenderConfig
from raystack.logging_config import setup_logging
from raystack.materials import Material
from raystack.planar import Plane
from raystack.render import Renderer
from raystack.scene import Scene
from raystack.solids import ball, bowl, cuboctahedron, halfball, spotlight

logger = logging.getLogger("raystack.main")


def checkerboard(point, shape):
    # rotated 3.2-unit checks on the floor
    x, y = float(point[0]), float(point[1])
    index = (math.floor((0.6 * x + 0.8 * y + 0.7) / 3.2) + math.floor((0.8 * x - 0.6 * y + 0.2) / 3.2)) & 1
    return (COL_WHITE, COL_BLACK)[index]


def build_scene(width: int, height: int) -> Scene:
    camera = Camera((-3.3, -8, 4.5), (0.4, 1, -0.4), (0, 0, 1), width, height)
    scene = Scene(camera)

    # Floor and walls
    scene.add(Plane((0, 0, 0), (0, 0, 1), checkerboard, 0.6))
    scene.add(Plane((0, 16, 0), (0, -1, 0), COL_VERY_DARK_GREY, 0.02))
    scene.add(Plane((0, -16, 0), (0, 1, 0), COL_VERY_DARK_GREY, 0.02))
    scene.add(Plane((16, 0, 0), (-1, 0, 0), COL_DARK_GREY, 0.02))
    scene.add(Plane((-16, 0, 0), (1, 0, 0), COL_DARK_GREY, 0.02))

    # Water drop, bowl with a ball in it, and a few others
    scene.extend(halfball((0, -1, 1), 0.9, (0, 0, 1), 0.3, None, COL_WHITE, 0.97, None, Material.WATER))
    scene.extend(bowl((-2.3, 1, 1), 1, 0.8, (0, 0, 1), COL_DEEP_BLUE, 0.3))
    scene.extend(ball((-2.3, 1, 0.7), 0.5, COL_GRAPEFRUIT_YELLOW, 0.3))
    scene.extend(ball((1.1, -2.2, 0.3), 0.3, COL_ORANGE_ORANGE, 0.3))
    scene.extend(ball((-0.4, 3.5, 2), 2, COL_COPPER, 0.6))
    scene.extend(cuboctahedron((2.0, -0.5, 0), (1.5, 0, 0), (0, 1.5, 0), (0, 0, 1.5), COL_DEEP_PINK, COL_DARK_GREY, 0.3))

    housing, light = spotlight((3, -2, 1.5), 0.6, (0, 0, 1), 40)
    scene.extend(housing)
    scene.lights.append(light)
    return scene.finalize()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Render the raystack demonstration scene to a PNG file.")
    parser.add_argument("--width", type=int, default=320)
    parser.add_argument("--height", type=int, default=240)
    parser.add_argument("--output", type=Path, default=Path("image.png"))
    parser.add_argument("--sub-sample", type=int, default=RenderConfig.sub_sample)
    parser.add_argument("--max-depth", type=int, default=RenderConfig.max_depth)
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    setup_logging("raystack", args.log_level)
    if args.seed is not None:
        t.manual_seed(args.seed)

    scene = build_scene(args.width, args.height)
    config = RenderConfig(sub_sample=args.sub_sample, max_depth=args.max_depth, workers=args.workers)
    canvas = Renderer(scene, config=config).render()
    canvas.save(args.output)
    logger.info("saved %s", args.output)


if __name__ == "__main__":
    main()
