import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, Union, runtime_checkable

import torch as t
from jaxtyping import Float, jaxtyped
from PIL import Image
from tqdm import tqdm
from typeguard import typechecked as typechecker

from raystack.colour import Colour
from raystack.config import RenderConfig, device, dtype
from raystack.integrator import TraceContext, trace
from raystack.materials import MaterialStack
from raystack.scene import Scene
from raystack.utils import tensor_to_image

logger = logging.getLogger(__name__)

Tile = tuple[int, int]


@runtime_checkable
class PixelSink(Protocol):
    def put_pixel(self, x: int, y: int, colour: Colour) -> None: ...


@runtime_checkable
class PixelSource(Protocol):
    def get_pixel(self, x: int, y: int) -> Colour: ...


class Canvas(PixelSink, PixelSource):
    """In-memory RGBA pixel buffer; rows run top to bottom."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.pixels: Float[t.Tensor, "h w 4"] = t.zeros((height, width, 4), dtype=t.float32, device=device)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    @staticmethod
    def _encode(colour: Colour) -> Float[t.Tensor, "4"]:
        return t.tensor([colour.r, colour.g, colour.b, 255 * colour.a], dtype=t.float32, device=device)

    def put_pixel(self, x: int, y: int, colour: Colour) -> None:
        if self.in_bounds(x, y):
            self.pixels[y, x] = self._encode(colour)

    def get_pixel(self, x: int, y: int) -> Colour:
        if not self.in_bounds(x, y):
            return Colour(0, 0, 0, 0)
        r, g, b, a = self.pixels[y, x].tolist()
        return Colour(r, g, b, a / 255)

    def _probe_splat_size(self, x: int, y: int) -> int:
        # Grow until a randomly probed neighbour is already drawn or off the canvas
        for size in range(100):
            for _ in range(10):
                theta = 2 * math.pi * random.random()
                nx = x + round((size + 1) * math.cos(theta))
                ny = y + round((size + 1) * math.sin(theta))
                if not self.in_bounds(nx, ny):
                    return size + 1
                neighbour = self.get_pixel(nx, ny)
                if neighbour.r or neighbour.g or neighbour.b:
                    return size + 1
        return 100

    def splat(self, colour: Colour, x: int, y: int, size: Optional[int] = None) -> int:
        """Fills a disc around (x, y), sized from already drawn neighbours unless given.

        Gives a quick preview while an image is still sparse. Returns the size used.
        """
        if size is None:
            size = self._probe_splat_size(x, y)
        if size <= 1:
            self.put_pixel(x, y, colour)
            return size

        ys = t.arange(self.height, device=device).view(-1, 1)
        xs = t.arange(self.width, device=device).view(1, -1)
        mask = (xs - x) ** 2 + (ys - y) ** 2 <= size * size
        self.pixels[mask] = self._encode(colour)
        return size

    def to_image(self) -> Image.Image:
        return tensor_to_image(self.pixels)

    def save(self, path: Union[str, Path]) -> None:
        self.to_image().save(path)


@jaxtyped(typechecker=typechecker)
def sample_pixel(
    scene: Scene,
    canvas_x: int,
    canvas_y: int,
    sub_sample: int,
    max_distance: float,
    max_depth: int,
    context: Optional[TraceContext] = None,
) -> Colour:
    """Average of a sub_sample x sub_sample grid of jittered primary rays, floored per channel.

    Dropped samples add nothing but still count towards the divisor.
    """
    camera = scene.camera
    total = Colour(0.0, 0.0, 0.0, 0.0)
    for sub_y in range(sub_sample):
        for sub_x in range(sub_sample):
            jitter_x, jitter_y = t.rand(2, dtype=dtype).tolist()
            ray = camera.ray_for_pixel(
                canvas_x + (sub_x + jitter_x) / sub_sample,
                canvas_y + (sub_y + jitter_y) / sub_sample,
            )
            colour = trace(scene, ray, max_distance, max_depth, 1.0, MaterialStack(), context)
            if colour is not None:
                total = total + colour

    n = sub_sample * sub_sample
    return Colour(math.floor(total.r / n), math.floor(total.g / n), math.floor(total.b / n), total.a / n)


def make_tiles(width: int, height: int, tile_size: int, shuffle: bool = True) -> List[Tile]:
    """Top-left corners of fixed-size regions covering the image, shuffled once if asked."""
    tiles = [
        (x * tile_size, y * tile_size)
        for y in range(math.ceil(height / tile_size))
        for x in range(math.ceil(width / tile_size))
    ]
    if shuffle:
        random.shuffle(tiles)
    return tiles


class Renderer:
    """Drives per-pixel sampling over tiles and commits results to a pixel sink.

    Tiles are independent, so a host may stop iterating iter_render() at any
    point to cancel, or render with several workers for throughput.
    """

    def __init__(self, scene: Scene, sink: Optional[PixelSink] = None, config: Optional[RenderConfig] = None):
        self.scene = scene
        self.config = config if config is not None else RenderConfig()
        self.sink = sink if sink is not None else Canvas(scene.camera.width, scene.camera.height)
        self.context = TraceContext()
        if not scene.finalized:
            scene.finalize()

    @property
    def width(self) -> int:
        return self.scene.camera.width

    @property
    def height(self) -> int:
        return self.scene.camera.height

    def render_pixel(self, x: int, y: int, context: Optional[TraceContext] = None) -> Colour:
        colour = sample_pixel(
            self.scene, x, y, self.config.sub_sample, self.config.max_distance, self.config.max_depth,
            context if context is not None else self.context,
        )
        self.sink.put_pixel(x, y, colour)
        return colour

    def render_tile(self, tile: Tile, context: Optional[TraceContext] = None) -> Tile:
        x0, y0 = tile
        size = self.config.tile_size
        for y in range(y0, min(y0 + size, self.height)):
            for x in range(x0, min(x0 + size, self.width)):
                self.render_pixel(x, y, context)
        return tile

    def tiles(self) -> List[Tile]:
        return make_tiles(self.width, self.height, self.config.tile_size, self.config.shuffle_tiles)

    def iter_render(self, tiles: Optional[List[Tile]] = None) -> Iterator[Tile]:
        """Renders one tile at a time, yielding after each so the caller stays responsive."""
        for tile in tiles if tiles is not None else self.tiles():
            yield self.render_tile(tile)

    def render(self) -> PixelSink:
        tiles = self.tiles()
        logger.info(
            "rendering %dx%d in %d tiles (sub-sample %d, depth %d, %d worker(s))",
            self.width, self.height, len(tiles), self.config.sub_sample, self.config.max_depth, self.config.workers,
        )
        progress = tqdm(total=len(tiles), disable=not self.config.progress, unit="tile")
        if self.config.workers == 1:
            for _ in self.iter_render(tiles):
                progress.update(1)
        else:
            contexts = [TraceContext() for _ in tiles]
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                futures = [pool.submit(self.render_tile, tile, ctx) for tile, ctx in zip(tiles, contexts)]
                for future in as_completed(futures):
                    future.result()
                    progress.update(1)
            for ctx in contexts:
                self.context.merge(ctx)
        progress.close()
        self._log_summary()
        return self.sink

    def retrace_pixel(self, x: int, y: int, record_paths: bool = False) -> TraceContext:
        """Re-evaluates a single pixel at full quality, optionally recording every ray segment."""
        context = TraceContext(record_paths=record_paths)
        self.render_pixel(x, y, context)
        self.context.merge(context)
        return context

    def retrace_disc(self, centre_x: int, centre_y: int, radius: Optional[int] = None) -> int:
        """Re-evaluates every pixel within `radius` of a point, e.g. under a moving pointer."""
        if radius is None:
            radius = 50 // self.config.sub_sample
        count = 0
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                x, y = centre_x - dx, centre_y - dy
                if dx * dx + dy * dy <= radius * radius and 0 <= x < self.width and 0 <= y < self.height:
                    self.render_pixel(x, y)
                    count += 1
        return count

    def _log_summary(self) -> None:
        ctx = self.context
        logger.info("traced %d rays", ctx.rays_traced)
        if ctx.inside_opaque_hits or ctx.stack_underflows:
            logger.warning(
                "scene inconsistencies: %d ray(s) inside opaque shapes, %d material stack underflow(s)",
                ctx.inside_opaque_hits, ctx.stack_underflows,
            )
