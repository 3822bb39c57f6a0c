"""Configuration for the raystack engine.

Tunable settings are read from environment variables so a render can be
adjusted without touching code. Engine constants that the shading algorithm
depends on live here too, next to the device the tensors are created on.
"""

import os
from dataclasses import dataclass

import torch as t

# Device / numerics
device = t.device(os.getenv("RAYSTACK_DEVICE", "cuda" if t.cuda.is_available() else "cpu"))
dtype = getattr(t, os.getenv("RAYSTACK_DTYPE", "float64"))

# Geometry tolerances
EPSILON = 1e-6
LITTLE_SPACE = 1e-3  # gap left between touching surfaces by the solid builders

# Tracing budget
MAX_TRACE_DIST = float(os.getenv("RAYSTACK_MAX_TRACE_DIST", "100"))
MAX_DEPTH = int(os.getenv("RAYSTACK_MAX_DEPTH", "20"))
IMPORTANCE_CUTOFF = 0.01
PERTURB_ATTEMPTS = 100
FAR_HIT_DISTANCE = 1e5

# Sampling / scheduling
SUB_SAMPLE = int(os.getenv("RAYSTACK_SUB_SAMPLE", "2"))  # each pixel is a SUB_SAMPLE x SUB_SAMPLE grid
TILE_SIZE = int(os.getenv("RAYSTACK_TILE_SIZE", str(200 // SUB_SAMPLE)))

# Logging
LOG_LEVEL = os.getenv("RAYSTACK_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("RAYSTACK_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")


@dataclass
class RenderConfig:
    """Per-render settings handed to the renderer."""

    max_distance: float = MAX_TRACE_DIST
    max_depth: int = MAX_DEPTH
    sub_sample: int = SUB_SAMPLE
    tile_size: int = TILE_SIZE
    shuffle_tiles: bool = True
    workers: int = 1
    progress: bool = True

    def __post_init__(self):
        if self.sub_sample < 1:
            raise ValueError(f"sub_sample must be >= 1, got {self.sub_sample}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be >= 1, got {self.tile_size}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
