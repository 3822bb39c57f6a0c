"""Compound solids built from primitives.

Unlike the primitives, which are exact, every builder here pulls its faces
in by LITTLE_SPACE so that solids resting on a floor or on each other never
share a surface. Faces are oriented with their normals pointing out of the
solid, which the refraction bookkeeping relies on for transmissive solids.
"""

import math
from typing import List, Optional

from raystack.colour import COL_COPPER, Colour
from raystack.config import LITTLE_SPACE
from raystack.hittable import Appearance, Shape
from raystack.materials import Material
from raystack.planar import Annulus, Disc, Parallelogram, Triangle
from raystack.scene import Light
from raystack.sphere import Hemisphere, Sphere
from raystack.utils import VectorLike, as_vec, length, normalize


def _shrink(vtx_a: VectorLike, *edges: VectorLike):
    """Moves the corner inwards along every edge and shortens the edges to match."""
    vtx = as_vec(vtx_a)
    units = [normalize(as_vec(e)) for e in edges]
    for unit in units:
        vtx = vtx + LITTLE_SPACE * unit
    shrunk = [as_vec(e) - 2 * LITTLE_SPACE * unit for e, unit in zip(edges, units)]
    return vtx, shrunk


def ball(
    centre: VectorLike,
    radius: float,
    appearance: Optional[Appearance] = None,
    reflectance: Optional[float] = None,
    specular: Optional[float] = None,
    material: Material = Material.OPAQUE,
) -> List[Shape]:
    return [Sphere(centre, radius - LITTLE_SPACE, appearance, reflectance, specular, material)]


def halfball(
    centre: VectorLike,
    radius: float,
    normal_dir: VectorLike,
    truncate_min: Optional[float] = None,
    truncate_max: Optional[float] = None,
    appearance: Optional[Appearance] = None,
    reflectance: Optional[float] = None,
    specular: Optional[float] = None,
    material: Material = Material.OPAQUE,
) -> List[Shape]:
    """Hemisphere closed by a flat cap; `normal_dir` points out of the cap, away from the dome."""
    centre = as_vec(centre)
    n = normalize(as_vec(normal_dir))
    r = radius - LITTLE_SPACE
    adj_min = LITTLE_SPACE if truncate_min is None else truncate_min + LITTLE_SPACE
    adj_max = None if truncate_max is None else truncate_max - LITTLE_SPACE

    shapes: List[Shape] = [
        Hemisphere(centre, r, -n, adj_min, adj_max, True, appearance, reflectance, specular, material),
        Disc(centre - adj_min * n, math.sqrt(r**2 - adj_min**2), n, appearance, reflectance, specular, material),
    ]
    if truncate_max is not None and truncate_max < radius:
        # cap the far end as well
        shapes.append(
            Disc(centre - adj_max * n, math.sqrt(r**2 - adj_max**2), -n, appearance, reflectance, specular, material)
        )
    return shapes


def bowl(
    centre: VectorLike,
    outer_radius: float,
    inner_radius: float,
    normal_dir: VectorLike,
    appearance: Optional[Appearance] = None,
    reflectance: Optional[float] = None,
    specular: Optional[float] = None,
    material: Material = Material.OPAQUE,
) -> List[Shape]:
    """Thick-walled hemispherical bowl; `normal_dir` points from the bottom towards the rim."""
    n = normalize(as_vec(normal_dir))
    outer = outer_radius - LITTLE_SPACE
    inner = inner_radius + LITTLE_SPACE
    return [
        Hemisphere(centre, outer, -n, 0.0, None, True, appearance, reflectance, specular, material),
        Hemisphere(centre, inner, -n, 0.0, None, False, appearance, reflectance, specular, material),
        Annulus(centre, outer, inner, n, appearance, reflectance, specular, material),
    ]


def box(
    vtx_a: VectorLike,
    edge_ab: VectorLike,
    edge_ac: VectorLike,
    edge_ad: VectorLike,
    appearance: Optional[Appearance] = None,
    reflectance: Optional[float] = None,
    specular: Optional[float] = None,
    material: Material = Material.OPAQUE,
) -> List[Shape]:
    """Parallelepiped spanned by three edges from vertex A."""
    adj_a, (ab, ac, ad) = _shrink(vtx_a, edge_ab, edge_ac, edge_ad)
    opp = adj_a + ab + ac + ad
    args = (appearance, reflectance, specular, material)
    return [
        Parallelogram(adj_a, ac, ab, *args),
        Parallelogram(adj_a, ad, ac, *args),
        Parallelogram(adj_a, ab, ad, *args),
        Parallelogram(opp, -ab, -ac, *args),
        Parallelogram(opp, -ac, -ad, *args),
        Parallelogram(opp, -ad, -ab, *args),
    ]


def prism(
    vtx_a: VectorLike,
    edge_ab: VectorLike,
    edge_ac: VectorLike,
    edge_ad: VectorLike,
    appearance: Optional[Appearance] = None,
    reflectance: Optional[float] = None,
    specular: Optional[float] = None,
    material: Material = Material.OPAQUE,
) -> List[Shape]:
    """Triangular prism: ABC is the triangular end, ABD the rectangular base."""
    adj_a, (ab, ac, ad) = _shrink(vtx_a, edge_ab, edge_ac, edge_ad)
    opp = adj_a + ac + ad
    ca = -ac
    cb = ca + ab
    da = -ad
    args = (appearance, reflectance, specular, material)
    return [
        Triangle(adj_a, ac, ab, *args),
        Parallelogram(adj_a, ad, ac, *args),
        Parallelogram(adj_a, ab, ad, *args),
        Triangle(opp, ca, cb, *args),
        Parallelogram(opp, cb, da, *args),
    ]


def cuboctahedron(
    chopped_vtx_a: VectorLike,
    edge_ab: VectorLike,
    edge_ac: VectorLike,
    edge_ad: VectorLike,
    square_appearance: Optional[Appearance] = None,
    triangle_appearance: Optional[Appearance] = None,
    reflectance: Optional[float] = None,
    specular: Optional[float] = None,
    material: Material = Material.OPAQUE,
) -> List[Shape]:
    """Cube spanned by three edges with every corner cut off at the edge midpoints.

    A is the (chopped) down-south-west corner; AB runs east, AC north and AD up.
    """
    ab, ac, ad = as_vec(edge_ab), as_vec(edge_ac), as_vec(edge_ad)
    len_ab, len_ac, len_ad = length(ab), length(ac), length(ad)
    adj_a = as_vec(chopped_vtx_a) + LITTLE_SPACE * (normalize(ab) + normalize(ac) + normalize(ad))

    def step(edge, edge_length):
        return (1 - 2 * LITTLE_SPACE / edge_length) * edge

    # twelve vertices: up/down and the compass points; A is down-south-west
    ds = adj_a + (0.5 - LITTLE_SPACE / len_ab) * ab
    dw = adj_a + (0.5 - LITTLE_SPACE / len_ac) * ac
    dn = ds + step(ac, len_ac)
    de = dw + step(ab, len_ab)

    sw = adj_a + (0.5 - LITTLE_SPACE / len_ad) * ad
    nw = sw + step(ac, len_ac)
    ne = nw + step(ab, len_ab)
    se = sw + step(ab, len_ab)

    un = dn + step(ad, len_ad)
    ue = de + step(ad, len_ad)
    us = ds + step(ad, len_ad)
    uw = dw + step(ad, len_ad)

    sq = (square_appearance, reflectance, specular, material)
    tri = (triangle_appearance, reflectance, specular, material)
    return [
        Parallelogram(ds, dw - ds, de - ds, *sq),
        Parallelogram(ne, dn - ne, un - ne, *sq),
        Parallelogram(se, de - se, ue - se, *sq),
        Parallelogram(sw, ds - sw, us - sw, *sq),
        Parallelogram(nw, dw - nw, uw - nw, *sq),
        Parallelogram(us, ue - us, uw - us, *sq),
        Triangle(dn, ne - dn, de - dn, *tri),
        Triangle(de, se - de, ds - de, *tri),
        Triangle(ds, sw - ds, dw - ds, *tri),
        Triangle(dw, nw - dw, dn - dw, *tri),
        Triangle(un, ue - un, ne - un, *tri),
        Triangle(ue, us - ue, se - ue, *tri),
        Triangle(us, uw - us, sw - us, *tri),
        Triangle(uw, un - uw, nw - uw, *tri),
    ]


def spotlight(
    centre: VectorLike,
    radius: float,
    direction: VectorLike,
    wattage: float,
    housing: Colour = COL_COPPER,
) -> tuple[List[Shape], Light]:
    """Copper bowl housing with a disc emitter set just inside its rim."""
    centre = as_vec(centre)
    n = normalize(as_vec(direction))
    shapes = bowl(centre, 1.25 * radius, radius, n, housing, 0.7, 0.7, Material.OPAQUE)
    light = Light(centre - 0.1 * radius * n, float(radius), n, float(wattage))
    return shapes, light
