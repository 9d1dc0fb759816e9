"""
I/O utilities for per-zone polygon meshes.

This module writes one zone's faces, together with the full node table, to a
self-contained polygon-mesh file. The native format is a VRML 2.0
IndexedFaceSet:

#VRML V2.0 utf8
Shape {
  geometry IndexedFaceSet {
    coord Coordinate {
      point [
        x0 y0 z0
        ...
      ]
    }
    coordIndex [
      i j k -1
      ...
    ]
  }
}

Face indices in the file are 0-based; the 1-based Fluent index k is written
as k - 1. Other formats are written with meshio.
"""

import logging
import os
import re
from typing import List, Optional, Sequence, Tuple

import numpy as np

from tgridsplit.core.config import NATIVE_FORMAT, ImportConfig
from tgridsplit.mesh.state import FaceZone

# Configure logging
logger = logging.getLogger(__name__)

try:
    import meshio
    MESHIO_AVAILABLE = True
except ImportError:
    MESHIO_AVAILABLE = False
    logger.debug("meshio not available. Install with 'pip install meshio' for non-VRML zone output.")


def _connectivity(faces: Sequence[Sequence[int]], width: int, num_points: int) -> np.ndarray:
    """Convert 1-based face tuples to a 0-based (n, width) array, checking bounds."""
    if not faces:
        return np.zeros((0, width), dtype=np.int64)

    conn = np.asarray(faces, dtype=np.int64).reshape(-1, width) - 1
    if conn.min() < 0 or conn.max() >= num_points:
        bad = conn[(conn < 0) | (conn >= num_points)][0] + 1
        raise ValueError(f"Vertex index {bad} is outside the node table (1..{num_points})")
    return conn


def _ensure_output_dir(filename: str) -> None:
    output_dir = os.path.dirname(os.path.abspath(filename))
    if output_dir and not os.path.exists(output_dir):
        try:
            os.makedirs(output_dir, exist_ok=True)
            logger.info(f"Created output directory: {output_dir}")
        except Exception as e:
            logger.error(f"Failed to create output directory: {e}")
            raise IOError(f"Failed to create output directory: {e}")


def write_zone_polygons(points: np.ndarray, triangles: Sequence[Sequence[int]],
                        quads: Sequence[Sequence[int]], filename: str) -> None:
    """Write one zone to a VRML IndexedFaceSet file.

    Args:
        points: Node coordinates with shape (n, 3), in node-table order
        triangles: Triangles as 1-based vertex index triples
        quads: Quadrilaterals as 1-based vertex index quadruples
        filename: Output filename (will be created or overwritten)

    Raises:
        TypeError: If points is not a numpy array
        ValueError: If there is nothing to write, points has the wrong shape,
            or a face references a node outside the table
        IOError: If the file cannot be written
    """
    if not isinstance(points, np.ndarray):
        raise TypeError("points must be a numpy array")

    if points.size == 0:
        raise ValueError("No nodes to write")

    if len(points.shape) != 2 or points.shape[1] != 3:
        raise ValueError(f"points must have shape (n, 3), got {points.shape}")

    if not triangles and not quads:
        raise ValueError("No faces to write")

    tri = _connectivity(triangles, 3, len(points))
    quad = _connectivity(quads, 4, len(points))

    _ensure_output_dir(filename)
    logger.info(f"Writing zone polygons to {filename}")

    try:
        with open(filename, 'w') as f:
            f.write('#VRML V2.0 utf8\n')
            f.write('Shape {\n')
            f.write('  geometry IndexedFaceSet {\n')
            f.write('    coord Coordinate {\n')
            f.write('      point [\n')
            for x, y, z in points:
                f.write(f'        {x:.12g} {y:.12g} {z:.12g}\n')
            f.write('      ]\n')
            f.write('    }\n')
            f.write('    coordIndex [\n')
            for face in tri:
                f.write(f'      {face[0]} {face[1]} {face[2]} -1\n')
            for face in quad:
                f.write(f'      {face[0]} {face[1]} {face[2]} {face[3]} -1\n')
            f.write('    ]\n')
            f.write('  }\n')
            f.write('}\n')

        logger.info(f"Successfully wrote {len(points)} nodes, {len(tri)} triangles "
                    f"and {len(quad)} quads to {filename}")
    except PermissionError:
        logger.error(f"Permission denied when writing to {filename}")
        raise IOError(f"Permission denied when writing to {filename}")


def write_zone_meshio(points: np.ndarray, triangles: Sequence[Sequence[int]],
                      quads: Sequence[Sequence[int]], filename: str) -> None:
    """Write one zone with meshio; the format follows the file extension.

    Raises:
        ImportError: If meshio is not available
        ValueError: If a face references a node outside the table
        IOError: If meshio cannot write the file
    """
    if not MESHIO_AVAILABLE:
        raise ImportError("meshio is required to write zones in formats other than "
                          f"'{NATIVE_FORMAT}'. Install it with 'pip install meshio'")

    cells = []
    tri = _connectivity(triangles, 3, len(points))
    quad = _connectivity(quads, 4, len(points))
    if len(tri):
        cells.append(("triangle", tri))
    if len(quad):
        cells.append(("quad", quad))

    _ensure_output_dir(filename)
    logger.info(f"Writing zone mesh with meshio to {filename}")
    try:
        meshio.write(filename, meshio.Mesh(points, cells))
    except Exception as e:
        logger.error(f"meshio could not write {filename}: {e}")
        raise IOError(f"meshio could not write {filename}: {e}")


def export_zone(points: np.ndarray, zone: FaceZone, config: ImportConfig) -> Optional[str]:
    """Write a flushed face zone to ``<output_dir>/<prefix><ordinal>.<format>``.

    A zone with no nodes or no faces is degenerate: nothing is written.

    Returns:
        Path of the written file, or None for a degenerate zone
    """
    if len(points) == 0 or zone.num_faces == 0:
        logger.warning(f"Zone {zone.zone_id} is degenerate ({len(points)} nodes, "
                       f"{zone.num_faces} faces); no file written")
        return None

    filename = os.path.join(config.output_dir, config.zone_filename(zone.ordinal))
    if config.output_format == NATIVE_FORMAT:
        write_zone_polygons(points, zone.triangles, zone.quads, filename)
    else:
        write_zone_meshio(points, zone.triangles, zone.quads, filename)
    return filename


def read_zone_polygons(filename: str) -> Tuple[np.ndarray, List[List[int]]]:
    """Read a zone file written by write_zone_polygons.

    Args:
        filename: Path to the VRML zone file

    Returns:
        Tuple of (points with shape (n, 3), faces as lists of 0-based indices)

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file has no point or coordIndex list
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(f"File not found: {filename}")

    with open(filename, 'r') as f:
        content = f.read()

    point_match = re.search(r'point\s*\[(.*?)\]', content, re.DOTALL)
    index_match = re.search(r'coordIndex\s*\[(.*?)\]', content, re.DOTALL)
    if point_match is None or index_match is None:
        raise ValueError(f"{filename} is not a zone polygon file")

    values = point_match.group(1).replace(',', ' ').split()
    if len(values) % 3:
        raise ValueError(f"Point list of {filename} does not hold whole triples")
    points = np.array([float(v) for v in values]).reshape(-1, 3)

    faces = []
    current = []
    for token in index_match.group(1).replace(',', ' ').split():
        index = int(token)
        if index == -1:
            faces.append(current)
            current = []
        else:
            current.append(index)
    if current:
        raise ValueError(f"Last face of {filename} is not terminated by -1")

    logger.debug(f"Read {len(points)} points and {len(faces)} faces from {filename}")
    return points, faces
