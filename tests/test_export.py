#!/usr/bin/env python
"""
Tests for per-zone polygon mesh export.
"""

import os
import sys
import tempfile
import unittest

import numpy as np

# Add the src directory to the path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from tgridsplit.core.config import ImportConfig
from tgridsplit.io.export import (
    MESHIO_AVAILABLE,
    export_zone,
    read_zone_polygons,
    write_zone_polygons,
)
from tgridsplit.mesh.state import FaceZone

SQUARE = np.array([
    [0.0, 0.0, 0.0],
    [1.0, 0.0, 0.0],
    [1.0, 1.0, 0.0],
    [0.0, 1.0, 0.5],
])


class ExportTestCase(unittest.TestCase):

    def setUp(self):
        self._temp = tempfile.TemporaryDirectory()
        self.temp_dir = self._temp.name

    def tearDown(self):
        self._temp.cleanup()


class TestWriteZonePolygons(ExportTestCase):
    """Test the native VRML zone writer."""

    def test_single_triangle(self):
        points = SQUARE[:3]
        path = os.path.join(self.temp_dir, "dom1.wrl")
        write_zone_polygons(points, [(1, 2, 3)], [], path)

        with open(path) as f:
            content = f.read()
        self.assertTrue(content.startswith('#VRML V2.0 utf8'))
        self.assertIn('IndexedFaceSet', content)
        self.assertIn('0 1 2 -1', content)

        read_points, faces = read_zone_polygons(path)
        self.assertEqual(read_points.shape, (3, 3))
        np.testing.assert_allclose(read_points, points)
        self.assertEqual(faces, [[0, 1, 2]])

    def test_triangles_then_quads(self):
        path = os.path.join(self.temp_dir, "dom1.wrl")
        write_zone_polygons(SQUARE, [(1, 2, 3), (1, 3, 4)], [(1, 2, 3, 4)], path)

        read_points, faces = read_zone_polygons(path)
        np.testing.assert_allclose(read_points, SQUARE)
        self.assertEqual(faces, [[0, 1, 2], [0, 2, 3], [0, 1, 2, 3]])

    def test_full_node_table_is_written(self):
        path = os.path.join(self.temp_dir, "dom1.wrl")
        write_zone_polygons(SQUARE, [(2, 3, 4)], [], path)
        read_points, faces = read_zone_polygons(path)
        self.assertEqual(len(read_points), 4)
        self.assertEqual(faces, [[1, 2, 3]])

    def test_index_out_of_range(self):
        path = os.path.join(self.temp_dir, "dom1.wrl")
        with self.assertRaises(ValueError) as ctx:
            write_zone_polygons(SQUARE, [(1, 2, 5)], [], path)
        self.assertIn("5", str(ctx.exception))
        self.assertFalse(os.path.exists(path))

    def test_zero_index_is_rejected(self):
        with self.assertRaises(ValueError):
            write_zone_polygons(SQUARE, [(0, 1, 2)], [], os.path.join(self.temp_dir, "x.wrl"))

    def test_invalid_input(self):
        path = os.path.join(self.temp_dir, "x.wrl")
        with self.assertRaises(TypeError):
            write_zone_polygons(SQUARE.tolist(), [(1, 2, 3)], [], path)
        with self.assertRaises(ValueError):
            write_zone_polygons(np.zeros((0, 3)), [(1, 2, 3)], [], path)
        with self.assertRaises(ValueError):
            write_zone_polygons(SQUARE[:, :2].copy(), [(1, 2, 3)], [], path)
        with self.assertRaises(ValueError):
            write_zone_polygons(SQUARE, [], [], path)

    def test_creates_output_directory(self):
        path = os.path.join(self.temp_dir, "nested", "out", "dom1.wrl")
        write_zone_polygons(SQUARE, [(1, 2, 3)], [], path)
        self.assertTrue(os.path.exists(path))


class TestReadZonePolygons(ExportTestCase):

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            read_zone_polygons(os.path.join(self.temp_dir, "nope.wrl"))

    def test_not_a_zone_file(self):
        path = os.path.join(self.temp_dir, "junk.wrl")
        with open(path, 'w') as f:
            f.write("#VRML V2.0 utf8\nGroup {}\n")
        with self.assertRaises(ValueError):
            read_zone_polygons(path)


class TestExportZone(ExportTestCase):
    """Test zone export dispatch."""

    def make_zone(self, ordinal=1):
        zone = FaceZone(zone_id=3, ordinal=ordinal, bc_code=3)
        zone.triangles.append((1, 2, 3))
        zone.quads.append((1, 2, 3, 4))
        return zone

    def test_native_filename(self):
        config = ImportConfig(output_dir=self.temp_dir)
        path = export_zone(SQUARE, self.make_zone(ordinal=4), config)
        self.assertEqual(path, os.path.join(self.temp_dir, "dom4.wrl"))
        self.assertTrue(os.path.exists(path))

    def test_custom_prefix(self):
        config = ImportConfig(output_dir=self.temp_dir, file_prefix="zone_")
        path = export_zone(SQUARE, self.make_zone(), config)
        self.assertEqual(os.path.basename(path), "zone_1.wrl")

    def test_degenerate_zone(self):
        config = ImportConfig(output_dir=self.temp_dir)
        self.assertIsNone(export_zone(np.zeros((0, 3)), self.make_zone(), config))
        empty = FaceZone(zone_id=3, ordinal=1, bc_code=3)
        self.assertIsNone(export_zone(SQUARE, empty, config))
        self.assertEqual(os.listdir(self.temp_dir), [])

    @unittest.skipUnless(MESHIO_AVAILABLE, "meshio not installed")
    def test_meshio_format(self):
        import meshio

        config = ImportConfig(output_dir=self.temp_dir, output_format=".VTK")
        path = export_zone(SQUARE, self.make_zone(), config)
        self.assertEqual(os.path.basename(path), "dom1.vtk")

        mesh = meshio.read(path)
        self.assertEqual(len(mesh.points), 4)
        cell_types = [block.type for block in mesh.cells]
        self.assertIn("triangle", cell_types)
        self.assertIn("quad", cell_types)
        triangles = mesh.cells_dict["triangle"]
        np.testing.assert_array_equal(triangles[0], [0, 1, 2])

    @unittest.skipIf(MESHIO_AVAILABLE, "meshio is installed")
    def test_meshio_format_without_meshio(self):
        config = ImportConfig(output_dir=self.temp_dir, output_format="vtk")
        with self.assertRaises(ImportError):
            export_zone(SQUARE, self.make_zone(), config)


if __name__ == '__main__':
    unittest.main()
