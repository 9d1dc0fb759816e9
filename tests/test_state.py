#!/usr/bin/env python
"""
Tests for the node table and the face zone lifecycle.
"""

import os
import sys
import unittest

import numpy as np

# Add the src directory to the path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from tgridsplit.core.config import ImportConfig
from tgridsplit.mesh.errors import Diagnostic, FailureKind, FatalDecodeError
from tgridsplit.mesh.state import ZONE_CODES, ZONE_TYPES, NodeTable, ParserState, ZonePhase


class TestNodeTable(unittest.TestCase):
    """Test the growing node table."""

    def test_empty(self):
        table = NodeTable()
        self.assertEqual(len(table), 0)
        self.assertEqual(table.points.shape, (0, 3))

    def test_reserve_keeps_size(self):
        table = NodeTable()
        table.reserve(100)
        self.assertEqual(len(table), 0)

    def test_ensure_size_only_grows(self):
        table = NodeTable()
        table.ensure_size(5)
        table.ensure_size(3)
        self.assertEqual(len(table), 5)
        table.ensure_size(40)
        self.assertEqual(len(table), 40)

    def test_values_survive_growth(self):
        table = NodeTable(2)
        table.ensure_size(2)
        table.set(1, 1.0, 2.0, 3.0)
        table.ensure_size(1000)
        np.testing.assert_array_equal(table.points[1], [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(table.points[999], [0.0, 0.0, 0.0])


class TestZoneLifecycle(unittest.TestCase):
    """Test the IDLE -> ACCUMULATING -> FLUSHED -> IDLE cycle."""

    def setUp(self):
        self.calls = []
        self.state = ParserState(ImportConfig(output_dir="unused"), self._writer)
        self.state.nodes.ensure_size(4)

    def _writer(self, points, zone):
        self.calls.append((len(points), zone.ordinal, zone.num_faces))
        return "written"

    def test_full_cycle(self):
        zone = self.state.begin_zone(7, 3)
        self.assertEqual(self.state.phase, ZonePhase.ACCUMULATING)
        zone.triangles.append((1, 2, 3))
        zone.quads.append((1, 2, 3, 4))

        record = self.state.flush_zone()
        self.assertEqual(self.state.phase, ZonePhase.FLUSHED)
        self.assertEqual(self.calls, [(4, 1, 2)])
        self.assertEqual(record.path, "written")
        self.assertEqual(zone.num_faces, 0)

        self.state.release_zone()
        self.assertEqual(self.state.phase, ZonePhase.IDLE)
        self.assertEqual(self.state.emitted_domains(), [(1, 7)])

    def test_begin_while_accumulating(self):
        self.state.begin_zone(3, 3)
        with self.assertRaises(RuntimeError):
            self.state.begin_zone(4, 3)

    def test_flush_while_idle(self):
        with self.assertRaises(RuntimeError):
            self.state.flush_zone()

    def test_release_drops_unflushed_faces(self):
        zone = self.state.begin_zone(3, 3)
        zone.triangles.append((1, 2, 3))
        self.state.release_zone()
        self.assertEqual(zone.num_faces, 0)
        self.assertEqual(self.state.tally.triangles, 0)
        self.assertEqual(self.state.zones, [])

    def test_ordinals_follow_creation_order(self):
        for zone_id in (9, 4, 9):
            zone = self.state.begin_zone(zone_id, 3)
            zone.triangles.append((1, 2, 3))
            self.state.flush_zone()
            self.state.release_zone()
        self.assertEqual(self.state.emitted_domains(), [(1, 9), (2, 4), (3, 9)])

    def test_failed_writer_still_clears_zone(self):
        def failing(points, zone):
            raise ValueError("bad index")

        self.state.zone_writer = failing
        zone = self.state.begin_zone(3, 3)
        zone.triangles.append((1, 2, 3))
        with self.assertRaises(ValueError):
            self.state.flush_zone()
        self.assertEqual(zone.num_faces, 0)
        self.assertEqual(self.state.tally.triangles, 1)
        self.assertEqual(self.state.emitted_domains(), [])


class TestReporting(unittest.TestCase):

    def test_report_collects_diagnostics(self):
        state = ParserState(ImportConfig(output_dir="unused"), lambda points, zone: None)
        state.report(Diagnostic(FailureKind.HEADER_MISMATCH, "bad", line_number=3, section_id=10))
        self.assertEqual(len(state.diagnostics), 1)
        self.assertEqual(str(state.diagnostics[0]), "[header-mismatch] (section 10, line 3) bad")

    def test_fatal_error_marks_diagnostic(self):
        diagnostic = Diagnostic(FailureKind.FATAL_SHAPE_ERROR, "tag 5")
        error = FatalDecodeError(diagnostic)
        self.assertTrue(error.diagnostic.fatal)
        self.assertIn("tag 5", str(error))


class TestZoneTypes(unittest.TestCase):

    def test_codes_and_names_agree(self):
        self.assertEqual(ZONE_TYPES[2], "interior")
        self.assertEqual(ZONE_TYPES[3], "wall")
        self.assertEqual(ZONE_CODES["velocity-inlet"], 10)
        for code, name in ZONE_TYPES.items():
            self.assertEqual(ZONE_CODES[name], code)


if __name__ == '__main__':
    unittest.main()
