"""I/O utilities for per-zone polygon meshes and import summaries."""

from tgridsplit.io.export import export_zone, write_zone_polygons, write_zone_meshio, read_zone_polygons
from tgridsplit.io.summary import ImportSummary, ZoneReport, build_summary, export_summary, format_summary

__all__ = [
    "export_zone", "write_zone_polygons", "write_zone_meshio", "read_zone_polygons",
    "ImportSummary", "ZoneReport", "build_summary", "export_summary", "format_summary",
]
