"""
tgridsplit - Fluent surface mesh to per-zone polygon mesh converter.

Reads a Fluent/Tgrid mesh file (.msh) and writes the faces of every boundary
zone to its own polygon-mesh file, together with the zone names and boundary
conditions a meshing host needs to import them as tagged domains.
"""

try:
    from ._version import version as __version__
except ImportError:
    __version__ = "1.0.0.dev0"

from tgridsplit.core.config import ImportConfig, SectionIds
from tgridsplit.mesh.fluent_reader import TgridMeshReader, read_tgrid_mesh, is_fluent_mesh
from tgridsplit.io.summary import ImportSummary, export_summary, format_summary

__all__ = [
    "ImportConfig", "SectionIds",
    "TgridMeshReader", "read_tgrid_mesh", "is_fluent_mesh",
    "ImportSummary", "export_summary", "format_summary",
]
