"""
Import summary for a Fluent surface mesh conversion.

The summary is what a downstream importer consumes: the ordered list of
written domains, the zone metadata table and the reported problems.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from tgridsplit.mesh.errors import Diagnostic, FailureKind
from tgridsplit.mesh.state import MISSING, ParserState, ZoneMetadata

logger = logging.getLogger(__name__)


@dataclass
class ZoneReport:
    """One face zone that produced faces, joined with its metadata."""

    ordinal: int
    zone_id: int
    name: str
    boundary_condition: str
    bc_code: Optional[int]
    is_baffle: bool
    triangles: int
    quads: int
    path: Optional[str]

    @property
    def has_metadata(self) -> bool:
        return self.name != MISSING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ordinal": self.ordinal,
            "zone_id": self.zone_id,
            "name": self.name,
            "boundary_condition": self.boundary_condition,
            "bc_code": self.bc_code,
            "is_baffle": self.is_baffle,
            "triangles": self.triangles,
            "quads": self.quads,
            "path": self.path,
        }


@dataclass
class ImportSummary:
    """Totals and per-zone results of one import.

    Attributes:
        mesh_file: Input file path
        nodes: Size of the node table
        triangles: Triangles read across all exported zones
        quads: Quadrilaterals read across all exported zones
        zones_created: Face zones started (non-interior face sections)
        declared_cells: Cell count declared by the file, if any
        dimension: Grid dimension declared by the file, if any
        zones: Zones that produced faces, in encounter order
        zone_metadata: Zone id -> metadata for every zone-info section read
        diagnostics: Reported problems, including the final verdict
    """

    mesh_file: str
    nodes: int = 0
    triangles: int = 0
    quads: int = 0
    zones_created: int = 0
    declared_cells: Optional[int] = None
    dimension: Optional[int] = None
    zones: List[ZoneReport] = field(default_factory=list)
    zone_metadata: Dict[int, ZoneMetadata] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def failures(self) -> List[Diagnostic]:
        """Problems that make the import count as failed."""
        return [d for d in self.diagnostics
                if d.fatal or d.kind in (FailureKind.UNSUPPORTED_DIMENSION, FailureKind.EMPTY_RESULT)]

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def domains(self) -> List[Tuple[int, int]]:
        """(ordinal, zone id) of every written zone file, in order."""
        return [(zone.ordinal, zone.zone_id) for zone in self.zones if zone.path]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mesh_file": self.mesh_file,
            "success": self.success,
            "nodes": self.nodes,
            "triangles": self.triangles,
            "quads": self.quads,
            "zones_created": self.zones_created,
            "declared_cells": self.declared_cells,
            "dimension": self.dimension,
            "domains": [list(pair) for pair in self.domains],
            "zones": [zone.to_dict() for zone in self.zones],
            "zone_metadata": {
                str(zone_id): {
                    "name": meta.name,
                    "boundary_condition": meta.bc_type,
                    "bc_code": meta.bc_code,
                    "is_baffle": meta.is_baffle,
                }
                for zone_id, meta in sorted(self.zone_metadata.items())
            },
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


def build_summary(state: ParserState, mesh_file: str) -> ImportSummary:
    """Join flushed zones with zone metadata and apply the empty-result check.

    Zone-info sections may come before or after the face sections they
    describe, so the join happens here, after the whole file has been read.
    """
    summary = ImportSummary(
        mesh_file=mesh_file,
        nodes=len(state.nodes),
        triangles=state.tally.triangles,
        quads=state.tally.quads,
        zones_created=state.tally.zones,
        declared_cells=state.declared_cells,
        dimension=state.dimension,
        zone_metadata=dict(state.zone_metadata),
    )

    for record in state.zones:
        meta = state.zone_metadata.get(record.zone_id)
        if meta is None:
            logger.warning(f"No zone-info section for face zone {record.zone_id}")
        summary.zones.append(ZoneReport(
            ordinal=record.ordinal,
            zone_id=record.zone_id,
            name=meta.name if meta else MISSING,
            boundary_condition=meta.bc_type if meta else MISSING,
            bc_code=meta.bc_code if meta else record.bc_code,
            is_baffle=meta.is_baffle if meta else False,
            triangles=record.triangles,
            quads=record.quads,
            path=record.path,
        ))

    summary.diagnostics.extend(state.diagnostics)
    if summary.nodes == 0:
        summary.diagnostics.append(Diagnostic(FailureKind.EMPTY_RESULT, "No nodes were read"))
    elif summary.triangles + summary.quads == 0:
        summary.diagnostics.append(Diagnostic(FailureKind.EMPTY_RESULT, "No boundary faces were read"))

    return summary


def format_summary(summary: ImportSummary) -> str:
    """Human-readable import report."""
    lines = [
        f"Mesh file:      {summary.mesh_file}",
        f"Nodes:          {summary.nodes:,}",
        f"Triangles:      {summary.triangles:,}",
        f"Quadrilaterals: {summary.quads:,}",
        f"Zones:          {summary.zones_created}",
    ]
    if summary.declared_cells is not None:
        lines.append(f"Cells:          {summary.declared_cells:,}")

    if summary.zones:
        lines.append("")
        lines.append("Zones:")
        for zone in summary.zones:
            baffle = " [baffle]" if zone.is_baffle else ""
            target = zone.path or "not written"
            lines.append(f"  {zone.ordinal:3d}. zone {zone.zone_id}: {zone.name} "
                         f"({zone.boundary_condition}){baffle} - {zone.triangles} tri, "
                         f"{zone.quads} quad -> {target}")

    if summary.diagnostics:
        lines.append("")
        lines.append("Diagnostics:")
        for diagnostic in summary.diagnostics:
            lines.append(f"  {diagnostic}")

    lines.append("")
    lines.append("Import succeeded" if summary.success else "Import FAILED")
    return "\n".join(lines)


def export_summary(summary: ImportSummary, output_file: str) -> None:
    """Export the summary to a JSON file.

    Args:
        summary: Import summary
        output_file: Path to the output file
    """
    with open(output_file, 'w') as f:
        json.dump(summary.to_dict(), f, indent=2)

    logger.info(f"Exported import summary to {output_file}")
