"""
tgridsplit Mesh Parsing Module

This module provides the pieces of the Fluent mesh parser:
- Section header scanning
- Per-section decoders (dimension, nodes, cells, faces, zone info)
- Parser state (node table, face zones, zone metadata, tallies)
- Failure tags and diagnostics

The reader that drives them lives in tgridsplit.mesh.fluent_reader.
"""

from tgridsplit.mesh.errors import Diagnostic, FailureKind, FatalDecodeError
from tgridsplit.mesh.scanner import NO_SECTION, LineStream, section_id, header_fields
from tgridsplit.mesh.state import (
    ZONE_TYPES,
    FaceZone,
    ImportTally,
    NodeTable,
    ParserState,
    ZoneMetadata,
    ZonePhase,
    ZoneRecord,
)
from tgridsplit.mesh.decoders import (
    decode_cells,
    decode_dimension,
    decode_faces,
    decode_nodes,
    decode_zone_info,
)

__all__ = [
    "Diagnostic", "FailureKind", "FatalDecodeError",
    "NO_SECTION", "LineStream", "section_id", "header_fields",
    "ZONE_TYPES", "FaceZone", "ImportTally", "NodeTable", "ParserState",
    "ZoneMetadata", "ZonePhase", "ZoneRecord",
    "decode_cells", "decode_dimension", "decode_faces", "decode_nodes", "decode_zone_info",
]
