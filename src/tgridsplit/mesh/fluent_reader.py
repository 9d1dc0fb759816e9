"""
TgridMeshReader class to split Fluent surface mesh files (.msh) into per-zone
polygon meshes.

The file is scanned line by line. Every section header is routed to its
decoder; face sections are written out zone by zone while the file is read,
so only the node table and one zone's faces are held in memory at a time.
"""

import logging
import os
from typing import Callable, Dict, Optional

import numpy as np

from tgridsplit.core.config import ImportConfig
from tgridsplit.io.export import export_zone
from tgridsplit.io.summary import ImportSummary, build_summary
from tgridsplit.mesh.decoders import (
    decode_cells,
    decode_dimension,
    decode_faces,
    decode_nodes,
    decode_zone_info,
)
from tgridsplit.mesh.errors import Diagnostic, FailureKind, FatalDecodeError
from tgridsplit.mesh.scanner import LineStream, section_id
from tgridsplit.mesh.state import FaceZone, ParserState

logger = logging.getLogger(__name__)

Decoder = Callable[[ParserState, str, LineStream], Optional[Diagnostic]]

SUPPORTED_DIMENSION = 3


def is_fluent_mesh(filename: str) -> bool:
    """Check if the given file appears to be a Fluent mesh file.

    Args:
        filename: Path to the mesh file

    Returns:
        bool: True if the file appears to be a Fluent mesh, False otherwise
    """
    ext = os.path.splitext(filename)[1].lower()
    if ext not in ('.cas', '.msh'):
        return False

    try:
        with open(filename, 'rb') as f:
            header = f.read(4096)
    except OSError as e:
        logger.debug(f"Error checking if file is Fluent mesh: {e}")
        return False

    # Gmsh also uses .msh
    if b'$MeshFormat' in header:
        return False
    return b'(0 ' in header or b'(2 ' in header or b'(10 ' in header or b'FLUENT' in header


def is_binary_file(filename: str) -> bool:
    """Guess whether the file holds binary sections."""
    try:
        with open(filename, 'rb') as file:
            header = file.read(1024)
    except OSError:
        return False

    if b'\x00' in header:
        return True

    non_ascii_count = sum(1 for byte in header if byte > 127)
    return non_ascii_count > len(header) * 0.1


class TgridMeshReader:
    """Reader that splits a Fluent mesh file into one polygon mesh per face zone.

    Attributes:
        filename: Path to the Fluent mesh file
        config: Import configuration
        state: Parser state of the last read, or None before read()
    """

    def __init__(self, filename: str, config: Optional[ImportConfig] = None, **kwargs):
        """Initialize the TgridMeshReader.

        Args:
            filename: Path to the Fluent mesh file
            config: Import configuration; built from kwargs when omitted
            **kwargs: ImportConfig fields (output_dir, interior_bc, ...)
        """
        self.filename = filename
        self.config = config if config is not None else ImportConfig(**kwargs)
        self.state: Optional[ParserState] = None

        if self.config.debug:
            logging.getLogger().setLevel(logging.DEBUG)

    def _decoders(self) -> Dict[int, Decoder]:
        ids = self.config.section_ids
        return {
            ids.dimension: decode_dimension,
            ids.nodes: decode_nodes,
            ids.cells: decode_cells,
            ids.faces: decode_faces,
            ids.zone_info: decode_zone_info,
            ids.legacy_zone_info: decode_zone_info,
        }

    def _write_zone(self, points: np.ndarray, zone: FaceZone) -> Optional[str]:
        return export_zone(points, zone, self.config)

    def read(self) -> ImportSummary:
        """Read the mesh file, writing each face zone as soon as it is complete.

        Returns:
            ImportSummary of the import; check ``success`` for the verdict

        Raises:
            FileNotFoundError: If the mesh file does not exist
            IOError: If a zone file cannot be written
        """
        if not os.path.exists(self.filename):
            raise FileNotFoundError(f"Mesh file not found: {self.filename}")

        logger.info(f"Reading Fluent mesh file: {self.filename}")
        if is_binary_file(self.filename):
            logger.warning("Binary sections detected; an undecodable line ends the import")

        state = ParserState(self.config, self._write_zone)
        self.state = state
        decoders = self._decoders()

        with open(self.filename, 'rb') as handle:
            lines = LineStream(handle, encoding='utf-8')
            try:
                for line in lines:
                    sid = section_id(line)
                    decoder = decoders.get(sid)
                    if decoder is None:
                        continue

                    diagnostic = decoder(state, line, lines)
                    if diagnostic is not None:
                        state.report(diagnostic)

                    if sid == self.config.section_ids.dimension and state.dimension is not None \
                            and state.dimension != SUPPORTED_DIMENSION:
                        state.report(Diagnostic(
                            FailureKind.UNSUPPORTED_DIMENSION,
                            f"Only {SUPPORTED_DIMENSION}D meshes can be imported, file is {state.dimension}D",
                            line_number=lines.line_number,
                            section_id=sid,
                        ))
                        break
            except FatalDecodeError as e:
                state.report(e.diagnostic)
                logger.error("Import aborted; zone files already written are kept")

        summary = build_summary(state, self.filename)
        logger.info(f"Read {summary.nodes} nodes, {summary.triangles} triangles, "
                    f"{summary.quads} quads in {summary.zones_created} zones; "
                    f"{len(summary.domains)} zone files written")
        if not summary.success:
            for failure in summary.failures:
                logger.error(f"Import failed: {failure}")
        return summary


def read_tgrid_mesh(filename: str, **kwargs) -> ImportSummary:
    """Split a Fluent mesh file into per-zone polygon meshes.

    This is a convenience function that creates a TgridMeshReader and reads the mesh.

    Args:
        filename: Path to the Fluent mesh file
        **kwargs: ImportConfig fields, or ``config`` for a ready ImportConfig

    Returns:
        ImportSummary of the import

    Raises:
        FileNotFoundError: If the mesh file does not exist
    """
    reader = TgridMeshReader(filename, **kwargs)
    return reader.read()
