"""
In-memory state of one Fluent mesh import.

ParserState is handed to every section decoder; nothing here is module-global.
It owns the node table, the face zone currently being accumulated, the zone
metadata table and the running tallies.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from tgridsplit.core.config import ImportConfig
from tgridsplit.mesh.errors import Diagnostic

logger = logging.getLogger(__name__)

Triangle = Tuple[int, int, int]
Quad = Tuple[int, int, int, int]

# Fluent boundary-condition codes used in face and zone sections
ZONE_TYPES = {
    2: "interior",
    3: "wall",
    4: "pressure-inlet",
    5: "pressure-outlet",
    7: "symmetry",
    8: "periodic-shadow",
    9: "pressure-far-field",
    10: "velocity-inlet",
    12: "periodic",
    14: "fan",
    20: "mass-flow-inlet",
    24: "interface",
    31: "parent",
    36: "outflow",
    37: "axis",
}

ZONE_CODES = {name: code for code, name in ZONE_TYPES.items()}

MISSING = "MISSING"


class NodeTable:
    """Dense, 0-based table of node coordinates.

    The table only ever grows; its size is the largest 1-based node index
    written so far.
    """

    def __init__(self, capacity: int = 0):
        self._coords = np.zeros((max(capacity, 0), 3), dtype=np.float64)
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def points(self) -> np.ndarray:
        """View of the populated rows, shape (n, 3)."""
        return self._coords[:self._size]

    def reserve(self, capacity: int) -> None:
        """Grow the backing array without changing the table size."""
        if capacity > len(self._coords):
            grown = np.zeros((capacity, 3), dtype=np.float64)
            grown[:len(self._coords)] = self._coords
            self._coords = grown

    def ensure_size(self, size: int) -> None:
        """Make indices ``0 .. size-1`` addressable."""
        if size > len(self._coords):
            self.reserve(max(size, 2 * len(self._coords)))
        self._size = max(self._size, size)

    def set(self, index: int, x: float, y: float, z: float) -> None:
        self._coords[index] = (x, y, z)


class ZonePhase(Enum):
    """Lifecycle of the face zone being read."""
    IDLE = auto()
    ACCUMULATING = auto()
    FLUSHED = auto()


@dataclass
class FaceZone:
    """Faces captured from one non-interior face section.

    Vertex indices keep the 1-based numbering of the input file.
    """

    zone_id: int
    ordinal: int
    bc_code: int
    triangles: List[Triangle] = field(default_factory=list)
    quads: List[Quad] = field(default_factory=list)

    @property
    def num_faces(self) -> int:
        return len(self.triangles) + len(self.quads)

    def clear(self) -> None:
        self.triangles.clear()
        self.quads.clear()


@dataclass
class ZoneMetadata:
    """Name and boundary condition of a zone, from a zone-info section."""

    zone_id: int
    name: str
    bc_code: Optional[int]
    bc_type: str
    is_baffle: bool = False


@dataclass
class ZoneRecord:
    """What is left of a face zone after it has been flushed."""

    ordinal: int
    zone_id: int
    bc_code: int
    triangles: int
    quads: int
    path: Optional[str] = None


@dataclass
class ImportTally:
    """Running totals; face counts survive the per-zone clears."""

    nodes: int = 0
    triangles: int = 0
    quads: int = 0
    zones: int = 0

    @property
    def faces(self) -> int:
        return self.triangles + self.quads


ZoneWriter = Callable[[np.ndarray, FaceZone], Optional[str]]


class ParserState:
    """Everything one import accumulates while the file is scanned.

    Attributes:
        config: Import configuration
        nodes: Node coordinate table
        dimension: Grid dimensionality from the dimension section
        declared_nodes: Node count from the zone-0 node declaration
        declared_cells: Cell count from the zone-0 cell declaration
        declared_faces: Face count from the zone-0 face declaration
        zone_metadata: Zone id -> ZoneMetadata
        zones: Flushed zones in encounter order
        tally: Running totals
        diagnostics: Reported problems in the order they were found
    """

    def __init__(self, config: ImportConfig, zone_writer: ZoneWriter):
        self.config = config
        self.zone_writer = zone_writer
        self.nodes = NodeTable()
        self.dimension: Optional[int] = None
        self.declared_nodes: Optional[int] = None
        self.declared_cells: Optional[int] = None
        self.declared_faces: Optional[int] = None
        self.zone_metadata: Dict[int, ZoneMetadata] = {}
        self.zones: List[ZoneRecord] = []
        self.tally = ImportTally()
        self.diagnostics: List[Diagnostic] = []
        self.phase = ZonePhase.IDLE
        self.current_zone: Optional[FaceZone] = None

    def report(self, diagnostic: Diagnostic) -> None:
        """Record a problem and log it."""
        self.diagnostics.append(diagnostic)
        if diagnostic.fatal:
            logger.error(str(diagnostic))
        else:
            logger.warning(str(diagnostic))

    def begin_zone(self, zone_id: int, bc_code: int) -> FaceZone:
        """Start accumulating a new face zone (IDLE -> ACCUMULATING)."""
        if self.phase is not ZonePhase.IDLE:
            raise RuntimeError(f"Cannot begin zone {zone_id} while in phase {self.phase.name}")

        if any(record.zone_id == zone_id for record in self.zones):
            logger.warning(f"Zone {zone_id} has more than one face section; each is exported separately")

        self.tally.zones += 1
        self.current_zone = FaceZone(zone_id=zone_id, ordinal=self.tally.zones, bc_code=bc_code)
        self.phase = ZonePhase.ACCUMULATING
        logger.debug(f"Began face zone {zone_id} (ordinal {self.current_zone.ordinal})")
        return self.current_zone

    def flush_zone(self) -> ZoneRecord:
        """Write the current zone out and clear its faces (ACCUMULATING -> FLUSHED).

        Tallies are updated before the writer runs, so they count the faces
        even when the writer produces nothing.
        """
        zone = self._require_zone()
        self.tally.triangles += len(zone.triangles)
        self.tally.quads += len(zone.quads)

        record = ZoneRecord(
            ordinal=zone.ordinal,
            zone_id=zone.zone_id,
            bc_code=zone.bc_code,
            triangles=len(zone.triangles),
            quads=len(zone.quads),
        )
        self.zones.append(record)
        self.phase = ZonePhase.FLUSHED
        try:
            record.path = self.zone_writer(self.nodes.points, zone)
        finally:
            zone.clear()
        return record

    def release_zone(self) -> None:
        """Forget the current zone (FLUSHED or ACCUMULATING -> IDLE).

        Faces of a zone released without a flush are dropped uncounted.
        """
        if self.current_zone is not None and self.phase is ZonePhase.ACCUMULATING:
            logger.debug(f"Dropping {self.current_zone.num_faces} unflushed faces "
                         f"of zone {self.current_zone.zone_id}")
            self.current_zone.clear()
        self.current_zone = None
        self.phase = ZonePhase.IDLE

    def _require_zone(self) -> FaceZone:
        if self.phase is not ZonePhase.ACCUMULATING or self.current_zone is None:
            raise RuntimeError(f"No face zone is being accumulated (phase {self.phase.name})")
        return self.current_zone

    def emitted_domains(self) -> List[Tuple[int, int]]:
        """(ordinal, zone id) of every zone that produced a file."""
        return [(record.ordinal, record.zone_id) for record in self.zones if record.path]
