"""
Section decoders for Fluent ASCII mesh files.

Each decoder receives the parser state, the header line that selected it and
the line stream positioned just after that header. It consumes the data lines
of its section, updates the state, and returns a Diagnostic for a reported
(recoverable) problem or None. Structurally broken face records raise
FatalDecodeError.

Header fields are hexadecimal, except the dimension value and the zone id of
zone-info sections, which Fluent writes in decimal.
"""

import logging
from typing import List, Optional

from tgridsplit.mesh.errors import Diagnostic, FailureKind, FatalDecodeError
from tgridsplit.mesh.scanner import LineStream, data_values, header_fields
from tgridsplit.mesh.state import ZONE_CODES, ZONE_TYPES, ParserState, ZoneMetadata

logger = logging.getLogger(__name__)

FACE_MIXED = 0
FACE_TRIANGLE = 3
FACE_QUAD = 4


def _header_error(lines: LineStream, header: str, expected: str) -> Diagnostic:
    return Diagnostic(
        FailureKind.HEADER_MISMATCH,
        f"Expected {expected}, got '{header.strip()}'",
        line_number=lines.line_number,
        section_id=int(header_fields(header)[0]),
    )


def _data_error(lines: LineStream, section: int, message: str) -> Diagnostic:
    return Diagnostic(
        FailureKind.DATA_LINE_MISMATCH,
        message,
        line_number=lines.line_number,
        section_id=section,
    )


def _shape_error(lines: LineStream, section: int, message: str) -> FatalDecodeError:
    return FatalDecodeError(Diagnostic(
        FailureKind.FATAL_SHAPE_ERROR,
        message,
        line_number=lines.line_number,
        section_id=section,
    ))


def _parse_hex(fields: List[str]) -> List[int]:
    return [int(value, 16) for value in fields]


def decode_dimension(state: ParserState, header: str, lines: LineStream) -> Optional[Diagnostic]:
    """Decode ``(2 <dim>)``.

    The caller checks the stored dimension; only 3D files can be imported.
    """
    fields = header_fields(header)
    if len(fields) != 2:
        return _header_error(lines, header, "'(<section> <dimension>)'")
    try:
        state.dimension = int(fields[1])
    except ValueError:
        return _header_error(lines, header, "an integer dimension")

    logger.debug(f"Grid dimension: {state.dimension}")
    return None


def decode_nodes(state: ParserState, header: str, lines: LineStream) -> Optional[Diagnostic]:
    """Decode ``(10 (zone first last type [nd])(`` and its coordinate lines.

    Coordinates are stored at 0-based rows ``first-1 .. last-1``. A line with
    two values gets z = 0.0. A section that stops at a bad line keeps the rows
    read before it. The zone-0 declaration carries only the total node count
    and has no data lines.
    """
    fields = header_fields(header)
    section = int(fields[0])
    if len(fields) not in (5, 6):
        return _header_error(lines, header, "a 5 or 6 field node header")
    try:
        zone_id, first, last = _parse_hex(fields[1:4])
    except ValueError:
        return _header_error(lines, header, "hexadecimal node header fields")

    if zone_id == 0:
        state.declared_nodes = last - first + 1
        state.nodes.reserve(last)
        logger.info(f"Mesh declares {state.declared_nodes} nodes")
        return None

    if first < 1 or last < first:
        return _header_error(lines, header, f"a valid node range, got {first}..{last}")

    # Rows become addressable only once their coordinates have parsed
    state.nodes.reserve(last)
    for index in range(first - 1, last):
        line = lines.next_data_line()
        if line is None:
            return _data_error(lines, section, f"File ended after {index - first + 1} of "
                                               f"{last - first + 1} nodes in zone {zone_id}")
        values = data_values(line)
        if len(values) not in (2, 3):
            return _data_error(lines, section, f"Expected 2 or 3 coordinates, got '{line}'")
        try:
            coords = [float(value) for value in values]
        except ValueError:
            return _data_error(lines, section, f"Could not parse coordinates: '{line}'")
        if len(coords) == 2:
            coords.append(0.0)
        state.nodes.ensure_size(index + 1)
        state.nodes.set(index, *coords)
        state.tally.nodes += 1

    logger.info(f"Read {last - first + 1} nodes for node zone {zone_id}")
    return None


def decode_cells(state: ParserState, header: str, lines: LineStream) -> Optional[Diagnostic]:
    """Decode ``(12 (zone first last type [element-type]))``.

    Only the zone-0 declaration is kept, for reporting; cell connectivity is
    not needed to extract surfaces.
    """
    fields = header_fields(header)
    if len(fields) not in (5, 6):
        return _header_error(lines, header, "a 5 or 6 field cell header")
    try:
        zone_id, first, last = _parse_hex(fields[1:4])
    except ValueError:
        return _header_error(lines, header, "hexadecimal cell header fields")

    if zone_id == 0:
        state.declared_cells = last - first + 1
        logger.info(f"Mesh declares {state.declared_cells} cells")
    else:
        logger.debug(f"Ignoring cell zone {zone_id}")
    return None


def _skip_records(lines: LineStream, section: int, count: int, zone_id: int) -> Optional[Diagnostic]:
    for done in range(count):
        if lines.next_data_line() is None:
            return _data_error(lines, section, f"File ended after {done} of {count} "
                                               f"records in zone {zone_id}")
    return None


def _read_mixed_face(state: ParserState, lines: LineStream, section: int, line: str) -> None:
    """Append one ``<n> v1 .. vn [c0 c1]`` record; any defect is fatal."""
    zone = state.current_zone
    try:
        values = _parse_hex(data_values(line))
    except ValueError:
        values = []
    if not values:
        raise _shape_error(lines, section, f"Unparseable mixed face record: '{line}'")

    shape = values[0]
    if shape == FACE_TRIANGLE and len(values) >= 4:
        zone.triangles.append(tuple(values[1:4]))
    elif shape == FACE_QUAD and len(values) >= 5:
        zone.quads.append(tuple(values[1:5]))
    else:
        raise _shape_error(lines, section, f"Unsupported face shape {shape} in record '{line}'")


def decode_faces(state: ParserState, header: str, lines: LineStream) -> Optional[Diagnostic]:
    """Decode ``(13 (zone first last bc type)(`` and its face records.

    Interior faces are read and discarded. Any other face section becomes a
    face zone that is written out as soon as its last record is read. Vertex
    indices are kept exactly as they appear in the file (1-based).
    """
    fields = header_fields(header)
    section = int(fields[0])
    if len(fields) not in (5, 6):
        return _header_error(lines, header, "a 6 field face header")
    try:
        values = _parse_hex(fields[1:])
    except ValueError:
        return _header_error(lines, header, "hexadecimal face header fields")

    zone_id, first, last = values[:3]
    if zone_id == 0:
        state.declared_faces = last - first + 1
        logger.info(f"Mesh declares {state.declared_faces} faces")
        return None

    if len(values) != 5:
        return _header_error(lines, header, "a 6 field face header")
    bc_code, face_type = values[3:]

    if first < 1 or last < first:
        return _header_error(lines, header, f"a valid face range, got {first}..{last}")

    count = last - first + 1
    if bc_code == state.config.interior_bc:
        logger.info(f"Skipping {count} interior faces of zone {zone_id}")
        return _skip_records(lines, section, count, zone_id)

    zone = state.begin_zone(zone_id, bc_code)
    skipped = 0
    try:
        for done in range(count):
            line = lines.next_data_line()
            if line is None:
                if face_type == FACE_MIXED:
                    raise _shape_error(lines, section, f"File ended inside mixed face zone {zone_id}")
                return _data_error(lines, section, f"File ended after {done} of {count} "
                                                   f"faces in zone {zone_id}")

            if face_type == FACE_MIXED:
                _read_mixed_face(state, lines, section, line)
                continue

            try:
                values = _parse_hex(data_values(line))
            except ValueError:
                return _data_error(lines, section, f"Could not parse face record: '{line}'")

            if face_type == FACE_TRIANGLE:
                if len(values) < 3:
                    return _data_error(lines, section, f"Expected 3 vertex indices, got '{line}'")
                zone.triangles.append(tuple(values[:3]))
            elif face_type == FACE_QUAD:
                if len(values) < 4:
                    return _data_error(lines, section, f"Expected 4 vertex indices, got '{line}'")
                zone.quads.append(tuple(values[:4]))
            else:
                skipped += 1

        if skipped:
            logger.warning(f"Face type {face_type} of zone {zone_id} is not supported; "
                           f"{skipped} records skipped")

        logger.info(f"Read zone {zone_id}: {len(zone.triangles)} triangles, {len(zone.quads)} quads")
        if zone.num_faces:
            try:
                state.flush_zone()
            except ValueError as e:
                return _data_error(lines, section, f"Zone {zone_id} was not written: {e}")
        return None
    finally:
        state.release_zone()


def decode_zone_info(state: ParserState, header: str, lines: LineStream) -> Optional[Diagnostic]:
    """Decode ``(45 (id bc name)())``.

    The boundary-condition field may be a numeric code or a Fluent type name.
    The legacy 39 section may carry extra trailing fields, which are ignored.
    """
    fields = [field.strip('"\'') for field in header_fields(header)]
    fields = [field for field in fields if field]
    section = int(fields[0])
    legacy = section == state.config.section_ids.legacy_zone_info
    if len(fields) != 4 and not (legacy and len(fields) > 4):
        return _header_error(lines, header, "'(<section> (<id> <type> <name>)())'")

    try:
        zone_id = int(fields[1])
    except ValueError:
        return _header_error(lines, header, "a decimal zone id")

    bc_field, name = fields[2], fields[3]
    try:
        bc_code = int(bc_field)
        bc_type = ZONE_TYPES.get(bc_code, str(bc_code))
    except ValueError:
        bc_type = bc_field.lower()
        bc_code = ZONE_CODES.get(bc_type)

    if zone_id in state.zone_metadata:
        logger.debug(f"Zone {zone_id} metadata redefined")

    metadata = ZoneMetadata(
        zone_id=zone_id,
        name=name,
        bc_code=bc_code,
        bc_type=bc_type,
        is_baffle=state.config.is_baffle(name),
    )
    state.zone_metadata[zone_id] = metadata
    logger.debug(f"Zone {zone_id}: '{name}' ({bc_type}){' [baffle]' if metadata.is_baffle else ''}")
    return None
