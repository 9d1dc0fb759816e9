"""Configuration module for tgridsplit.

This module provides configuration classes for the Fluent mesh import and
per-zone export process.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple


# Native polygon-mesh output; anything else is handed to meshio
NATIVE_FORMAT = "wrl"


@dataclass
class SectionIds:
    """Numeric ids of the Fluent sections the reader decodes.

    Attributes:
        dimension: Grid dimensionality section, e.g. ``(2 3)``
        nodes: Node coordinate section
        cells: Cell declaration section
        faces: Face connectivity section
        zone_info: Zone name / boundary-condition section
        legacy_zone_info: Zone section id used by older case files
    """

    dimension: int = 2
    nodes: int = 10
    cells: int = 12
    faces: int = 13
    zone_info: int = 45
    legacy_zone_info: int = 39

    def __post_init__(self) -> None:
        """Validate the section ids after initialization."""
        ids = self.as_tuple()
        if any(not isinstance(i, int) or i <= 0 for i in ids):
            raise ValueError(f"Section ids must be positive integers, got {ids}")
        if len(set(ids)) != len(ids):
            raise ValueError(f"Section ids must be distinct, got {ids}")

    def as_tuple(self) -> Tuple[int, ...]:
        return (self.dimension, self.nodes, self.cells, self.faces,
                self.zone_info, self.legacy_zone_info)


@dataclass
class ImportConfig:
    """Configuration for a Fluent surface mesh import.

    Attributes:
        output_dir: Directory receiving one polygon-mesh file per zone
        section_ids: Section ids recognised by the dispatcher
        interior_bc: Boundary-condition code of interior faces (never exported)
        baffle_pattern: Regular expression flagging baffle zones by name
        output_format: ``"wrl"`` for the native polygon file, otherwise a
            meshio file extension such as ``"vtk"`` or ``"stl"``
        file_prefix: Zone files are named ``<prefix><ordinal>.<format>``
        debug: Whether to enable debug output
    """

    output_dir: str = "."
    section_ids: SectionIds = field(default_factory=SectionIds)
    interior_bc: int = 2
    baffle_pattern: str = "baffle"
    output_format: str = NATIVE_FORMAT
    file_prefix: str = "dom"
    debug: bool = False

    def __post_init__(self) -> None:
        """Validate the configuration after initialization."""
        if not self.output_dir:
            raise ValueError("Output directory must be a non-empty path")

        if self.interior_bc < 0:
            raise ValueError("Interior boundary-condition code must be non-negative")

        try:
            self._baffle_regex = re.compile(self.baffle_pattern)
        except re.error as e:
            raise ValueError(f"Invalid baffle pattern '{self.baffle_pattern}': {e}")

        self.output_format = self.output_format.lower().lstrip('.')
        if not self.output_format:
            raise ValueError("Output format must be a non-empty file extension")

        if not self.file_prefix:
            raise ValueError("File prefix must be non-empty")

    def is_baffle(self, zone_name: Optional[str]) -> bool:
        """Return True if the zone name matches the baffle pattern."""
        if not zone_name:
            return False
        return self._baffle_regex.search(zone_name) is not None

    def zone_filename(self, ordinal: int) -> str:
        """File name of the zone with the given 1-based ordinal."""
        return f"{self.file_prefix}{ordinal}.{self.output_format}"
