"""Command-line interface for tgridsplit.

This module provides the main entry point for the tgridsplit command-line application.
"""

import argparse
import logging
import os
import sys
import tempfile
import traceback
from typing import List, Optional

from tgridsplit.core.config import NATIVE_FORMAT, ImportConfig, SectionIds
from tgridsplit.io.summary import export_summary, format_summary
from tgridsplit.mesh.fluent_reader import TgridMeshReader, is_fluent_mesh

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_MISSING_FILE = 2


def setup_logging(debug_mode: bool = False) -> None:
    """Configure logging based on debug mode.

    Args:
        debug_mode: If True, set logging level to DEBUG, otherwise INFO
    """
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list; sys.argv[1:] when None

    Returns:
        Parsed command line arguments
    """
    defaults = SectionIds()
    parser = argparse.ArgumentParser(
        description='Split a Fluent surface mesh (.msh) into one polygon mesh per boundary zone'
    )
    parser.add_argument('mesh_file', help='Path to Fluent/Tgrid mesh file (.msh)')

    # Output control group
    output_group = parser.add_argument_group('output', 'Control the output format and files')
    output_group.add_argument('-o', '--output-dir', default=None,
                              help='Directory for zone files (default: a new temporary directory)')
    output_group.add_argument('-f', '--format', default=NATIVE_FORMAT,
                              help=f'Zone file format: {NATIVE_FORMAT} (native) or a meshio '
                                   f'extension such as vtk, stl, obj')
    output_group.add_argument('--prefix', default='dom',
                              help='Zone file name prefix; files are <prefix><ordinal>.<format>')
    output_group.add_argument('--summary-json', default=None,
                              help='Also export the import summary to this JSON file')

    # Zone handling group
    zone_group = parser.add_argument_group('zones', 'Control how zones are classified')
    zone_group.add_argument('--baffle-pattern', default='baffle',
                            help='Regular expression marking baffle zones by name (case-sensitive)')
    zone_group.add_argument('--interior-bc', type=int, default=2,
                            help='Boundary-condition code of interior faces (default: 2)')

    # Section ids group
    section_group = parser.add_argument_group('sections', 'Override Fluent section ids')
    section_group.add_argument('--dimension-section', type=int, default=defaults.dimension)
    section_group.add_argument('--node-section', type=int, default=defaults.nodes)
    section_group.add_argument('--cell-section', type=int, default=defaults.cells)
    section_group.add_argument('--face-section', type=int, default=defaults.faces)
    section_group.add_argument('--zone-section', type=int, default=defaults.zone_info)
    section_group.add_argument('--legacy-zone-section', type=int, default=defaults.legacy_zone_info)

    # Advanced settings
    adv_group = parser.add_argument_group('advanced', 'Advanced settings')
    adv_group.add_argument('--debug', action='store_true', help='Enable debug output')

    return parser.parse_args(argv)


def create_config_from_args(args: argparse.Namespace) -> ImportConfig:
    """Create the import configuration from command line arguments.

    Args:
        args: Command line arguments

    Returns:
        Import configuration object

    Raises:
        ValueError: If an option value is invalid; no directory is created then
    """
    section_ids = SectionIds(
        dimension=args.dimension_section,
        nodes=args.node_section,
        cells=args.cell_section,
        faces=args.face_section,
        zone_info=args.zone_section,
        legacy_zone_info=args.legacy_zone_section,
    )
    config = ImportConfig(
        output_dir=args.output_dir or os.curdir,
        section_ids=section_ids,
        interior_bc=args.interior_bc,
        baffle_pattern=args.baffle_pattern,
        output_format=args.format,
        file_prefix=args.prefix,
        debug=args.debug,
    )

    # Only a validated configuration gets a temporary directory
    if not args.output_dir:
        config.output_dir = tempfile.mkdtemp(prefix='tgridsplit_')
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the converter.

    Returns:
        Exit code: 0 for success, 1 for a failed import, 2 for a missing file
    """
    args = parse_arguments(argv)

    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    if not os.path.exists(args.mesh_file):
        logger.error(f"Mesh file not found: {args.mesh_file}")
        return EXIT_MISSING_FILE

    if not is_fluent_mesh(args.mesh_file):
        logger.warning(f"{args.mesh_file} does not look like a Fluent mesh; trying anyway")

    try:
        config = create_config_from_args(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILED

    logger.info(f"Writing zone files to {config.output_dir}")

    try:
        summary = TgridMeshReader(args.mesh_file, config).read()
    except ImportError as e:
        logger.error(f"Missing dependency: {e}")
        logger.info("Install required dependencies with: pip install meshio")
        return EXIT_FAILED
    except (IOError, OSError) as e:
        logger.error(f"Error writing zone files: {e}")
        if args.debug:
            logger.debug(traceback.format_exc())
        return EXIT_FAILED

    print(format_summary(summary))

    if args.summary_json:
        try:
            export_summary(summary, args.summary_json)
        except OSError as e:
            logger.error(f"Could not export summary: {e}")
            return EXIT_FAILED

    return EXIT_OK if summary.success else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
