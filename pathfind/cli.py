#!/usr/bin/env python
"""
Command line interface for finding sequencing data.

Given a study, sample, library, lane or species ID, or a file containing a
list of IDs, print the paths on disk to the data for the matching lanes,
or link them, archive them, or write a stats report for them.

Usage:
    pathfind --id 5477_6 --type lane
    pathfind --id 607 --type study --qc passed --filetype fastq --archive
    pathfind --id ids.txt --type file --file-id-type sample --stats out.csv
    assemblyfind --id 5477_6#1 --type lane --filetype contigs --symlink links
"""

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

from pydantic import ValidationError

from core.config import get_settings
from core.db import DatabaseManager
from core.exceptions import PathFindError
from core.logger import logger, set_verbose
from core.progress import ProgressReporter
from pathfind.export.models import (
    Archive,
    ArchiveFormat,
    ExportRequest,
    ListPaths,
    OptionMode,
    OptionValue,
    Stats,
    Symlink,
)
from pathfind.export.services import Exporter, sanitize_id
from pathfind.finder.services import Finder
from pathfind.lanes.models import FileCategory, Identifier, IDType, QueryFilter
from pathfind.lanes.roles import LaneRole, role_for_context
from pathfind.tracking.models import QCStatus

# marks a dual-purpose option that was given without a value
_USE_DEFAULT = object()


def option_value(raw) -> OptionValue:
    """Turn a parsed dual-purpose option into an OptionValue"""
    if raw is None:
        return OptionValue()
    if raw is _USE_DEFAULT:
        return OptionValue(mode=OptionMode.DEFAULT_NAME)
    return OptionValue(mode=OptionMode.NAMED, value=Path(raw))


def build_request(args) -> ExportRequest:
    """Decide which export action was asked for"""
    symlink = option_value(args.symlink)
    archive = option_value(args.archive)
    stats = option_value(args.stats)

    if symlink.is_set:
        return Symlink(destination=symlink.value)

    if archive.is_set:
        if args.zip:
            archive_format = ArchiveFormat.ZIP
        elif args.no_tar_compression:
            archive_format = ArchiveFormat.TAR
        else:
            archive_format = ArchiveFormat.TAR_GZ
        return Archive(format=archive_format, target=archive.value)

    if stats.is_set:
        return Stats(target=stats.value, separator=args.csv_separator)

    return ListPaths()


def read_ids_from_file(id_file: Path) -> List[str]:
    """Load IDs from a plain-text file (one ID per line, # for comments)"""
    path = Path(id_file)
    if not path.is_file():
        raise FileNotFoundError(f"ID file not found: {id_file}")

    ids = []
    with open(path, "r") as f:
        for line in f:
            id = line.strip()
            if id and not id.startswith("#"):
                ids.append(id)
    return ids


def build_parser(context: str, role: LaneRole) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=context,
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    required = parser.add_argument_group("required options")
    required.add_argument("-i", "--id", required=True,
                          help="ID to search for, or file of IDs with --type file")
    required.add_argument("-t", "--type", required=True,
                          choices=[t.value for t in IDType],
                          help="type of ID")
    parser.add_argument("--ft", "--file-id-type", dest="file_id_type", default=IDType.LANE.value,
                        choices=[t.value for t in IDType if t != IDType.FILE],
                        help="type of the IDs in the file given with --type file (default: lane)")

    filtering = parser.add_argument_group("filtering")
    filtering.add_argument("-q", "--qc", choices=[s.value for s in QCStatus],
                           help="filter results by lane QC state")
    filtering.add_argument("-f", "--filetype", choices=[c.value for c in role.categories],
                           help="type of files to find")

    output = parser.add_argument_group("output")
    action = output.add_mutually_exclusive_group()
    action.add_argument("-l", "--symlink", nargs="?", const=_USE_DEFAULT, metavar="DIR",
                        help="create symlinks for data files in the specified directory")
    action.add_argument("-a", "--archive", nargs="?", const=_USE_DEFAULT, metavar="FILE",
                        help="filename for archive")
    action.add_argument("-s", "--stats", nargs="?", const=_USE_DEFAULT, metavar="FILE",
                        help="filename for statistics CSV output")
    output.add_argument("-z", "--zip", action="store_true",
                        help="archive data in ZIP format")
    output.add_argument("-u", "--no-tar-compression", action="store_true",
                        help="don't compress tar archives")
    output.add_argument("-r", "--rename", action="store_true",
                        help="replace hash (#) with underscore (_) in filenames")
    output.add_argument("-c", "--csv-separator", default=",",
                        help='separator to use when writing CSV (default: ",")')

    switches = parser.add_argument_group("switches")
    switches.add_argument("-n", "--no-progress-bars", action="store_true",
                          help="don't show progress bars")
    switches.add_argument("-v", "--verbose", action="store_true",
                          help="show debugging messages")
    return parser


def main(argv: Sequence[str] | None = None, context: str = "pathfind") -> int:
    settings = get_settings()

    try:
        role = role_for_context(settings.LANE_ROLES, context)
    except PathFindError as e:
        print(e, file=sys.stderr)
        return 1

    parser = build_parser(context, role)
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    if args.zip and args.archive is None:
        parser.error("--zip must be used along with --archive")
    if args.csv_separator == "\\t":
        args.csv_separator = "\t"
    # checked for every action; archives carry a stats.csv too
    if len(args.csv_separator) != 1:
        parser.error("--csv-separator must be a single character")

    try:
        request = build_request(args)
    except ValidationError as e:
        parser.error(str(e))

    id_type = IDType(args.type)
    if id_type == IDType.FILE:
        try:
            ids = read_ids_from_file(args.id)
        except OSError as e:
            parser.error(str(e))
        id_type = IDType(args.file_id_type)
    else:
        ids = [args.id]

    try:
        identifiers = [Identifier(type=id_type, value=id) for id in ids]
    except ValidationError as e:
        parser.error(str(e))

    filters = QueryFilter(
        qc_status=QCStatus(args.qc) if args.qc else None,
        file_category=FileCategory(args.filetype) if args.filetype else None,
    )
    progress = ProgressReporter(
        enabled=not (args.no_progress_bars or settings.NO_PROGRESS_BARS)
    )

    db_manager = DatabaseManager(settings)
    try:
        finder = Finder(settings, context, db_manager=db_manager, progress=progress)
        lanes = finder.find_lanes(identifiers, id_type, filters)
        logger.debug("found %d lanes", len(lanes))

        exporter = Exporter(
            label=sanitize_id(args.id, IDType(args.type)),
            rename=args.rename,
            separator=args.csv_separator,
            num_chunks=settings.NUM_CHUNKS,
            progress=progress,
        )
        exporter.export(lanes, request)
    except PathFindError as e:
        logger.debug("run failed", exc_info=True)
        print(e, file=sys.stderr)
        return 1
    finally:
        db_manager.close()

    return 0


def run_pathfind():
    sys.exit(main(context="pathfind"))


def run_annotationfind():
    sys.exit(main(context="annotationfind"))


def run_assemblyfind():
    sys.exit(main(context="assemblyfind"))


if __name__ == "__main__":
    run_pathfind()
