"""
Lane roles - the behaviour that differs between the find commands.

Every lane found during a search is given the same role, chosen from the
calling context (pathfind, assemblyfind, annotationfind). The role decides
where a lane's files live on disk, which file categories can be looked for,
and what goes into the statistics report. The Lane itself never changes
shape; only the role does.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from core.exceptions import ConfigurationError
from pathfind.lanes.models import FileCategory

if TYPE_CHECKING:
    from pathfind.lanes.lane import Lane

NA = "NA"


def _value(value) -> str:
    return NA if value is None else str(value)


def _percent(part, whole) -> str:
    if part is None or not whole:
        return NA
    return f"{100 * part / whole:.1f}"


def _glob(directory: Path, patterns: Tuple[str, ...]) -> List[Path]:
    """Files under directory matching any of the patterns, sorted, no repeats"""
    found = []
    for pattern in patterns:
        for path in sorted(directory.glob(pattern)):
            if path.is_file() and path not in found:
                found.append(path)
    return found


def read_fasta_lengths(path: Path) -> List[int]:
    """Returns the length of each sequence in a FASTA file"""
    lengths = []
    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if line.startswith(">"):
                lengths.append(0)
            elif line and lengths:
                lengths[-1] += len(line)
    return lengths


def n50(lengths: List[int]) -> Optional[int]:
    """
    The length of the shortest contig in the smallest set of longest
    contigs that cover at least half of the assembly.
    """
    total = sum(lengths)
    if total == 0:
        return None
    running = 0
    for length in sorted(lengths, reverse=True):
        running += length
        if running * 2 >= total:
            return length
    return None


def count_gff_features(path: Path) -> Dict[str, int]:
    """
    Count the features in a GFF3 file by type (column 3). Any sequence
    data after a ##FASTA directive is ignored.
    """
    counts: Dict[str, int] = {}
    with open(path, "r") as f:
        for line in f:
            if line.startswith("##FASTA"):
                break
            if line.startswith("#") or not line.strip():
                continue
            columns = line.rstrip("\n").split("\t")
            if len(columns) < 9:
                continue
            counts[columns[2]] = counts.get(columns[2], 0) + 1
    return counts


class LaneRole:
    """
    Base class for lane roles. Subclasses set the glob patterns for each
    file category they support and provide the statistics.
    """

    name = "base"

    # category -> glob patterns, relative to the lane directory
    patterns: Dict[FileCategory, Tuple[str, ...]] = {}

    # category to collect when exporting lanes that weren't searched by type
    default_category: FileCategory | None = None

    # row attributes that must be set for the role to work
    required_fields: Tuple[str, ...] = ("name", "storage_path")

    @property
    def categories(self) -> List[FileCategory]:
        return list(self.patterns)

    def check(self, row):
        """
        Make sure that this role can be applied to a row from the
        tracking database.

        Raises:
            ValueError: if the row lacks a required field
        """
        missing = [f for f in self.required_fields if getattr(row, f, None) in (None, "")]
        if missing:
            raise ValueError(
                f"lane row {getattr(row, 'id', None)} has no {', '.join(missing)}"
            )

    def lane_dir(self, lane: "Lane") -> Path:
        """The directory holding all of the data for a lane"""
        return lane.database.data_root / lane.row.storage_path

    def root_dirs(self, lane: "Lane") -> List[Path]:
        """Paths shown or linked for a lane when no files were looked for"""
        return [self.lane_dir(lane)]

    def find_files(self, lane: "Lane", category: FileCategory) -> List[Path]:
        """
        Look for files of the given category for a lane. An empty list is
        a normal result.
        """
        if category not in self.patterns:
            raise ValueError(f"{self.name} lanes don't have '{category.value}' files")
        return _glob(self.lane_dir(lane), self.patterns[category])

    def stats_header(self) -> List[str]:
        raise NotImplementedError

    def stats_row(self, lane: "Lane") -> List[str]:
        raise NotImplementedError


class DataRole(LaneRole):
    """Raw sequencing data, for pathfind"""

    name = "data"
    patterns = {
        FileCategory.FASTQ: ("*.fastq.gz",),
        FileCategory.BAM: ("*.bam",),
        FileCategory.CORRECTED: ("*.corrected.fastq.gz",),
        FileCategory.PACBIO: ("*.h5",),
    }
    default_category = FileCategory.FASTQ

    def find_files(self, lane, category):
        if category != FileCategory.FASTQ:
            return super().find_files(lane, category)

        # fastq files are the ones registered against the lane in the
        # tracking database, provided they are actually on disk
        lane_dir = self.lane_dir(lane)
        found = []
        for lane_file in sorted(lane.row.files, key=lambda f: f.name):
            name = lane_file.name
            if not name.endswith((".fastq.gz", ".fastq")) or name.endswith(".corrected.fastq.gz"):
                continue
            path = lane_dir / name
            if path.is_file():
                found.append(path)
        return found

    def stats_header(self):
        return [
            "Study ID",
            "Sample",
            "Lane Name",
            "Cycles",
            "Reads",
            "Bases",
            "Map Type",
            "Reference",
            "Reference Size",
            "Mapper",
            "Mapstats ID",
            "Mapped %",
            "Paired %",
            "Mean Insert Size",
            "Adapter %",
            "Transposon %",
            "Error Rate",
            "NPG QC",
            "Manual QC",
        ]

    def stats_row(self, lane):
        row = lane.row
        sample = row.library.sample
        study = sample.study
        mapstats = max(row.mapstats, key=lambda m: m.id, default=None)

        mapping = [NA] * 11
        if mapstats is not None:
            mapping = [
                "QC" if mapstats.is_qc else "Mapping",
                _value(mapstats.reference),
                _value(mapstats.reference_size),
                _value(mapstats.mapper),
                _value(mapstats.id),
                _percent(mapstats.reads_mapped, row.raw_reads),
                _percent(mapstats.reads_paired, row.raw_reads),
                _value(mapstats.mean_insert),
                _value(mapstats.adapter_perc),
                _value(mapstats.transposon_perc),
                _value(mapstats.error_rate),
            ]

        return [
            _value(study.ssid if study.ssid is not None else study.name),
            sample.name,
            row.name,
            _value(row.read_length),
            _value(row.raw_reads),
            _value(row.raw_bases),
            *mapping,
            _value(row.npg_qc_status),
            _value(row.qc_status.value if row.qc_status else None),
        ]


class AssemblyRole(LaneRole):
    """Genome assemblies, for assemblyfind"""

    name = "assembly"
    patterns = {
        FileCategory.CONTIGS: ("*_assembly/contigs.fa",),
        FileCategory.SCAFFOLD: ("*_assembly/scaffolds.scaffolded.fa",),
    }
    default_category = FileCategory.CONTIGS

    @staticmethod
    def assembly_type(path: Path) -> str:
        """Assembler that made a file, e.g. "spades" for spades_assembly/contigs.fa"""
        for parent in path.parents:
            if parent.name.endswith("_assembly"):
                return parent.name[: -len("_assembly")]
        return NA

    def root_dirs(self, lane):
        lane_dir = self.lane_dir(lane)
        return [p for p in sorted(lane_dir.glob("*_assembly")) if p.is_dir()]

    def stats_header(self):
        return [
            "Lane",
            "Assembly Type",
            "Contig Count",
            "Total Length",
            "Largest Contig",
            "N50",
        ]

    def stats_row(self, lane):
        contigs = _glob(self.lane_dir(lane), self.patterns[FileCategory.CONTIGS])
        if not contigs:
            return [lane.name] + [NA] * 5

        lengths = read_fasta_lengths(contigs[0])
        return [
            lane.name,
            self.assembly_type(contigs[0]),
            str(len(lengths)),
            str(sum(lengths)),
            _value(max(lengths, default=None)),
            _value(n50(lengths)),
        ]


class AnnotationRole(AssemblyRole):
    """Annotated assemblies, for annotationfind"""

    name = "annotation"
    patterns = {
        FileCategory.GFF: ("*_assembly/annotation/*.gff",),
        FileCategory.FAA: ("*_assembly/annotation/*.faa",),
        FileCategory.FFN: ("*_assembly/annotation/*.ffn",),
        FileCategory.GBK: ("*_assembly/annotation/*.gbk",),
    }
    default_category = FileCategory.GFF

    def root_dirs(self, lane):
        lane_dir = self.lane_dir(lane)
        return [p for p in sorted(lane_dir.glob("*_assembly/annotation")) if p.is_dir()]

    def stats_header(self):
        return ["Lane", "Assembly Type", "Gene Count", "CDS Count"]

    def stats_row(self, lane):
        gffs = _glob(self.lane_dir(lane), self.patterns[FileCategory.GFF])
        if not gffs:
            return [lane.name, NA, NA, NA]

        counts = count_gff_features(gffs[0])
        return [
            lane.name,
            self.assembly_type(gffs[0]),
            str(counts.get("gene", 0)),
            str(counts.get("CDS", 0)),
        ]


ROLES: Dict[str, type] = {
    DataRole.name: DataRole,
    AssemblyRole.name: AssemblyRole,
    AnnotationRole.name: AnnotationRole,
}


def get_role(name: str) -> LaneRole:
    """
    Build the role with the given name.

    Raises:
        ConfigurationError: if there is no such role
    """
    role_class = ROLES.get(name)
    if role_class is None:
        raise ConfigurationError(f"ERROR: no such lane role ({name})")
    return role_class()


def role_for_context(lane_roles: Dict[str, str], context: str) -> LaneRole:
    """
    Look up the role for a calling context, e.g. "pathfind", in the
    configured mapping.

    Raises:
        ConfigurationError: if the context isn't mapped to a known role
    """
    role_name = lane_roles.get(context)
    if role_name is None:
        raise ConfigurationError(
            f"ERROR: couldn't find a lane role for the current script ({context})"
        )
    return get_role(role_name)
