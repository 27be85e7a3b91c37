# (C) 2024, Maria Schreiber, MIT license
"""
Shared readers for UCLUST (.uc) and SAM files used by uc_stats_script.py
and compsam_script.py.

A .uc line is tab separated:
    type  cluster  size  %id  strand  -  -  alignment  query  target
with type being C (cluster summary), S (seed/centroid) or H (hit).
"""
import sys
from collections import namedtuple
from contextlib import contextmanager

UC_QUERY_FIELD = 8
SAM_GENE_FIELD = 2

UcRecord = namedtuple('UcRecord', ['type', 'cluster', 'size', 'status', 'alignment', 'query', 'lineno', 'line'])
SamRecord = namedtuple('SamRecord', ['lineno', 'qname', 'gene', 'line'])


class ConfigurationError(ValueError):
    """
    Raised when the command line asks for something impossible
    (no mode, several modes, missing label or input file).
    """


class FileAccessError(OSError):
    """Raised when an input or output file cannot be opened."""


class EmptyClusterError(ArithmeticError):
    """
    Raised when the label composition of a cluster is requested
    but none of its reads carries one of the labels.
    """
    def __init__(self, cluster):
        self.cluster = cluster
        super().__init__(f'cluster {cluster} has no reads matching any label')


def warn(message):
    print(f'Warning: {message}', file=sys.stderr)


# Undecodable bytes (e.g. latin-1 read names) are carried through as surrogates
# and written back unchanged by open_output.
ENCODING = 'utf-8'
ENCODING_ERRORS = 'surrogateescape'


def open_input(path, newline=None):
    """Open a text file for reading, translating OS errors to FileAccessError."""
    try:
        return open(path, 'r', newline=newline, encoding=ENCODING, errors=ENCODING_ERRORS)
    except OSError as e:
        raise FileAccessError(f'Cannot open input file {path}: {e.strerror}') from e


@contextmanager
def open_output(path=None):
    """Yield a writable handle for path, or stdout when no path is given."""
    if path is None:
        if hasattr(sys.stdout, 'reconfigure'):
            sys.stdout.reconfigure(errors=ENCODING_ERRORS)
        yield sys.stdout
        return
    try:
        handle = open(path, 'w', newline='', encoding=ENCODING, errors=ENCODING_ERRORS)
    except OSError as e:
        raise FileAccessError(f'Cannot open output file {path}: {e.strerror}') from e
    with handle:
        yield handle


def write_rows(rows, out, delimiter='\t'):
    """Write rows as delimiter separated lines, fields unquoted."""
    for row in rows:
        out.write(delimiter.join(str(field) for field in row) + '\n')


def _field(fields, idx):
    return fields[idx] if idx < len(fields) else ''


def parse_uc_line(line, lineno=0):
    """Split one .uc line into a UcRecord. Missing columns become ''."""
    line = line.rstrip('\r\n')
    fields = line.split('\t')
    return UcRecord(
        type=line[:1],
        cluster=_field(fields, 1),
        size=_field(fields, 2),
        status=_field(fields, 6),
        alignment=_field(fields, 7),
        query=_field(fields, UC_QUERY_FIELD),
        lineno=lineno,
        line=line,
    )


def read_uc(uc_file):
    """Read all records of a .uc file in file order."""
    records = []
    malformed = 0
    with open_input(uc_file) as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            record = parse_uc_line(line, lineno)
            if record.line.count('\t') < UC_QUERY_FIELD:
                malformed += 1
            records.append(record)

    if malformed:
        warn(f'{malformed} line(s) in {uc_file} have fewer than {UC_QUERY_FIELD + 1} columns, missing fields left empty')
    return records


def split_uc(records):
    """Separate cluster summaries (C) from centroids and hits (S/H)."""
    summaries = [r for r in records if r.type == 'C']
    members = [r for r in records if r.type in ('S', 'H')]
    return summaries, members


def members_before_summary(records, uc_file=''):
    """
    Group S/H records by cluster number, stopping at the first C record.

    UCLUST writes all S/H lines before the C lines. Records found after the
    first C line are ignored; if there are any a warning is printed.
    """
    clusters = {}
    ignored = 0
    seen_summary = False
    for record in records:
        if record.type == 'C':
            seen_summary = True
            continue
        if record.type not in ('S', 'H'):
            continue
        if seen_summary:
            ignored += 1
            continue
        clusters.setdefault(record.cluster, []).append(record)

    if ignored:
        warn(f'{ignored} S/H record(s) after the first C record in {uc_file} were ignored')
    return clusters


def cluster_sort_key(cluster):
    """Numeric order for cluster numbers, non-numeric keys last."""
    if cluster.isdigit():
        return (0, int(cluster), '')
    return (1, 0, cluster)


def read_sam(sam_file):
    """Read the alignment lines of a SAM file; '@' header lines are skipped and not counted."""
    records = []
    with open_input(sam_file) as f:
        for line in f:
            if line.startswith('@') or not line.strip():
                continue
            line = line.rstrip('\r\n')
            fields = line.split('\t')
            records.append(SamRecord(
                lineno=len(records) + 1,
                qname=fields[0],
                gene=_field(fields, SAM_GENE_FIELD),
                line=line,
            ))
    return records
