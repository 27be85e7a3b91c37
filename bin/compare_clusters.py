# (C) 2024, Maria Schreiber, MIT license
"""
Compare clusterings of the same reads made under different UCLUST settings
(e.g. different identity thresholds).

For every centroid of the main clustering the secondary clusterings are
searched for a centroid (S) or, failing that, a hit (H) whose identifier
contains the centroid ID, and the size of the cluster it landed in is
reported.
"""
from uc_parser import read_uc, split_uc

NOT_AVAILABLE = 'NA'


class UcIndex:
    """Lookup tables of one secondary .uc file, built once."""

    def __init__(self, records):
        summaries, members = split_uc(records)
        # identifier -> record, insertion order is file order
        self.centroids = {}
        self.hits = {}
        for record in members:
            table = self.centroids if record.type == 'S' else self.hits
            table.pop(record.query, None)
            table[record.query] = record
        self.sizes = {record.cluster: record.size for record in summaries}

    @classmethod
    def from_file(cls, uc_file):
        return cls(read_uc(uc_file))

    @staticmethod
    def _last_containing(table, centroid_id):
        # unanchored substring match, last record in file order wins
        found = None
        for query, record in table.items():
            if centroid_id in query:
                found = record
        return found

    def find(self, centroid_id):
        """
        Return (type, cluster, size) of the record whose identifier contains
        centroid_id, preferring centroids over hits. NA triple if nothing matches.
        """
        record = self._last_containing(self.centroids, centroid_id)
        if record is None:
            record = self._last_containing(self.hits, centroid_id)
        if record is None:
            return NOT_AVAILABLE, NOT_AVAILABLE, NOT_AVAILABLE
        return record.type, record.cluster, self.sizes.get(record.cluster, NOT_AVAILABLE)


def summary_rows(input_file, skip_header=False):
    """Rows for a single clustering: centroid ID, cluster no. and size per C record."""
    summaries, _ = split_uc(read_uc(input_file))
    rows = [] if skip_header else [[input_file, '', '']]
    rows.extend([c.query, c.cluster, c.size] for c in summaries)
    return rows


def header_rows(input_file, files2compare, show_sh=False):
    file_row = [input_file, '']
    column_row = ['centroid ID', 'cluster no.', 'size']
    for file2compare in files2compare:
        file_row.append(file2compare)
        if show_sh:
            file_row.append('')
            column_row.append('S/H')
        column_row.append('size')
    return [file_row, column_row]


def comparison_rows(input_file, files2compare, show_sh=False, skip_header=False):
    """Rows matching every centroid of input_file against each file in files2compare."""
    summaries, _ = split_uc(read_uc(input_file))
    indexes = [UcIndex.from_file(f) for f in files2compare]

    rows = [] if skip_header else header_rows(input_file, files2compare, show_sh)
    for summary in summaries:
        row = [summary.query, summary.cluster, summary.size]
        for index in indexes:
            rec_type, _, size = index.find(summary.query)
            if show_sh:
                row.append(rec_type)
            row.append(size)
        rows.append(row)
    return rows


def compare_clusterings(input_file, files2compare=None, show_sh=False, skip_header=False):
    if not files2compare:
        return summary_rows(input_file, skip_header)
    return comparison_rows(input_file, files2compare, show_sh, skip_header)
