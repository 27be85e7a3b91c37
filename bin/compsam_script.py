# (C) 2024, Maria Schreiber, MIT license
"""
This script takes one .uc and one .sam file of the same reads and reports,
for each cluster, the genes (SAM reference names) its reads were mapped to.

compsam_script.py \
    -uc reads.uc \
    -sam reads.sam \
    ( -out genes_per_cluster.tsv ) \
    ( -uniq_genes | -num_uniq )

Output, one row per cluster with at least one mapped read:
    default      c<cluster>  gene of every read
    -uniq_genes  c<cluster>  distinct genes
    -num_uniq    c<cluster>  number of distinct genes
"""
import argparse
import sys
from bisect import bisect_left

from uc_parser import (ConfigurationError, FileAccessError, cluster_sort_key, members_before_summary,
                       open_output, read_sam, read_uc, warn, write_rows)


def setup_parser():
    """Configure command-line argument parser."""
    parser = argparse.ArgumentParser(description='Genes the reads of each UCLUST cluster were mapped to')
    parser.add_argument('-uc', '--uc', required=True, help='UCLUST output (.uc file)')
    parser.add_argument('-sam', '--sam', required=True, help='Alignment of the same reads (.sam file)')
    parser.add_argument('-out', '--out', help='Output file, default: stdout')
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('-uniq_genes', '--uniq_genes', action='store_true',
                      help='List the distinct genes the reads of each cluster were mapped to')
    mode.add_argument('-num_uniq', '--num_uniq', action='store_true',
                      help='Number of distinct genes the reads of each cluster were mapped to')
    parser.add_argument('--cumulative_genes', action='store_true',
                        help='Collect distinct genes over all clusters reported so far instead of per cluster')
    return parser


class SamIndex:
    """
    Prefix lookup over the query names of a SAM file.

    A read matches the earliest SAM record whose line begins with the read ID,
    so 'read1' also matches 'read10' if that record comes first.
    """

    def __init__(self, records):
        self.first = {}
        for record in records:
            self.first.setdefault(record.qname, record)
        self.names = sorted(self.first)

    @classmethod
    def from_file(cls, sam_file):
        return cls(read_sam(sam_file))

    def find(self, read_id):
        found = None
        for i in range(bisect_left(self.names, read_id), len(self.names)):
            name = self.names[i]
            if not name.startswith(read_id):
                break
            record = self.first[name]
            if found is None or record.lineno < found.lineno:
                found = record
        return found


def load_uc_reads(uc_file):
    """Cluster number -> {uc line number: read ID} for S/H records before the first C record."""
    clusters = members_before_summary(read_uc(uc_file), uc_file)
    return {cluster: {r.lineno: r.query for r in records} for cluster, records in clusters.items()}


def map_genes(uc_reads, sam_index):
    """
    Cluster number -> {sam line number: gene}, clusters in numeric order.
    Each SAM record is stored once per cluster; clusters without any mapped read are left out.
    """
    result = {}
    empty = 0
    for cluster in sorted(uc_reads, key=cluster_sort_key):
        for read_id in uc_reads[cluster].values():
            if not read_id:
                empty += 1
                continue
            record = sam_index.find(read_id)
            if record is None:
                continue
            result.setdefault(cluster, {}).setdefault(record.lineno, record.gene)
    if empty:
        warn(f'{empty} read(s) without an identifier were not mapped')
    return result


def gene_rows(result, mode='all', cumulative=False):
    """
    Report rows for the mapped genes. mode is 'all', 'uniq_genes' or 'num_uniq'.
    With cumulative the distinct genes of a cluster include those of all previous clusters.
    """
    if mode not in ('all', 'uniq_genes', 'num_uniq'):
        raise ConfigurationError(f'Unsupported report mode: {mode}')

    rows = []
    seen = []
    for cluster, genes_by_record in result.items():
        genes = list(genes_by_record.values())
        if mode == 'all':
            rows.append([f'c{cluster}'] + genes)
            continue

        if cumulative:
            seen.extend(genes)
            genes = seen
        unique = list(dict.fromkeys(genes))
        if mode == 'uniq_genes':
            rows.append([f'c{cluster}'] + unique)
        else:
            rows.append([f'c{cluster}', len(unique)])
    return rows


def main(argv=None):
    parser = setup_parser()
    args = parser.parse_args(argv)
    mode = 'uniq_genes' if args.uniq_genes else 'num_uniq' if args.num_uniq else 'all'

    try:
        print(f'Read {args.uc}', file=sys.stderr)
        uc_reads = load_uc_reads(args.uc)
        print(f'Read {args.sam}', file=sys.stderr)
        sam_index = SamIndex.from_file(args.sam)

        result = map_genes(uc_reads, sam_index)
        rows = gene_rows(result, mode, args.cumulative_genes)
        with open_output(args.out) as out:
            write_rows(rows, out)
    except (ConfigurationError, FileAccessError) as e:
        sys.exit(f'Error: {e}')


if __name__ == '__main__':
    main()
