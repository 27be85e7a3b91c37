# (C) 2024, Maria Schreiber, MIT license
"""
This script uses UCLUST output (.uc files) as input and does some useful
rearrangements/calculations with it. Exactly one of the main options must be given:

    -comp_thresh  compare clusterings of the same reads made with different UCLUST settings
    -addtofasta   add a sample label to fasta headers (needed for -comp_perc and -comp_uniq)
    -comp_perc    composition of each cluster in percent per label
    -comp_uniq    number of clusters unique to one label or shared between labels

uc_stats_script.py -addtofasta -i A.fasta -l A -o A_labeled.fasta
uc_stats_script.py -addtofasta -i B.fasta -l B -o B_labeled.fasta
cat A_labeled.fasta B_labeled.fasta > all.fasta
usearch -cluster_fast all.fasta -id 0.97 -uc clusters.uc
uc_stats_script.py -comp_perc -i clusters.uc -l A B -o clusters.comp_perc.tsv \
    ( -d , ) ( --plot clusters.comp_perc )
"""
import argparse
import sys

from cluster_composition import (load_clusters, percentage_rows, percentage_table, plot_percentages,
                                 plot_uniqueness, uniqueness_counts, uniqueness_rows, validate_labels)
from compare_clusters import compare_clusterings
from label_fasta import label_fasta, single_label
from uc_parser import ConfigurationError, EmptyClusterError, FileAccessError, open_output, write_rows

MODES = ['comp_thresh', 'addtofasta', 'comp_perc', 'comp_uniq']


def setup_parser():
    """Configure command-line argument parser."""
    parser = argparse.ArgumentParser(description='Rearrangements and statistics on UCLUST output (.uc files)')
    parser.add_argument('-comp_thresh', '--comp_thresh', action='store_true',
                        help='Compare UCLUST output of the same input generated with different UCLUST settings')
    parser.add_argument('-addtofasta', '--addtofasta', action='store_true',
                        help='Add a label to fasta headers (required for -comp_perc and -comp_uniq)')
    parser.add_argument('-comp_perc', '--comp_perc', action='store_true',
                        help='Composition of each cluster in percent per label')
    parser.add_argument('-comp_uniq', '--comp_uniq', action='store_true',
                        help='Number of clusters unique for one label or shared')
    parser.add_argument('-i', '--inputfile', help='Input .uc file (.fasta for -addtofasta)')
    parser.add_argument('-f', '--files2compare', nargs='+', default=[],
                        help='Additional .uc files to match against the input (-comp_thresh)')
    parser.add_argument('-o', '--outfilename', help='Output file, default: stdout')
    parser.add_argument('-d', '--delimiter', default='\t', help='Output delimiter (default: tab)')
    parser.add_argument('-p', '--print_SH', action='store_true',
                        help='Show whether the matched read is a centroid (S) or a hit (H) (-comp_thresh)')
    parser.add_argument('-s', '--skip_header', action='store_true', help='Skip header rows (-comp_thresh)')
    parser.add_argument('-l', '--labels', nargs='+', default=[],
                        help='Label(s), the same used to mark the fasta headers with -addtofasta')
    parser.add_argument('--plot', metavar='PREFIX',
                        help='Also save a summary plot as PREFIX.png and PREFIX.svg (-comp_perc, -comp_uniq)')
    parser.add_argument('--fail_on_empty', action='store_true',
                        help='Stop with an error on clusters without labeled reads instead of skipping them (-comp_perc)')
    return parser


def validate_args(args):
    """Ensure exactly one mode and an input file were given."""
    if sum(getattr(args, mode) for mode in MODES) != 1:
        raise ConfigurationError('please select one (and only one) of these options: -comp_thresh -addtofasta -comp_perc -comp_uniq')
    if not args.inputfile:
        raise ConfigurationError('no input file given, use -i')


def resolve_delimiter(delimiter):
    """Accept '\\t' typed literally on the command line."""
    delimiter = {'\\t': '\t', 'tab': '\t'}.get(delimiter, delimiter)
    if len(delimiter) != 1:
        raise ConfigurationError(f'delimiter must be a single character, got {delimiter!r}')
    return delimiter


def write_report(rows, output_file, delimiter):
    with open_output(output_file) as out:
        write_rows(rows, out, delimiter)


def run(args):
    validate_args(args)
    delimiter = resolve_delimiter(args.delimiter)

    if args.comp_thresh:
        print(f'Read {args.inputfile}', file=sys.stderr)
        rows = compare_clusterings(args.inputfile, args.files2compare, args.print_SH, args.skip_header)
        write_report(rows, args.outfilename, delimiter)

    elif args.addtofasta:
        label = single_label(args.labels)
        headers = label_fasta(args.inputfile, label, args.outfilename)
        print(f'Added label {label} to {headers} fasta headers', file=sys.stderr)

    elif args.comp_perc:
        labels = validate_labels(args.labels)
        clusters = load_clusters(args.inputfile)
        print(f'Read {len(clusters)} clusters from {args.inputfile}', file=sys.stderr)
        table = percentage_table(clusters, labels, skip_empty=not args.fail_on_empty)
        write_report(percentage_rows(table), args.outfilename, delimiter)
        if args.plot:
            plot_percentages(table, labels, args.plot)

    elif args.comp_uniq:
        labels = validate_labels(args.labels)
        clusters = load_clusters(args.inputfile)
        print(f'Read {len(clusters)} clusters from {args.inputfile}', file=sys.stderr)
        uniqueness = uniqueness_counts(clusters, labels)
        write_report(uniqueness_rows(uniqueness), args.outfilename, delimiter)
        if args.plot:
            plot_uniqueness(uniqueness, args.plot)


def main(argv=None):
    parser = setup_parser()
    args = parser.parse_args(argv)
    try:
        run(args)
    except (ConfigurationError, FileAccessError, EmptyClusterError) as e:
        sys.exit(f'Error: {e}')


if __name__ == '__main__':
    main()
