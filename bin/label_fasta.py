# (C) 2024, Maria Schreiber, MIT license
"""
Prefix every FASTA header with a sample label, a necessary step before
clustering reads from several samples together and running -comp_perc or
-comp_uniq on the result.

    >read_1 len=250   becomes   >Aread_1 len=250   (label A)
"""
from uc_parser import ConfigurationError, open_input, open_output


def single_label(labels):
    """Exactly one label can be inserted into a FASTA header."""
    if not labels:
        raise ConfigurationError('no label declared!')
    if len(labels) > 1:
        raise ConfigurationError(f'only one label can be added to a fasta file, got {len(labels)}: {" ".join(labels)}')
    return labels[0]


def label_line(line, label):
    if line.startswith('>'):
        return '>' + label + line[1:]
    return line


def label_fasta(fasta_file, label, output_file=None):
    """
    Write fasta_file to output_file (stdout if None) with label inserted after
    each '>'. Returns the number of labeled headers.
    """
    headers = 0
    # newline='' keeps the original line endings
    with open_input(fasta_file, newline='') as f, open_output(output_file) as out:
        for line in f:
            if line.startswith('>'):
                headers += 1
            out.write(label_line(line, label))
    return headers
