import matplotlib
matplotlib.use('Agg')

import pytest


def uc_line(rec_type, cluster, size, query, target='*'):
    """One .uc line the way usearch -cluster_fast writes it."""
    if rec_type == 'H':
        fields = ['H', cluster, size, '99.6', '+', '0', '0', '=', query, target]
    else:
        fields = [rec_type, cluster, size, '*', '*', '*', '*', '*', query, target]
    return '\t'.join(str(f) for f in fields)


@pytest.fixture
def write_uc(tmp_path):
    """Write (type, cluster, size, query) tuples as a .uc file and return its path."""
    def write(name, records):
        path = tmp_path / name
        path.write_text(''.join(uc_line(*record) + '\n' for record in records))
        return str(path)
    return write


@pytest.fixture
def write_text(tmp_path):
    def write(name, text):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return write
