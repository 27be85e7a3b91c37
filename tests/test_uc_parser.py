import pytest

from uc_parser import (EmptyClusterError, FileAccessError, cluster_sort_key, members_before_summary,
                       open_input, open_output, parse_uc_line, read_sam, read_uc, split_uc, write_rows)


def test_parse_hit_line():
    record = parse_uc_line('H\t3\t250\t99.6\t+\t0\t0\t=\tAread_7\tAread_1\n', lineno=5)
    assert record.type == 'H'
    assert record.cluster == '3'
    assert record.size == '250'
    assert record.status == '0'
    assert record.alignment == '='
    assert record.query == 'Aread_7'
    assert record.lineno == 5
    assert not record.line.endswith('\n')


def test_short_line_leaves_missing_fields_empty():
    record = parse_uc_line('C\t0\t2\n')
    assert record.type == 'C'
    assert record.size == '2'
    assert record.query == ''
    assert record.alignment == ''


def test_read_uc_warns_once_about_malformed_lines(write_text, capsys):
    path = write_text('short.uc', 'S\t0\t250\t*\t*\t*\t*\t*\tr1\t*\n\nC\t0\t1\nC\t1\n')
    records = read_uc(path)
    assert [r.type for r in records] == ['S', 'C', 'C']
    assert [r.lineno for r in records] == [1, 3, 4]
    err = capsys.readouterr().err
    assert err.count('Warning') == 1
    assert '2 line(s)' in err


def test_split_uc(write_uc):
    path = write_uc('a.uc', [('S', 0, 250, 'r1'), ('H', 0, 250, 'r2'), ('C', 0, 2, 'r1')])
    summaries, members = split_uc(read_uc(path))
    assert [r.query for r in summaries] == ['r1']
    assert [r.query for r in members] == ['r1', 'r2']


def test_members_before_summary_stops_at_first_c_record(write_uc, capsys):
    path = write_uc('a.uc', [
        ('S', 0, 250, 'r1'),
        ('H', 0, 250, 'r2'),
        ('S', 1, 250, 'r3'),
        ('C', 0, 2, 'r1'),
        ('H', 1, 250, 'late'),
    ])
    clusters = members_before_summary(read_uc(path), path)
    assert {k: [r.query for r in v] for k, v in clusters.items()} == {'0': ['r1', 'r2'], '1': ['r3']}
    assert '1 S/H record(s) after the first C record' in capsys.readouterr().err


def test_cluster_sort_key_is_numeric():
    assert sorted(['10', '2', 'x', '0'], key=cluster_sort_key) == ['0', '2', '10', 'x']


def test_read_sam_skips_header_lines(write_text):
    path = write_text('a.sam', '@HD\tVN:1.6\n@SQ\tSN:geneA\tLN:900\nr1\t0\tgeneA\t10\nr2\t16\tgeneB\t40\n')
    records = read_sam(path)
    assert [(r.lineno, r.qname, r.gene) for r in records] == [(1, 'r1', 'geneA'), (2, 'r2', 'geneB')]
    assert records[0].line.startswith('r1\t0\tgeneA')


def test_open_input_missing_file(tmp_path):
    with pytest.raises(FileAccessError, match='Cannot open input file'):
        open_input(str(tmp_path / 'missing.uc'))


def test_open_output_on_directory(tmp_path):
    with pytest.raises(FileAccessError, match='Cannot open output file'):
        with open_output(str(tmp_path)):
            pass


def test_open_output_defaults_to_stdout(capsys):
    with open_output() as out:
        out.write('hello\n')
    assert capsys.readouterr().out == 'hello\n'


def test_empty_cluster_error_names_cluster():
    error = EmptyClusterError('7')
    assert error.cluster == '7'
    assert isinstance(error, ArithmeticError)
    assert 'cluster 7' in str(error)


def test_read_uc_keeps_undecodable_bytes(tmp_path):
    path = tmp_path / 'a.uc'
    path.write_bytes(b'S\t0\t250\t*\t*\t*\t*\t*\tm\xfcs1\t*\n')
    record = read_uc(str(path))[0]
    assert record.query.encode('utf-8', 'surrogateescape') == b'm\xfcs1'


def test_write_rows_does_not_quote(capsys):
    with open_output() as out:
        write_rows([['read1 len=4', '0', 1]], out, ' ')
    assert capsys.readouterr().out == 'read1 len=4 0 1\n'
