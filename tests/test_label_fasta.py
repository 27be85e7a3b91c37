import pytest

from label_fasta import label_fasta, label_line, single_label
from uc_parser import ConfigurationError, FileAccessError

FASTA = '>read_1 len=4\tsample=x\nACGT\n>read_2\nAC\nGT\n'


def test_label_line():
    assert label_line('>read_1 len=4\n', 'A') == '>Aread_1 len=4\n'
    assert label_line('ACGT\n', 'A') == 'ACGT\n'
    assert label_line('', 'A') == ''


def test_label_fasta_to_file(write_text, tmp_path):
    fasta = write_text('in.fasta', FASTA)
    out = tmp_path / 'out.fasta'
    assert label_fasta(fasta, 'A', str(out)) == 2
    assert out.read_text() == '>Aread_1 len=4\tsample=x\nACGT\n>Aread_2\nAC\nGT\n'


def test_only_headers_change(write_text, tmp_path):
    fasta = write_text('in.fasta', FASTA)
    out = tmp_path / 'out.fasta'
    label_fasta(fasta, 'sampleB', str(out))
    before = FASTA.splitlines()
    after = out.read_text().splitlines()
    assert len(before) == len(after)
    for old, new in zip(before, after):
        if old.startswith('>'):
            assert new == '>sampleB' + old[1:]
        else:
            assert new == old


def test_line_endings_preserved(tmp_path):
    fasta = tmp_path / 'in.fasta'
    fasta.write_bytes(b'>r1\r\nACGT\r\n>r2\nAC')
    out = tmp_path / 'out.fasta'
    label_fasta(str(fasta), 'A', str(out))
    assert out.read_bytes() == b'>Ar1\r\nACGT\r\n>Ar2\nAC'


def test_label_fasta_to_stdout(write_text, capsys):
    fasta = write_text('in.fasta', '>r1\nACGT\n')
    label_fasta(fasta, 'B', None)
    assert capsys.readouterr().out == '>Br1\nACGT\n'


def test_missing_input_does_not_create_output(tmp_path):
    out = tmp_path / 'out.fasta'
    with pytest.raises(FileAccessError):
        label_fasta(str(tmp_path / 'missing.fasta'), 'A', str(out))
    assert not out.exists()


def test_single_label():
    assert single_label(['A']) == 'A'
    with pytest.raises(ConfigurationError, match='no label declared'):
        single_label([])
    with pytest.raises(ConfigurationError, match='only one label'):
        single_label(['A', 'B'])


def test_latin1_bytes_pass_through(tmp_path):
    fasta = tmp_path / 'in.fasta'
    fasta.write_bytes(b'>read1 Mus m\xfcsculus\nAC\xfcGT\n')
    out = tmp_path / 'out.fasta'
    assert label_fasta(str(fasta), 'A', str(out)) == 1
    assert out.read_bytes() == b'>Aread1 Mus m\xfcsculus\nAC\xfcGT\n'
