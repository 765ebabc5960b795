import sys
import json
import pytest
from abcscore import *
from abcscore import abccmd


TUNE = "X:1\nT:Cmd\nK:C\nCDEF|G4|\n\nX:2\nT:Second\nK:G\nG|\n"


@pytest.fixture
def abcfile(tmp_path):
    path = tmp_path / 'tune.abc'
    path.write_text(TUNE, encoding='utf-8')
    return path


def run_main(monkeypatch, *args):
    monkeypatch.setattr(AbcConfig, 'emit_warnings', True)
    monkeypatch.setattr(sys, 'argv', ['abcscore'] + list(args))
    abccmd.main()


def test_summary(monkeypatch, capsys, abcfile):
    run_main(monkeypatch, '-s', str(abcfile))
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "0: Cmd  BPM: 120  Systems: 1  Staffs: 1  Voices: 1  "
        "Notes: 5  Rests: 0  Bars: 2",
        "1: Second  BPM: 120  Systems: 1  Staffs: 1  Voices: 1  "
        "Notes: 1  Rests: 0  Bars: 1"]


def test_output_file(monkeypatch, abcfile, tmp_path):
    outfile = tmp_path / 'tune.json'
    run_main(monkeypatch, '-o', str(outfile), '--indent', '1', str(abcfile))
    with open(str(outfile), encoding='utf-8') as f:
        data = json.load(f)
    assert [t['metaText']['title'] for t in data['tunes']] == ['Cmd',
                                                               'Second']
    assert data['diagnostics'] == []


def test_select_tune(monkeypatch, capsys, abcfile):
    run_main(monkeypatch, '-n', '1', str(abcfile))
    data = json.loads(capsys.readouterr().out)
    assert [t['metaText']['title'] for t in data['tunes']] == ['Second']
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, '-n', '5', str(abcfile))
    assert e.value.code == 1
    assert 'out of range' in capsys.readouterr().err


def test_eval(monkeypatch, capsys):
    run_main(monkeypatch, '-e', 'X:1\\nK:C\\nC|')
    data = json.loads(capsys.readouterr().out)
    voice = data['tunes'][0]['lines'][0]['staff'][0]['voices'][0]
    assert [el['el_type'] for el in voice] == ['note', 'bar']


def test_diagnostics(monkeypatch, capsys):
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, '-d', '-e', 'X:1\\nK:C\\nM:bad\\nC')
    assert e.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err == "<input>:3:1: Invalid meter format\n"
    assert AbcConfig.emit_warnings is False


def test_quiet(monkeypatch, capsys):
    run_main(monkeypatch, '-q', '-s', '-e', 'X:1\\nK:C\\nM:bad\\nC')
    captured = capsys.readouterr()
    assert captured.err == ''
    assert captured.out.startswith('0: (untitled)')


def test_missing_file(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, str(tmp_path / 'nosuchfile.abc'))
    assert e.value.code == 1
    assert 'FileNotFoundError' in capsys.readouterr().err


def test_no_input(monkeypatch, capsys):
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch)
    assert e.value.code == 1
    assert 'one of INFILE' in capsys.readouterr().err


def test_error_exit(capsys):
    with pytest.raises(SystemExit):
        abccmd.error_exit(AbcError("bad input"))
    assert capsys.readouterr().err == "AbcError: bad input\n"


def test_show_config(monkeypatch, capsys):
    with pytest.raises(SystemExit) as e:
        run_main(monkeypatch, '--show-config')
    assert e.value.code == 0
    out = capsys.readouterr().out
    assert "default_note_length=(1, 8)" in out
    assert "first_slur_label=101" in out
