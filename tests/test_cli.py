import exprfuzz.cli
from exprfuzz.cli import BANNER, main
from exprfuzz.errors import GeneratorFault


def test_prints_one_expression_per_line(capsys):
    assert main(['--seed', '3', '-n', '5']) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 5
    assert len(set(lines)) == 5


def test_seeded_runs_match(capsys):
    main(['--seed', '8', '-n', '4'])
    first = capsys.readouterr().out
    main(['--seed', '8', '-n', '4'])
    assert capsys.readouterr().out == first


def test_stats(capsys):
    assert main(['--seed', '1', '-n', '3', '--stats']) == 0
    assert 'attempts' in capsys.readouterr().err


def test_bad_weights_file(tmp_path, capsys):
    path = tmp_path / 'weights.json'
    path.write_text('{"recursive": {"binary": 0}}')
    assert main(['--weights', str(path), '-n', '1']) == 2
    assert main(['--weights', str(tmp_path / 'missing.json'), '-n', '1']) == 2
    assert 'exprfuzz:' in capsys.readouterr().err


def test_external_without_command(capsys):
    assert main(['--checker', 'external', '-n', '1']) == 2


def test_fault_is_reported(monkeypatch, capsys):
    def crash(**kwargs):
        try:
            raise RuntimeError('boom')
        except RuntimeError as e:
            raise GeneratorFault('a / b', "BinaryNode('/')") from e
        yield

    monkeypatch.setattr(exprfuzz.cli, 'generate', crash)
    assert main(['-n', '1']) == 1
    err = capsys.readouterr().err
    assert BANNER in err
    assert 'a / b' in err
    assert "BinaryNode('/')" in err
    assert 'RuntimeError: boom' in err


def test_malformed_weights_are_a_config_error(tmp_path, capsys):
    path = tmp_path / 'weights.json'
    path.write_text('{"depth": [["3", 1]]}')
    assert main(['--weights', str(path), '-n', '1']) == 2
    err = capsys.readouterr().err
    assert 'depth' in err
    assert BANNER not in err
