import csv
import io

import numpy as np
import pytest

from lhcube.cli import main


def _read(text):
    rows = list(csv.reader(io.StringIO(text)))
    return rows[0], np.asarray([[float(v) for v in row] for row in rows[1:]])


def test_cli_stdout(capsys):
    assert main(['5', '2', '--scale', '0:1', '--seed', '1']) == 0
    headings, values = _read(capsys.readouterr().out)
    assert headings == ['dim0', 'dim1']
    assert values.shape == (5, 2)
    for dim in range(2):
        np.testing.assert_allclose(np.sort(values[:, dim]), [0., 0.2, 0.4, 0.6, 0.8])


def test_cli_output_file(tmp_path):
    output = tmp_path / 'out.csv'
    assert main(['10', '3', '--override', '1:10:20', '--override', '2:-1:0', '--jitter', '0,2',
                 '--headings', 'a,b,c', '--method', 'rejection', '-o', str(output)]) == 0
    headings, values = _read(output.read_text())
    assert headings == ['a', 'b', 'c']
    assert values.shape == (10, 3)
    assert np.all((values[:, 1] >= 10.) & (values[:, 1] < 20.))
    assert np.all((values[:, 2] >= -1.) & (values[:, 2] < 0.))


def test_cli_seed_reproducible(capsys):
    main(['20', '2', '--jitter', 'true', '--seed', '7'])
    first = capsys.readouterr().out
    main(['20', '2', '--jitter', 'true', '--seed', '7'])
    assert capsys.readouterr().out == first


def test_cli_configuration_error_writes_nothing(tmp_path):
    output = tmp_path / 'out.csv'
    assert main(['5', '2', '--jitter', '0,0', '-o', str(output)]) == 2
    assert main(['5', '2', '--scale', '1:0', '-o', str(output)]) == 2
    assert main(['0', '2', '-o', str(output)]) == 2
    assert main(['5', '2', '-o', str(tmp_path / 'missing' / 'out.csv')]) == 2
    assert list(tmp_path.iterdir()) == []


def test_cli_requires_counts():
    with pytest.raises(SystemExit) as e:
        main([])
    assert e.value.code == 2


def test_cli_config_file(tmp_path, capsys):
    path = tmp_path / 'config.toml'
    path.write_text('[lhcube]\npoints = 4\ndimensions = 2\nscale = "0:4"\nheadings = ["x", "y"]\nseed = 1\n')
    assert main(['--config', str(path)]) == 0
    headings, values = _read(capsys.readouterr().out)
    assert headings == ['x', 'y']
    assert values.shape == (4, 2)
    assert main(['6', '--config', str(path)]) == 0
    _, values = _read(capsys.readouterr().out)
    assert values.shape == (6, 2)


def test_cli_summary_and_plot(tmp_path, capsys):
    plot = tmp_path / 'plot.png'
    assert main(['6', '2', '--seed', '0', '--summary', '--plot', str(plot)]) == 0
    captured = capsys.readouterr()
    assert 'points: 6' in captured.err
    assert 'points: 6' not in captured.out
    assert plot.exists()
