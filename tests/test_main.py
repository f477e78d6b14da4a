"""
Tests for the towerrisk command line.

Run with: pytest tests/test_main.py -v
"""

import pytest

from towerrisk.main import main, parse_coord
from towerrisk.simulation.grid import ProbabilityGrid
from towerrisk.utils.persistence import load_grid, save_grid


@pytest.fixture
def board(tmp_path):
    path = tmp_path / "5x4_0.board"
    assert main(['new', '--width', '5', '--height', '4', '--out', str(path)]) == 0
    return path


def test_parse_coord():
    assert parse_coord("3,7") == (3, 7)
    with pytest.raises(Exception):
        parse_coord("3;7")


def test_new_creates_board(board):
    grid = load_grid(board)
    assert grid.width == 5 and grid.height == 4
    assert grid.get_probability(2, 2) == 0.01


def test_show_prints_board(board, capsys):
    assert main(['show', str(board)]) == 0
    out = capsys.readouterr().out
    assert '00000' in out
    assert 'Legend:' in out


def test_plan_prints_path(board, capsys):
    assert main(['plan', str(board), '--origin', '0,0', '--target', '4,3']) == 0
    out = capsys.readouterr().out
    assert out.startswith('Path (')
    assert out.rstrip().endswith('(4,3)')


def test_plan_unreachable(tmp_path, capsys):
    grid = ProbabilityGrid(3, 3, prior=0.0)
    for x, y in [(1, 0), (1, 1), (1, 2)]:
        grid.set_obstacle(x, y)
    path = save_grid(grid, tmp_path / "walled.board")

    assert main(['plan', str(path), '--origin', '0,0', '--target', '2,2']) == 1
    assert 'No path' in capsys.readouterr().out


def test_plan_out_of_bounds(board):
    assert main(['plan', str(board), '--origin', '0,0', '--target', '9,9']) == 2


def test_missing_board_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['show', str(tmp_path / "missing.board")])
    assert exc.value.code == 2


def test_bad_coordinate_rejected(board):
    with pytest.raises(SystemExit):
        main(['plan', str(board), '--origin', 'zero', '--target', '1,1'])
