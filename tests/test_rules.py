from hexrules.hex_utils import ORIGIN, HexCoord, distance
from hexrules.rules import MovementRules


def _rules(board, occupancy, piece_types):
    return MovementRules(board, occupancy, piece_types)


def test_ray_rule_uses_move_range(board, occupancy, piece_types, make_piece):
    soldier = make_piece("soldier", ORIGIN)
    moves = _rules(board, occupancy, piece_types).valid_moves(soldier)
    assert len(moves) == 12
    assert all(1 <= distance(ORIGIN, c) <= 2 for c in moves)


def test_immovable_piece_has_no_moves(board, occupancy, piece_types, make_piece):
    rock = make_piece("rock", ORIGIN)
    assert _rules(board, occupancy, piece_types).valid_moves(rock) == set()


def test_any_rule_excludes_blocked_cells(board, occupancy, piece_types, make_piece):
    runner = make_piece("runner", ORIGIN)
    make_piece("rock", HexCoord(3, -3, 0))
    moves = _rules(board, occupancy, piece_types).valid_moves(runner)
    assert HexCoord(6, -6, 0) in moves
    assert HexCoord(3, -3, 0) not in moves
    assert ORIGIN not in moves


def test_swap_rule_targets_movable_pieces(board, occupancy, piece_types, make_piece):
    mage = make_piece("mage", ORIGIN)
    soldier = make_piece("soldier", HexCoord(2, -1, -1))
    make_piece("rock", HexCoord(1, 0, -1))
    moves = _rules(board, occupancy, piece_types).valid_moves(mage)
    assert moves == {soldier.coord}


def test_forbidden_coordinate_vetoes_drop(board, occupancy, piece_types, make_piece):
    runner = make_piece("runner", ORIGIN)
    rules = _rules(board, occupancy, piece_types)
    forbidden = HexCoord(-5, -1, 6)
    assert forbidden in rules.valid_moves(runner)
    assert not rules.can_move_to(runner, forbidden)
    assert rules.can_move_to(runner, HexCoord(-5, 0, 5))
