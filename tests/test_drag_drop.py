from concurrent.futures import Future

import pytest

from hexrules.config import DRAG_Z_INDEX
from hexrules.drag_drop import DragDropController, GesturePhase, InteractionType
from hexrules.hex_utils import ORIGIN, HexCoord
from hexrules.rules import MovementRules


class ReactionRecorder:
    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def __call__(self, piece, from_coord):
        self.calls.append((piece, from_coord))
        return self.result


@pytest.fixture
def recorder():
    return ReactionRecorder()


@pytest.fixture
def clicks():
    return []


@pytest.fixture
def controller(board, occupancy, piece_types, stacking, clock, recorder, clicks):
    rules = MovementRules(board, occupancy, piece_types)
    return DragDropController(board, occupancy, rules, stacking, react=recorder, clock=clock,
                              on_click=clicks.append)


def drag(controller, board, start: HexCoord, end_xy):
    x, y = board.pixel_of(start)
    controller.pointer_down(x, y)
    controller.pointer_move(x + 20, y)
    controller.pointer_move(*end_xy)
    return controller.pointer_up(*end_xy)


def test_drop_on_origin_skips_commit(controller, board, make_piece, recorder):
    start = HexCoord(1, 0, -1)
    piece = make_piece("soldier", start, z_index=4)
    x, y = board.pixel_of(start)
    result = drag(controller, board, start, (x + 8, y - 6))
    assert result is InteractionType.DRAG
    assert piece.coord == start
    assert recorder.calls == []
    assert piece.z_index == 4
    assert piece.original_z_index is None
    assert (piece.x, piece.y) == (x, y)


def test_quick_release_is_click(controller, board, make_piece, clock, clicks):
    piece = make_piece("soldier", ORIGIN)
    controller.pointer_down(2, 2)
    clock.advance(100)
    assert controller.pointer_up(3, 2) is InteractionType.CLICK
    assert clicks == [piece]
    assert controller.phase is GesturePhase.IDLE


def test_slow_release_is_not_click(controller, make_piece, clock, clicks):
    make_piece("soldier", ORIGIN)
    controller.pointer_down(0, 0)
    clock.advance(300)
    assert controller.pointer_up(0, 0) is None
    assert clicks == []


def test_press_on_empty_space_starts_nothing(controller, make_piece):
    make_piece("soldier", ORIGIN)
    assert controller.pointer_down(1000, 1000) is None
    assert controller.pointer_up(1000, 1000) is None


def test_drag_lifts_piece_and_tracks_pointer(controller, board, make_piece):
    piece = make_piece("soldier", ORIGIN, z_index=2)
    controller.pointer_down(3, 2)
    controller.pointer_move(100, 100)
    assert controller.phase is GesturePhase.DRAGGING
    assert piece.z_index == DRAG_Z_INDEX
    assert piece.original_z_index == 2
    assert (piece.x, piece.y) == (97, 98)
    assert piece.coord == ORIGIN
    assert HexCoord(0, 2, -2) in controller.valid_moves


def test_legal_drop_commits_and_runs_reaction(controller, board, make_piece, occupancy, recorder):
    piece = make_piece("soldier", ORIGIN, z_index=2)
    target = HexCoord(0, 2, -2)
    assert drag(controller, board, ORIGIN, board.pixel_of(target)) is InteractionType.DRAG
    assert piece.coord == target
    assert occupancy.at(target) == [piece]
    assert occupancy.at(ORIGIN) == []
    assert recorder.calls == [(piece, ORIGIN)]
    assert piece.original_z_index is None
    assert piece.z_index == 1
    assert (piece.x, piece.y) == board.pixel_of(target)


def test_drop_restacks_over_co_occupants(controller, board, make_piece):
    piece = make_piece("soldier", ORIGIN)
    make_piece("beacon", HexCoord(0, 1, -1), z_index=3)
    drag(controller, board, ORIGIN, board.pixel_of(HexCoord(0, 1, -1)))
    assert piece.z_index == 4


def test_illegal_drop_reverts(controller, board, make_piece, recorder):
    piece = make_piece("soldier", ORIGIN, z_index=2)
    drag(controller, board, ORIGIN, board.pixel_of(HexCoord(0, 4, -4)))
    assert piece.coord == ORIGIN
    assert piece.z_index == 2
    assert (piece.x, piece.y) == board.pixel_of(ORIGIN)
    assert recorder.calls == []


def test_drop_off_board_reverts(controller, board, make_piece):
    piece = make_piece("soldier", ORIGIN)
    drag(controller, board, ORIGIN, (5000, 5000))
    assert piece.coord == ORIGIN


def test_pointer_leave_reverts_drag(controller, board, make_piece):
    piece = make_piece("soldier", ORIGIN, z_index=2)
    controller.pointer_down(0, 0)
    controller.pointer_move(60, 0)
    controller.pointer_leave()
    assert controller.phase is GesturePhase.IDLE
    assert piece.z_index == 2
    assert (piece.x, piece.y) == board.pixel_of(ORIGIN)


def test_immovable_piece_never_drags(controller, make_piece):
    rock = make_piece("rock", ORIGIN, z_index=2)
    controller.pointer_down(0, 0)
    controller.pointer_move(60, 0)
    assert controller.phase is GesturePhase.PENDING
    assert rock.z_index == 2
    assert controller.pointer_up(60, 0) is None


def test_topmost_piece_is_picked(controller, make_piece):
    make_piece("soldier", ORIGIN, z_index=1)
    top = make_piece("soldier", ORIGIN, z_index=5)
    make_piece("shadow", ORIGIN, z_index=9)
    assert controller.pointer_down(0, 0) is top


def test_reaction_future_is_exposed(board, occupancy, piece_types, stacking, clock, make_piece):
    pending = Future()
    controller = DragDropController(board, occupancy, MovementRules(board, occupancy, piece_types), stacking,
                                    react=ReactionRecorder(pending), clock=clock)
    make_piece("soldier", ORIGIN)
    drag(controller, board, ORIGIN, board.pixel_of(HexCoord(1, 0, -1)))
    assert controller.last_reaction is pending


def test_off_centre_grab_snaps_by_drawn_centre(controller, board, make_piece, recorder):
    piece = make_piece("soldier", ORIGIN)
    target = HexCoord(1, 0, -1)
    tx, ty = board.pixel_of(target)
    controller.pointer_down(40, 0)
    controller.pointer_move(60, 0)
    controller.pointer_move(tx + 40, ty)
    assert (piece.x, piece.y) == (tx, ty)

    assert controller.pointer_up(tx + 40, ty) is InteractionType.DRAG
    assert piece.coord == target
    assert recorder.calls == [(piece, ORIGIN)]
