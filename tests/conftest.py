import pytest

from hexrules.board import Board
from hexrules.hex_utils import HexCoord
from hexrules.occupancy import OccupancyIndex
from hexrules.pieces import LinkMode, Piece, PieceKind, PieceType
from hexrules.stacking import StackingResolver


class FakeClock:
    """Millisecond clock that only moves when a test advances it."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def create_test_board(radius: int = 7, hex_size: float = 36) -> Board:
    """Creates a hexagonal board centered on pixel (0, 0)."""
    return Board(radius=radius, hex_size=hex_size)


TEST_PIECE_TYPES = {
    "soldier": PieceType(id="soldier", name="Soldier", kind=PieceKind.PLAIN, move_rule="ray", move_range=2,
                         on_dropped="beacon_travel"),
    "runner": PieceType(id="runner", name="Runner", kind=PieceKind.PLAIN, move_rule="any",
                        forbidden_coords=[HexCoord(-5, -1, 6)]),
    "mage": PieceType(id="mage", name="Mage", kind=PieceKind.PLAIN, move_rule="swap", move_range=6,
                      on_dropped="swap"),
    "commander": PieceType(id="commander", name="Commander", kind=PieceKind.DOMINANT, move_rule="ray",
                           move_range=1),
    "red": PieceType(id="red", name="Red", kind=PieceKind.SUBORDINATE, move_rule="any"),
    "rock": PieceType(id="rock", name="Rock", kind=PieceKind.PLAIN, movable=False, move_rule="none"),
    "beacon": PieceType(id="beacon", name="Beacon", kind=PieceKind.BEACON, movable=False, move_rule="none",
                        size_ratio=0.5, link_mode=LinkMode.TWO_WAY),
    "beacon_3": PieceType(id="beacon_3", name="Tri-Beacon", kind=PieceKind.BEACON, movable=False,
                          move_rule="none", size_ratio=0.5, link_mode=LinkMode.THREE_WAY),
    "shadow": PieceType(id="shadow", name="Shadow", kind=PieceKind.MARKER, movable=False, move_rule="none"),
    "engineer": PieceType(id="engineer", name="Engineer", kind=PieceKind.PLAIN, move_rule="ray", move_range=2,
                          abilities=["rotate_beacon", "recycle_beacon", "reverse_engineer"]),
    "transponder": PieceType(id="transponder", name="Transponder", kind=PieceKind.PLAIN, move_rule="any",
                             abilities=["drop_beacon"]),
}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def board() -> Board:
    return create_test_board()


@pytest.fixture
def occupancy() -> OccupancyIndex:
    return OccupancyIndex()


@pytest.fixture
def stacking() -> StackingResolver:
    return StackingResolver()


@pytest.fixture
def piece_types():
    return dict(TEST_PIECE_TYPES)


@pytest.fixture
def make_piece(board, occupancy):
    """Factory that builds a piece of a test type, registers it and snaps it to its cell."""
    counter = {"n": 0}

    def _make(type_id: str, coord: HexCoord, owner_id="p1", rotation: int = 0, z_index: int = 0,
              register: bool = True) -> Piece:
        piece_type = TEST_PIECE_TYPES[type_id]
        counter["n"] += 1
        piece = Piece(
            piece_id=f"{type_id}-{counter['n']}",
            type_id=type_id,
            kind=piece_type.kind,
            coord=coord,
            owner_id=owner_id,
            z_index=z_index,
            movable=piece_type.movable,
            link_mode=piece_type.link_mode,
            radius=board.hex_size * piece_type.size_ratio,
        )
        piece.rotate(rotation)
        piece.place_at(board.pixel_of(coord))
        if register:
            occupancy.add(piece)
        return piece

    return _make
