import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TYPE_CHECKING

from .pieces import Piece

# Forward declarations for type hinting
if TYPE_CHECKING:
    from .board import Board
    from .hex_utils import HexCoord
    from .occupancy import OccupancyIndex
    from .pieces import PieceType
    from .player import Player
    from .stacking import StackingResolver

@dataclass
class GameState:
    board: 'Board'
    occupancy: 'OccupancyIndex'
    piece_types: Dict[str, 'PieceType']
    stacking: 'StackingResolver'
    players: List['Player'] = field(default_factory=list)

    def get_piece(self, piece_id: str) -> 'Piece':
        """Retrieves a piece by its ID, asserting its presence."""
        piece = self.occupancy.get(piece_id)
        assert piece is not None, f"Piece with ID '{piece_id}' not found in game state."
        return piece

    def get_player(self, player_id: Optional[str]) -> Optional['Player']:
        return next((p for p in self.players if p.id == player_id), None)

    @staticmethod
    def new_piece_id() -> str:
        return uuid.uuid4().hex

    def create_piece(self, type_id: str, owner_id: Optional[str], coord: 'HexCoord', **overrides) -> 'Piece':
        """Builds a piece of a known type, registers it, and stacks it on its cell.

        Raises KeyError for an unknown type id and ValueError for an off-board cell.
        """
        piece_type = self.piece_types[type_id]
        if not self.board.contains(coord):
            raise ValueError(f"Cannot place '{type_id}' at {coord}: cell is not on the board")

        piece = Piece(
            piece_id=overrides.pop('piece_id', None) or self.new_piece_id(),
            type_id=piece_type.id,
            kind=piece_type.kind,
            coord=coord,
            owner_id=owner_id,
            movable=piece_type.movable,
            link_mode=piece_type.link_mode,
            radius=self.board.hex_size * piece_type.size_ratio,
        )
        for key, value in overrides.items():
            if key == 'rotation':
                piece.rotate(value)
            else:
                setattr(piece, key, value)

        co_occupants = self.occupancy.at(coord)
        self.occupancy.add(piece)
        self.stacking.place(piece, co_occupants)
        piece.place_at(self.board.pixel_of(coord))
        return piece

    def remove_piece(self, piece: 'Piece') -> bool:
        return self.occupancy.remove(piece)
