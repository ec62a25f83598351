import logging
from typing import Dict, Iterable, Optional, Set

from .board import Board
from .hex_utils import HexCoord, distance
from .occupancy import OccupancyIndex
from .pieces import Piece, PieceType
from .utils.pathfinding import ray_moves

logger = logging.getLogger(__name__)


class MovementRules:
    """Per-piece movement legality, driven by each piece type's move_rule."""

    def __init__(self, board: Board, occupancy: OccupancyIndex, piece_types: Dict[str, PieceType]):
        self.board = board
        self.occupancy = occupancy
        self.piece_types = piece_types

    def piece_type(self, piece: Piece) -> PieceType:
        return self.piece_types[piece.type_id]

    def valid_moves(self, piece: Piece) -> Set[HexCoord]:
        piece_type = self.piece_type(piece)
        if not piece.movable or piece_type.move_rule == "none":
            return set()

        if piece_type.move_rule == "ray":
            return ray_moves(piece, self.board, self.occupancy, piece_type.move_range)

        if piece_type.move_rule == "any":
            return {
                coord for coord in self.board.all_coords()
                if coord != piece.coord and not self.occupancy.is_blocked(piece, coord)
            }

        # swap: any cell in range holding another movable piece
        return {
            coord for coord in self.board.all_coords()
            if coord != piece.coord
            and distance(coord, piece.coord) <= piece_type.move_range
            and any(p is not piece and p.movable for p in self.occupancy.at(coord))
        }

    def is_forbidden(self, piece: Piece, coord: HexCoord) -> bool:
        return coord in self.piece_type(piece).forbidden_coords

    def can_move_to(self, piece: Piece, coord: HexCoord, valid_moves: Optional[Iterable[HexCoord]] = None) -> bool:
        """Checks type-specific vetoes, then membership in the piece's valid moves."""
        if self.is_forbidden(piece, coord):
            logger.info("%s may never enter %r.", piece.type_id, coord)
            return False
        if valid_moves is None:
            valid_moves = self.valid_moves(piece)
        return coord in valid_moves
