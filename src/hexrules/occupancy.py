import logging
from typing import Dict, List, Optional

from .hex_utils import HexCoord
from .pieces import Piece

logger = logging.getLogger(__name__)


class OccupancyIndex:
    """Single source of truth for which piece stands on which cell.

    Every registered piece appears in exactly one cell entry, the one matching
    its current coordinate. Pieces change cell only through move().
    """

    def __init__(self):
        self._cells: Dict[HexCoord, List[Piece]] = {}
        self._pieces: Dict[str, Piece] = {}

    def add(self, piece: Piece) -> None:
        if piece.piece_id in self._pieces:
            logger.error("Duplicate registration of piece '%s'", piece.piece_id)
            raise ValueError(f"Piece '{piece.piece_id}' is already registered")
        self._pieces[piece.piece_id] = piece
        self._cells.setdefault(piece.coord, []).append(piece)

    def remove(self, piece: Piece) -> bool:
        if self._pieces.get(piece.piece_id) is not piece:
            logger.warning("Cannot remove %r: it is not on the board (stale reference).", piece)
            return False
        del self._pieces[piece.piece_id]
        self._detach(piece)
        return True

    def move(self, piece: Piece, coord: HexCoord) -> bool:
        """Moves a registered piece to coord. Returns False for a stale reference."""
        if self._pieces.get(piece.piece_id) is not piece:
            logger.warning("Cannot move %r: it is not on the board (stale reference).", piece)
            return False
        if piece.coord == coord:
            return True
        self._detach(piece)
        piece.coord = coord
        self._cells.setdefault(coord, []).append(piece)
        return True

    def _detach(self, piece: Piece) -> None:
        occupants = self._cells.get(piece.coord, [])
        occupants[:] = [p for p in occupants if p is not piece]
        if not occupants:
            self._cells.pop(piece.coord, None)

    def contains(self, piece: Piece) -> bool:
        return self._pieces.get(piece.piece_id) is piece

    def get(self, piece_id: str) -> Optional[Piece]:
        return self._pieces.get(piece_id)

    def pieces(self) -> List[Piece]:
        return list(self._pieces.values())

    def at(self, coord: HexCoord) -> List[Piece]:
        """Pieces on coord, ordered by z_index ascending."""
        return sorted(self._cells.get(coord, []), key=lambda p: p.z_index)

    def beacon_at(self, coord: HexCoord) -> Optional[Piece]:
        return next((p for p in self.at(coord) if p.is_beacon), None)

    def is_blocked(self, for_piece: Piece, coord: HexCoord) -> bool:
        # Default policy: beacons and markers can always be shared
        return any(
            p is not for_piece and not p.is_beacon and not p.is_marker
            for p in self._cells.get(coord, [])
        )

    def __len__(self) -> int:
        return len(self._pieces)
