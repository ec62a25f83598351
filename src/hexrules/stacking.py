import logging
from typing import List

from .config import DOMINANT_Z_OFFSET
from .pieces import Piece, PieceKind

logger = logging.getLogger(__name__)


class StackingResolver:
    """Decides the z-order of a piece when it lands on a cell.

    Ordinary pieces go on top of whatever is there. Dominant pieces jump
    DOMINANT_Z_OFFSET above the highest z-index ever handed out, and
    subordinate pieces slide just beneath the lowest dominant on their cell.
    """

    def __init__(self, dominant_offset: int = DOMINANT_Z_OFFSET):
        self.dominant_offset = dominant_offset
        self.global_max = 0

    def resolve_z_index(self, piece: Piece, co_occupants: List[Piece]) -> int:
        others = [p for p in co_occupants if p is not piece]

        if piece.kind is PieceKind.DOMINANT:
            highest = max([p.z_index for p in others] + [self.global_max])
            return highest + self.dominant_offset

        if piece.kind is PieceKind.SUBORDINATE:
            dominants = [p for p in others if p.kind is PieceKind.DOMINANT]
            if dominants:
                # Stays above the ordinary pieces; restack lifts the dominants if they collide
                return max(min(p.z_index for p in dominants) - 1, self._top_ordinary(others) + 1)

        return max([p.z_index for p in others] + [0]) + 1

    @staticmethod
    def _top_ordinary(occupants: List[Piece]) -> int:
        return max([p.z_index for p in occupants if p.kind is not PieceKind.DOMINANT] + [0])

    def restack(self, occupants: List[Piece]) -> None:
        """Renumbers the dominant pieces of one cell to consecutive values, keeping arrival order.

        Numbering starts at the lowest dominant z-index, or just above the
        highest non-dominant piece on the cell when that is higher.
        """
        dominants = sorted((p for p in occupants if p.kind is PieceKind.DOMINANT), key=lambda p: p.z_index)
        if not dominants:
            return
        base = max(dominants[0].z_index, self._top_ordinary(occupants) + 1)
        for offset, piece in enumerate(dominants):
            piece.z_index = base + offset
        self.global_max = max(self.global_max, dominants[-1].z_index)

    def place(self, piece: Piece, co_occupants: List[Piece]) -> int:
        """Assigns piece its z-index for the cell it now shares with co_occupants."""
        piece.z_index = self.resolve_z_index(piece, co_occupants)
        self.global_max = max(self.global_max, piece.z_index)
        if piece.kind in (PieceKind.DOMINANT, PieceKind.SUBORDINATE):
            self.restack([p for p in co_occupants if p is not piece] + [piece])
        logger.debug("Stacked %r at z=%d", piece, piece.z_index)
        return piece.z_index
