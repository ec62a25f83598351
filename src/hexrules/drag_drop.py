import logging
import math
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional, TYPE_CHECKING

from .config import (
    CLICK_DISTANCE_THRESHOLD,
    CLICK_THRESHOLD_MS,
    DRAG_Z_INDEX,
    HIT_RADIUS_FACTOR,
)
from .hex_utils import HexCoord
from .pieces import Piece

# Forward declarations for type hinting
if TYPE_CHECKING:
    from .board import Board
    from .occupancy import OccupancyIndex
    from .rules import MovementRules
    from .stacking import StackingResolver

logger = logging.getLogger(__name__)

ReactionHook = Callable[[Piece, HexCoord], Optional[Future]]


class InteractionType(Enum):
    CLICK = "click"
    DRAG = "drag"


class GesturePhase(Enum):
    IDLE = "idle"
    PENDING = "pending"  # Pressed on a piece, not yet classified
    DRAGGING = "dragging"


@dataclass
class DragGesture:
    """State of one pointer-down to pointer-up cycle."""
    piece: Piece
    press_x: float
    press_y: float
    press_time: float
    offset_x: float
    offset_y: float
    exceeded_threshold: bool = False
    valid_moves: FrozenSet[HexCoord] = field(default_factory=frozenset)


class DragDropController:
    """
    Turns raw pointer events into clicks and drops.

    A drop that lands on a legal cell commits the move, runs the piece's
    post-placement reaction with the prior coordinate, then restacks the
    piece among its new co-occupants. Anything else reverts silently.
    """

    def __init__(
        self,
        board: 'Board',
        occupancy: 'OccupancyIndex',
        rules: 'MovementRules',
        stacking: 'StackingResolver',
        react: Optional[ReactionHook] = None,
        clock: Optional[Callable[[], float]] = None,
        on_click: Optional[Callable[[Piece], None]] = None,
        on_redraw: Optional[Callable[[], None]] = None
    ):
        self.board = board
        self.occupancy = occupancy
        self.rules = rules
        self.stacking = stacking
        self.react = react
        self.clock = clock or (lambda: time.monotonic() * 1000)
        self.on_click = on_click
        self.on_redraw = on_redraw

        self.gesture: Optional[DragGesture] = None
        self.phase = GesturePhase.IDLE
        self.last_reaction: Optional[Future] = None

    @property
    def valid_moves(self) -> FrozenSet[HexCoord]:
        """Cells the dragged piece may be dropped on; empty when not dragging."""
        if self.phase is GesturePhase.DRAGGING and self.gesture:
            return self.gesture.valid_moves
        return frozenset()

    @property
    def dragged_piece(self) -> Optional[Piece]:
        if self.phase is GesturePhase.DRAGGING and self.gesture:
            return self.gesture.piece
        return None

    def piece_at_point(self, x: float, y: float) -> Optional[Piece]:
        """Topmost interactive piece whose hit area contains (x, y)."""
        candidates = sorted(self.occupancy.pieces(), key=lambda p: p.z_index, reverse=True)
        for piece in candidates:
            if piece.is_marker:
                continue
            if piece.contains_point(x, y, HIT_RADIUS_FACTOR):
                return piece
        return None

    def pointer_down(self, x: float, y: float) -> Optional[Piece]:
        if self.phase is not GesturePhase.IDLE:
            logger.debug("Ignoring pointer down during an active gesture.")
            return None

        piece = self.piece_at_point(x, y)
        if piece is None:
            return None

        self.gesture = DragGesture(
            piece=piece,
            press_x=x,
            press_y=y,
            press_time=self.clock(),
            offset_x=x - piece.x,
            offset_y=y - piece.y,
        )
        self.phase = GesturePhase.PENDING
        return piece

    def pointer_move(self, x: float, y: float) -> None:
        gesture = self.gesture
        if gesture is None:
            return

        if self.phase is GesturePhase.PENDING:
            travelled = math.hypot(x - gesture.press_x, y - gesture.press_y)
            if travelled <= CLICK_DISTANCE_THRESHOLD:
                return
            gesture.exceeded_threshold = True
            if not gesture.piece.movable:
                return
            self._start_drag(gesture)

        if self.phase is GesturePhase.DRAGGING:
            gesture.piece.place_at((x - gesture.offset_x, y - gesture.offset_y))
            self._redraw()

    def _start_drag(self, gesture: DragGesture) -> None:
        piece = gesture.piece
        piece.original_z_index = piece.z_index
        piece.z_index = DRAG_Z_INDEX
        gesture.valid_moves = frozenset(self.rules.valid_moves(piece))
        self.phase = GesturePhase.DRAGGING
        logger.debug("Dragging %r (%d legal cells)", piece, len(gesture.valid_moves))

    def pointer_up(self, x: float, y: float) -> Optional[InteractionType]:
        """Ends the gesture. Returns how it was classified, or None if nothing was pressed."""
        gesture = self.gesture
        if gesture is None:
            return None

        phase = self.phase
        self.gesture = None
        self.phase = GesturePhase.IDLE

        if phase is GesturePhase.PENDING:
            elapsed = self.clock() - gesture.press_time
            travelled = math.hypot(x - gesture.press_x, y - gesture.press_y)
            if (not gesture.exceeded_threshold and elapsed < CLICK_THRESHOLD_MS
                    and travelled <= CLICK_DISTANCE_THRESHOLD):
                if self.on_click:
                    self.on_click(gesture.piece)
                return InteractionType.CLICK
            return None

        self._drop(gesture, x, y)
        return InteractionType.DRAG

    def pointer_leave(self) -> None:
        gesture = self.gesture
        if gesture is None:
            return
        if self.phase is GesturePhase.DRAGGING:
            self._revert(gesture.piece)
        self.gesture = None
        self.phase = GesturePhase.IDLE

    def _drop(self, gesture: DragGesture, x: float, y: float) -> None:
        piece = gesture.piece
        target = self.board.hex_at_point(x - gesture.offset_x, y - gesture.offset_y)

        if target is None:
            logger.debug("Dropped %r off the board.", piece)
            self._revert(piece)
            return
        if target.coord == piece.coord:
            self._revert(piece)
            return
        if not self.rules.can_move_to(piece, target.coord, gesture.valid_moves):
            logger.info("Illegal drop of %r on %r", piece, target.coord)
            self._revert(piece)
            return

        from_coord = piece.coord
        if not self.occupancy.move(piece, target.coord):
            self._revert(piece)
            return
        piece.place_at(self.board.pixel_of(piece.coord))
        logger.info("Moved %s from %r to %r", piece.type_id, from_coord, piece.coord)

        self.last_reaction = self.react(piece, from_coord) if self.react else None

        self._restore_z(piece)
        co_occupants = [p for p in self.occupancy.at(piece.coord) if p is not piece]
        self.stacking.place(piece, co_occupants)
        piece.place_at(self.board.pixel_of(piece.coord))
        self._redraw()

    def _revert(self, piece: Piece) -> None:
        piece.place_at(self.board.pixel_of(piece.coord))
        self._restore_z(piece)
        self._redraw()

    @staticmethod
    def _restore_z(piece: Piece) -> None:
        if piece.original_z_index is not None:
            piece.z_index = piece.original_z_index
            piece.original_z_index = None

    def _redraw(self) -> None:
        if self.on_redraw:
            self.on_redraw()
