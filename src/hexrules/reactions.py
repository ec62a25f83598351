"""
Post-placement reactions.

A reaction runs after a piece has been dropped on a new cell. It receives the
cell the piece came from and may suspend by returning a pending Future (for
example while the player picks a beacon to travel to). Reactions are named in
pieces.json through the `on_dropped` field.
"""
import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .board import Board
from .config import BEACON_CHAIN_OWNER_AWARE, BEACON_SELECTION_TIMEOUT_MS
from .forced_selection import ForcedSelectionController
from .hex_utils import HexCoord
from .occupancy import OccupancyIndex
from .pieces import Piece
from .stacking import StackingResolver
from .utils.pathfinding import find_beacon_chain

logger = logging.getLogger(__name__)

BEACON_TRAVEL_PROMPT = "Select a beacon to travel to."


@dataclass
class ReactionContext:
    board: Board
    occupancy: OccupancyIndex
    stacking: StackingResolver
    forced_selection: ForcedSelectionController
    owner_aware: bool = BEACON_CHAIN_OWNER_AWARE
    timeout_ms: Optional[float] = BEACON_SELECTION_TIMEOUT_MS
    redraw: Optional[Callable[[], None]] = None

    def settle(self, piece: Piece) -> None:
        """Restacks piece on its current cell and snaps it to the cell center."""
        co_occupants = [p for p in self.occupancy.at(piece.coord) if p is not piece]
        self.stacking.place(piece, co_occupants)
        piece.place_at(self.board.pixel_of(piece.coord))
        if self.redraw:
            self.redraw()


Reaction = Callable[[ReactionContext, Piece, Optional[HexCoord]], Optional[Future]]


def _travel(ctx: ReactionContext, piece: Piece, cell: HexCoord) -> None:
    # The board may have changed while the selection was pending
    if not ctx.occupancy.contains(piece):
        logger.warning("%r left the board during beacon selection; travel abandoned.", piece)
        return
    if cell == piece.coord:
        return
    if ctx.occupancy.is_blocked(piece, cell):
        logger.info("Beacon at %r is now blocked for %r; travel abandoned.", cell, piece)
        return

    ctx.occupancy.move(piece, cell)
    ctx.settle(piece)
    logger.info("%s travelled along the beacon chain to %r", piece.type_id, cell)


def beacon_travel(ctx: ReactionContext, piece: Piece, from_coord: Optional[HexCoord] = None) -> Optional[Future]:
    """
    Lets a piece that lands on a beacon jump to any beacon of that beacon's chain.
    Returns:
        The pending selection, or None when there is nothing to choose from.
    """
    beacon = ctx.occupancy.beacon_at(piece.coord)
    if beacon is None:
        return None

    chain = find_beacon_chain(beacon, ctx.board, ctx.occupancy, ctx.owner_aware)
    if len(chain) == 1:
        return None

    pending = ctx.forced_selection.begin(
        [b.coord for b in chain],
        BEACON_TRAVEL_PROMPT,
        cancelable=True,
        timeout_ms=ctx.timeout_ms,
        on_selection=lambda cell: _travel(ctx, piece, cell),
    )
    if pending is None:
        logger.info("Beacon travel for %r skipped: another selection is in progress.", piece)
    return pending


def swap(ctx: ReactionContext, piece: Piece, from_coord: Optional[HexCoord] = None) -> Optional[Future]:
    """
    Exchanges places with a movable piece on the landing cell.

    Afterwards each of the two pieces gets a chance to travel along a beacon
    chain, the mover first. The second selection only starts once the first
    has been resolved. The returned Future completes after both.
    """
    if from_coord is None:
        return None
    other = next((p for p in ctx.occupancy.at(piece.coord) if p is not piece and p.movable), None)
    if other is None:
        return None

    ctx.occupancy.move(other, from_coord)
    ctx.settle(other)
    logger.info("%s swapped places with %s", piece.type_id, other.type_id)

    done: Future = Future()
    done.set_running_or_notify_cancel()
    travellers: List[Piece] = [piece, other]

    def travel_from(index: int) -> None:
        while index < len(travellers):
            traveller = travellers[index]
            index += 1
            if not ctx.occupancy.contains(traveller):
                logger.warning("%r is no longer on the board; skipping its beacon travel.", traveller)
                continue
            pending = beacon_travel(ctx, traveller)
            if pending is not None:
                pending.add_done_callback(lambda _f, next_index=index: travel_from(next_index))
                return
        done.set_result(None)

    travel_from(0)
    return done


REACTIONS: Dict[str, Reaction] = {
    "beacon_travel": beacon_travel,
    "swap": swap,
}


def run_reaction(ctx: ReactionContext, name: Optional[str], piece: Piece,
                 from_coord: Optional[HexCoord]) -> Optional[Future]:
    if not name:
        return None
    reaction = REACTIONS.get(name)
    if reaction is None:
        logger.error("Unknown reaction '%s' for %r", name, piece)
        return None
    return reaction(ctx, piece, from_coord)
