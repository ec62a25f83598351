from collections import deque
from typing import List, Set, TYPE_CHECKING

from ..hex_utils import HexCoord, line, neighbor

# Forward declarations for type hinting
if TYPE_CHECKING:
    from ..board import Board
    from ..occupancy import OccupancyIndex
    from ..pieces import Piece


def _links_to(candidate: 'Piece', start: 'Piece', owner_aware: bool) -> bool:
    if not candidate.is_beacon:
        return False
    return not owner_aware or candidate.owner_id == start.owner_id


def find_beacon_chain(
    start: 'Piece',
    board: 'Board',
    occupancy: 'OccupancyIndex',
    owner_aware: bool = True
) -> List['Piece']:
    """
    Finds every beacon transitively linked to start, breadth first.
    Each beacon links outward along its valid directions (from rotation and
    link mode). A walk passes over empty cells, markers and beacons that do not
    link, and ends at the grid edge, at a blocking occupant, or at the first
    linked beacon.
    Args:
        start: The beacon the chain grows from.
        board: Grid used for the off-board test.
        occupancy: Index queried for what stands on each cell.
        owner_aware: When True, only beacons of start's owner continue the chain.
    Returns:
        The chain in discovery order, start first. Never empty.
    """
    visited: Set[HexCoord] = {start.coord}
    queue = deque([start])
    chain: List['Piece'] = []

    while queue:
        beacon = queue.popleft()
        chain.append(beacon)

        for direction in beacon.valid_directions():
            current = neighbor(beacon.coord, direction)
            if current in visited:
                continue  # Never re-walk through a chained cell

            while board.contains(current) and not occupancy.is_blocked(start, current):
                if current in visited:
                    break
                solid = [p for p in occupancy.at(current) if not p.is_marker]
                if len(solid) == 1 and _links_to(solid[0], start, owner_aware):
                    visited.add(current)
                    queue.append(solid[0])
                    break
                current = neighbor(current, direction)

    return chain


def ray_moves(
    piece: 'Piece',
    board: 'Board',
    occupancy: 'OccupancyIndex',
    steps: int
) -> Set[HexCoord]:
    """Cells reachable by walking up to `steps` cells in a straight line in any of the 6 directions.

    A ray stops before the first blocked cell and at the grid edge.
    """
    reachable: Set[HexCoord] = set()
    for direction in range(6):
        for coord in line(piece.coord, direction, steps):
            if not board.contains(coord) or occupancy.is_blocked(piece, coord):
                break
            reachable.add(coord)
    return reachable
