import logging
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

from .hex_utils import DIRECTION_NAMES, HexCoord
from .pieces import Piece, PieceKind
from .rules import MovementRules

# Forward declarations for type hinting
if TYPE_CHECKING:
    from .game_state import GameState

logger = logging.getLogger(__name__)

ROTATE_BEACON = "rotate_beacon"
RECYCLE_BEACON = "recycle_beacon"
REVERSE_ENGINEER = "reverse_engineer"
DROP_BEACON = "drop_beacon"


class GameCommand(ABC):
    """Abstract base class for all game commands."""

    @abstractmethod
    def can_execute(self, state: 'GameState') -> bool:
        """Checks whether the command is legal in the current state."""
        pass

    @abstractmethod
    def execute(self, state: 'GameState') -> bool:
        """Executes the command, modifying the game state. Returns False if it was not legal."""
        pass


class MovePieceCommand(GameCommand):
    def __init__(self, piece_id: str, dest: HexCoord):
        self.piece_id = piece_id
        self.dest = dest

    def can_execute(self, state: 'GameState') -> bool:
        piece = state.occupancy.get(self.piece_id)
        if piece is None:
            return False
        rules = MovementRules(state.board, state.occupancy, state.piece_types)
        return rules.can_move_to(piece, self.dest)

    def execute(self, state: 'GameState') -> bool:
        if not self.can_execute(state):
            logger.info("Move of %s to %r rejected.", self.piece_id, self.dest)
            return False

        piece = state.get_piece(self.piece_id)
        state.occupancy.move(piece, self.dest)
        co_occupants = [p for p in state.occupancy.at(self.dest) if p is not piece]
        state.stacking.place(piece, co_occupants)
        piece.place_at(state.board.pixel_of(self.dest))
        return True


class _AbilityCommand(GameCommand):
    """A command issued by a piece whose type lists `ability`."""
    ability = ""

    def __init__(self, piece_id: str):
        self.piece_id = piece_id

    def _actor(self, state: 'GameState') -> Optional[Piece]:
        piece = state.occupancy.get(self.piece_id)
        if piece is None:
            return None
        if self.ability not in state.piece_types[piece.type_id].abilities:
            return None
        return piece

    def _beacon_under(self, state: 'GameState') -> Optional[Piece]:
        actor = self._actor(state)
        if actor is None:
            return None
        return state.occupancy.beacon_at(actor.coord)

    def execute(self, state: 'GameState') -> bool:
        if not self.can_execute(state):
            logger.info("%s by %s is not possible here.", self.ability, self.piece_id)
            return False
        self._apply(state)
        return True

    @abstractmethod
    def _apply(self, state: 'GameState') -> None:
        pass


class RotateBeaconCommand(_AbilityCommand):
    ability = ROTATE_BEACON

    def __init__(self, engineer_id: str, delta: int = 1):
        super().__init__(engineer_id)
        self.delta = delta

    def can_execute(self, state: 'GameState') -> bool:
        return self._beacon_under(state) is not None

    def _apply(self, state: 'GameState') -> None:
        beacon = self._beacon_under(state)
        facing = beacon.rotate(self.delta)
        logger.info("Beacon at %r now faces %s", beacon.coord, DIRECTION_NAMES[facing])


class RecycleBeaconCommand(_AbilityCommand):
    ability = RECYCLE_BEACON

    def can_execute(self, state: 'GameState') -> bool:
        return self._beacon_under(state) is not None

    def _apply(self, state: 'GameState') -> None:
        beacon = self._beacon_under(state)
        state.remove_piece(beacon)
        logger.info("Beacon at %r recycled", beacon.coord)


class ReverseEngineerCommand(_AbilityCommand):
    """Takes control of an enemy beacon under the engineer."""
    ability = REVERSE_ENGINEER

    def can_execute(self, state: 'GameState') -> bool:
        actor = self._actor(state)
        beacon = self._beacon_under(state)
        return beacon is not None and beacon.owner_id != actor.owner_id

    def _apply(self, state: 'GameState') -> None:
        actor = self._actor(state)
        beacon = self._beacon_under(state)
        previous_owner = beacon.owner_id
        beacon.owner_id = actor.owner_id
        logger.info("Beacon at %r taken over from %s by %s", beacon.coord, previous_owner, actor.owner_id)


class DropBeaconCommand(_AbilityCommand):
    ability = DROP_BEACON

    def __init__(self, piece_id: str, beacon_type_id: str = "beacon"):
        super().__init__(piece_id)
        self.beacon_type_id = beacon_type_id

    def can_execute(self, state: 'GameState') -> bool:
        actor = self._actor(state)
        if actor is None:
            return False
        beacon_type = state.piece_types.get(self.beacon_type_id)
        if beacon_type is None or beacon_type.kind is not PieceKind.BEACON:
            return False
        return state.occupancy.beacon_at(actor.coord) is None

    def _apply(self, state: 'GameState') -> None:
        actor = self._actor(state)
        beacon = state.create_piece(self.beacon_type_id, actor.owner_id, actor.coord)
        # The dropping piece stays on top of its own beacon
        co_occupants = [p for p in state.occupancy.at(actor.coord) if p is not actor]
        state.stacking.place(actor, co_occupants)
        logger.info("%s dropped %r", actor.type_id, beacon)
