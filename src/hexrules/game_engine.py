import json
import logging
import os
from concurrent.futures import Future
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from .board import Board
from .commands import GameCommand
from .config import ASSET_PATH, BEACON_CHAIN_OWNER_AWARE
from .drag_drop import DragDropController, InteractionType
from .forced_selection import ForcedSelectionController
from .game_state import GameState
from .hex_utils import HexCoord
from .occupancy import OccupancyIndex
from .pieces import Piece, PieceType
from .player import Player
from .reactions import ReactionContext, run_reaction
from .rules import MovementRules
from .stacking import StackingResolver

logger = logging.getLogger(__name__)


class GameEngine:
    """
    Owns every rule component and routes host input to them.

    While a forced selection is active, presses and releases go to it and
    drag input is ignored. Otherwise input drives the drag/drop controller.
    """

    def __init__(
        self,
        pieces_file: Optional[str] = "pieces.json",
        setup_file: Optional[str] = "setup.json",
        board: Optional[Board] = None,
        clock: Optional[Callable[[], float]] = None,
        on_redraw: Optional[Callable[[], None]] = None,
        on_click: Optional[Callable[[Piece], None]] = None,
        owner_aware: bool = BEACON_CHAIN_OWNER_AWARE
    ):
        self.on_redraw = on_redraw
        self.on_click = on_click
        self.redraw_requested = False

        # Initialize piece types
        self.piece_types: Dict[str, PieceType] = {}
        pieces_data = self._load_json_data(pieces_file) if pieces_file else None
        if pieces_data:
            for type_dict in pieces_data.get('piece_types', []):
                if 'id' not in type_dict:
                    logger.warning("Piece type data missing 'id': %s. Skipping.", type_dict)
                    continue
                try:
                    piece_type = PieceType.from_dict(type_dict)
                    self.piece_types[piece_type.id] = piece_type
                except (KeyError, TypeError, ValueError) as e:
                    logger.error("Error processing piece type '%s': %s", type_dict.get('id'), e)

        # Initialize game components
        self.board = board or Board()
        self.occupancy = OccupancyIndex()
        self.stacking = StackingResolver()
        self.state = GameState(
            board=self.board,
            occupancy=self.occupancy,
            piece_types=self.piece_types,
            stacking=self.stacking,
        )
        self.rules = MovementRules(self.board, self.occupancy, self.piece_types)
        self.forced_selection = ForcedSelectionController(clock=clock, on_change=self.request_redraw)
        self.reaction_context = ReactionContext(
            board=self.board,
            occupancy=self.occupancy,
            stacking=self.stacking,
            forced_selection=self.forced_selection,
            owner_aware=owner_aware,
            redraw=self.request_redraw,
        )
        self.drag_drop = DragDropController(
            self.board,
            self.occupancy,
            self.rules,
            self.stacking,
            react=self._react,
            clock=clock,
            on_click=self._handle_click,
            on_redraw=self.request_redraw,
        )
        self._press_consumed = False

        setup_data = self._load_json_data(setup_file) if setup_file else None
        if setup_data:
            self._setup_players(setup_data.get('players', []))
            self._setup_pieces(setup_data.get('pieces', []))

        logger.info("GameEngine initialized: %d piece types, %d players, %d pieces.",
                    len(self.piece_types), len(self.players), len(self.occupancy))

    @property
    def players(self) -> List[Player]:
        return self.state.players

    def _load_json_data(self, filename: str) -> Optional[Dict[str, Any]]:
        """Load JSON data from a file in the ASSET_PATH directory (or from an absolute path)."""
        filepath: str = os.path.join(ASSET_PATH, filename)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            logger.info("Successfully loaded %s", filename)
            return data
        except FileNotFoundError:
            logger.error("File not found at %s", filepath)
            return None
        except json.JSONDecodeError:
            logger.error("Could not decode JSON from %s", filepath)
            return None

    def _setup_players(self, players_data: List[Dict[str, Any]]) -> None:
        for player_dict in players_data:
            try:
                self.state.players.append(Player.from_dict(player_dict))
            except KeyError:
                logger.warning("Player data missing 'id': %s. Skipping.", player_dict)

    def _setup_pieces(self, pieces_data: List[Dict[str, Any]]) -> None:
        for entry in pieces_data:
            try:
                coord = HexCoord.from_list(entry['coord'])
                overrides = {'rotation': entry['rotation']} if 'rotation' in entry else {}
                self.state.create_piece(entry['type'], entry.get('owner'), coord, **overrides)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping starting piece %s: %s", entry, e)

    # --- Registration ---

    def create_piece(self, type_id: str, owner_id: Optional[str], coord: HexCoord, **overrides) -> Piece:
        piece = self.state.create_piece(type_id, owner_id, coord, **overrides)
        self.request_redraw()
        return piece

    def add_piece(self, piece: Piece) -> None:
        """Registers an already built piece and stacks it on its cell."""
        co_occupants = self.occupancy.at(piece.coord)
        self.occupancy.add(piece)
        self.stacking.place(piece, co_occupants)
        piece.place_at(self.board.pixel_of(piece.coord))
        self.request_redraw()

    def remove_piece(self, piece: Piece) -> bool:
        removed = self.state.remove_piece(piece)
        if removed:
            self.request_redraw()
        return removed

    def execute(self, command: GameCommand) -> bool:
        executed = command.execute(self.state)
        if executed:
            self.request_redraw()
        return executed

    # --- Input routing ---

    def pointer_down(self, x: float, y: float) -> Optional[Piece]:
        if self._selection_owns_input():
            self._press_consumed = self._submit_at(x, y)
            return None
        return self.drag_drop.pointer_down(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self._selection_owns_input():
            return
        self.drag_drop.pointer_move(x, y)

    def pointer_up(self, x: float, y: float) -> Optional[InteractionType]:
        if self._press_consumed:
            # The press already resolved a selection; its release must not feed the next one
            self._press_consumed = False
            return None
        if self._selection_owns_input():
            self._submit_at(x, y)
            return None
        return self.drag_drop.pointer_up(x, y)

    def pointer_leave(self) -> None:
        if self._selection_owns_input():
            return
        self.drag_drop.pointer_leave()

    def _selection_owns_input(self) -> bool:
        """True while a forced selection is active. A gesture still in flight is reverted first."""
        if not self.forced_selection.is_active:
            return False
        if self.drag_drop.gesture is not None:
            logger.info("Forced selection started mid-gesture; reverting %r", self.drag_drop.gesture.piece)
            self.drag_drop.pointer_leave()
        return True

    def escape(self) -> bool:
        if not self.forced_selection.is_active:
            return False
        return self.forced_selection.cancel()

    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Advances timers. Returns True if a forced selection expired."""
        return self.forced_selection.tick(now_ms)

    def _submit_at(self, x: float, y: float) -> bool:
        hex_obj = self.board.hex_at_point(x, y)
        if hex_obj is None:
            return False
        return self.forced_selection.submit(hex_obj.coord)

    # --- Hooks ---

    def _react(self, piece: Piece, from_coord: HexCoord) -> Optional[Future]:
        piece_type = self.piece_types.get(piece.type_id)
        if piece_type is None:
            return None
        return run_reaction(self.reaction_context, piece_type.on_dropped, piece, from_coord)

    def _handle_click(self, piece: Piece) -> None:
        logger.debug("Clicked %r", piece)
        if self.on_click:
            self.on_click(piece)

    def request_redraw(self) -> None:
        self.redraw_requested = True
        if self.on_redraw:
            self.on_redraw()

    @property
    def highlighted_cells(self) -> FrozenSet[HexCoord]:
        if self.forced_selection.is_active:
            return self.forced_selection.target_cells
        return self.drag_drop.valid_moves

    @property
    def prompt(self) -> str:
        return self.forced_selection.display_prompt

    def pieces_in_draw_order(self) -> List[Piece]:
        return sorted(self.occupancy.pieces(), key=lambda p: p.z_index)
