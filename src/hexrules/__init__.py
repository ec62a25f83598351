from .board import Board, GridHex
from .drag_drop import DragDropController, InteractionType
from .forced_selection import ForcedSelectionController, SelectionState
from .game_engine import GameEngine
from .game_state import GameState
from .hex_utils import HexCoord
from .occupancy import OccupancyIndex
from .pieces import LinkMode, Piece, PieceKind, PieceType
from .stacking import StackingResolver
from .utils.pathfinding import find_beacon_chain
