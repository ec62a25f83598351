import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .hex_utils import HexCoord, normalize_direction, opposite


class PieceKind(Enum):
    PLAIN = "plain"
    BEACON = "beacon"
    MARKER = "marker"  # Non-interactive placeholder, never blocks
    DOMINANT = "dominant"  # Always stacks above ordinary pieces
    SUBORDINATE = "subordinate"  # Always stacks beneath a dominant piece


class LinkMode(Enum):
    TWO_WAY = "two_way"  # Facing + opposite
    THREE_WAY = "three_way"  # The three alternate directions that skip the facing


MOVE_RULES = ("ray", "any", "swap", "none")


@dataclass
class PieceType:
    id: str
    name: str
    kind: PieceKind
    # Optional fields with defaults
    movable: bool = True
    move_rule: str = "ray"
    move_range: int = 1
    size_ratio: float = 1.0
    forbidden_coords: List[HexCoord] = field(default_factory=list)
    on_dropped: Optional[str] = None  # Name of a post-placement reaction
    link_mode: Optional[LinkMode] = None
    abilities: List[str] = field(default_factory=list)  # Commands this type may issue

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PieceType':
        """Creates a PieceType instance from a dictionary (e.g., from JSON data)."""
        init_kwargs = {
            'id': data['id'],
            'name': data.get('name', data['id']),
            'kind': PieceKind(data.get('kind', 'plain')),
        }

        # If a key is absent, the dataclass default applies upon instantiation.
        for key in ('movable', 'move_range', 'size_ratio', 'on_dropped', 'abilities'):
            if key in data:
                init_kwargs[key] = data[key]

        move_rule = data.get('move_rule')
        if move_rule is not None:
            if move_rule not in MOVE_RULES:
                raise ValueError(f"Unknown move_rule '{move_rule}' for piece type '{data['id']}'")
            init_kwargs['move_rule'] = move_rule

        forbidden_data = data.get('forbidden_coords')
        if forbidden_data is not None:
            init_kwargs['forbidden_coords'] = [HexCoord.from_list(c) for c in forbidden_data]

        link_mode = data.get('link_mode')
        if link_mode is not None:
            init_kwargs['link_mode'] = LinkMode(link_mode)
        elif init_kwargs['kind'] is PieceKind.BEACON:
            init_kwargs['link_mode'] = LinkMode.TWO_WAY

        return cls(**init_kwargs)


@dataclass(eq=False)
class Piece:
    """A single piece on the board. Compared and hashed by identity."""
    piece_id: str
    type_id: str
    kind: PieceKind
    coord: HexCoord  # Changed only through OccupancyIndex.move
    owner_id: Optional[str] = None  # None for neutral pieces
    z_index: int = 0
    original_z_index: Optional[int] = None  # Only set while the piece is being dragged
    movable: bool = True
    rotation: int = 0  # Facing, as a direction index 0-5 (beacons)
    link_mode: Optional[LinkMode] = None
    # Visual state, owned by the host's coordinate space
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0

    @property
    def is_beacon(self) -> bool:
        return self.kind is PieceKind.BEACON

    @property
    def is_marker(self) -> bool:
        return self.kind is PieceKind.MARKER

    def rotate(self, delta: int) -> int:
        """Turns the piece by delta sixth-turns (positive is clockwise) and returns the new facing."""
        self.rotation = normalize_direction(self.rotation + delta)
        return self.rotation

    def valid_directions(self) -> List[int]:
        """Directions along which this beacon links to other beacons."""
        if not self.is_beacon:
            return []
        if self.link_mode is LinkMode.THREE_WAY:
            return [normalize_direction(self.rotation + i) for i in (1, 3, 5)]
        return [self.rotation, opposite(self.rotation)]

    def contains_point(self, x: float, y: float, factor: float) -> bool:
        return math.hypot(x - self.x, y - self.y) <= self.radius * factor

    def place_at(self, position: Tuple[float, float]) -> None:
        self.x, self.y = position

    def __repr__(self):
        return (f"Piece(id={self.piece_id[:6]}, type={self.type_id}, owner={self.owner_id}, "
                f"loc=({self.coord.q},{self.coord.r},{self.coord.s}), z={self.z_index})")
