import json
import logging
import math
from typing import Dict, List, Optional, Tuple

from .config import GRID_RADIUS, HEX_SIZE
from .hex_utils import HexCoord, neighbors

logger = logging.getLogger(__name__)

# For flat-topped hexes: width is point to point (horizontal), height is across the flat sides.
HEX_WIDTH = 2 * HEX_SIZE
HEX_HEIGHT = math.sqrt(3) * HEX_SIZE


class GridHex:
    def __init__(self, coord: HexCoord, size: float = HEX_SIZE, origin_x: float = 0.0, origin_y: float = 0.0):
        self.coord = coord
        self.size = size

        self.center_x = 0.0
        self.center_y = 0.0
        self.points = []
        self.calculate_pixel_coords(origin_x, origin_y)

    @property
    def q(self) -> int:
        return self.coord.q

    @property
    def r(self) -> int:
        return self.coord.r

    @property
    def s(self) -> int:
        return self.coord.s

    def calculate_pixel_coords(self, origin_x: float, origin_y: float):
        """Calculates the pixel center and corner points for this flat-topped hex."""
        # Direction 0 (r+1, s-1) must point straight up on screen, so r grows upwards
        self.center_x = origin_x + self.size * 1.5 * self.q
        self.center_y = origin_y - self.size * math.sqrt(3) * (self.r + self.q / 2)

        self.points = []
        for i in range(6):
            angle_rad = math.pi / 180 * (60 * i)
            self.points.append((self.center_x + self.size * math.cos(angle_rad),
                                self.center_y + self.size * math.sin(angle_rad)))

    def __repr__(self):
        return f"GridHex({self.q}, {self.r}, {self.s})"


class Board:
    def __init__(self, radius: Optional[int] = GRID_RADIUS, hex_size: float = HEX_SIZE,
                 origin_x: float = 0.0, origin_y: float = 0.0, map_file_path: Optional[str] = None):
        self.hexes: Dict[HexCoord, GridHex] = {}
        self.hex_size = hex_size
        self.origin_x = origin_x
        self.origin_y = origin_y
        if map_file_path:
            self._load_map(map_file_path)
        elif radius:
            self._create_grid(radius)

    def _create_grid(self, radius: int):
        for q in range(-radius + 1, radius):
            for r in range(-radius + 1, radius):
                s = -q - r
                if max(abs(q), abs(r), abs(s)) < radius:
                    self.add_hex(HexCoord(q, r, s))

    def _load_map(self, file_path: str):
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.error("Map file not found at %s", file_path)
            return
        except json.JSONDecodeError:
            logger.error("Could not decode JSON from %s", file_path)
            return

        for cell in data.get("cells", []):
            try:
                self.add_hex(HexCoord.from_list(cell))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed cell %r: %s", cell, e)

        if not self.hexes:
            logger.warning("No cells loaded from the map file.")

    def add_hex(self, coord: HexCoord) -> GridHex:
        hex_obj = GridHex(coord, self.hex_size, self.origin_x, self.origin_y)
        self.hexes[coord] = hex_obj
        return hex_obj

    def contains(self, coord: HexCoord) -> bool:
        return coord in self.hexes

    def get_hex(self, coord: HexCoord) -> Optional[GridHex]:
        return self.hexes.get(coord)

    def all_coords(self) -> List[HexCoord]:
        return list(self.hexes.keys())

    def get_neighbors(self, coord: HexCoord) -> List[GridHex]:
        return [self.hexes[n] for n in neighbors(coord) if n in self.hexes]

    def is_edge_hex(self, coord: HexCoord) -> bool:
        """A cell is on the edge if any of its six neighbours is off the board."""
        return any(n not in self.hexes for n in neighbors(coord))

    def pixel_of(self, coord: HexCoord) -> Tuple[float, float]:
        hex_obj = self.hexes.get(coord)
        if hex_obj is None:
            # Off-board cells still have a geometric center
            hex_obj = GridHex(coord, self.hex_size, self.origin_x, self.origin_y)
        return hex_obj.center_x, hex_obj.center_y

    def find_closest_hex(self, x: float, y: float) -> Tuple[Optional[GridHex], float]:
        """Returns the cell whose center is nearest to (x, y) and the distance to it."""
        closest_hex = None
        min_dist_sq = float('inf')
        for hex_obj in self.hexes.values():
            dist_sq = (x - hex_obj.center_x) ** 2 + (y - hex_obj.center_y) ** 2
            if dist_sq < min_dist_sq:
                min_dist_sq = dist_sq
                closest_hex = hex_obj
        return closest_hex, math.sqrt(min_dist_sq)

    def hex_at_point(self, x: float, y: float) -> Optional[GridHex]:
        # Distance to center approximates a point-in-polygon test
        closest_hex, dist = self.find_closest_hex(x, y)
        if closest_hex and dist <= self.hex_size:
            return closest_hex
        return None
