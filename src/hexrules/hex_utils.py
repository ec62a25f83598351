from dataclasses import dataclass
from typing import Iterator, List, Tuple


@dataclass(frozen=True)
class HexCoord:
    """Cube coordinate of a board cell. q + r + s is always 0."""
    q: int
    r: int
    s: int

    def __post_init__(self):
        if self.q + self.r + self.s != 0:
            raise ValueError(f"Invalid hex coordinate ({self.q},{self.r},{self.s}): q + r + s must be 0")

    @classmethod
    def from_list(cls, values) -> 'HexCoord':
        """Builds a coordinate from a [q, r, s] list (e.g., from JSON data)."""
        q, r, s = (int(v) for v in values)
        return cls(q, r, s)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.q, self.r, self.s)

    def __repr__(self):
        return f"HexCoord({self.q},{self.r},{self.s})"


ORIGIN = HexCoord(0, 0, 0)

# Directions clockwise from Up. Index 0 is the reference heading for beacon rotation.
DIRECTIONS: List[HexCoord] = [
    HexCoord( 0, +1, -1),  # 0: Up
    HexCoord(+1,  0, -1),  # 1: Up-Right
    HexCoord(+1, -1,  0),  # 2: Down-Right
    HexCoord( 0, -1, +1),  # 3: Down
    HexCoord(-1,  0, +1),  # 4: Down-Left
    HexCoord(-1, +1,  0),  # 5: Up-Left
]
DIRECTION_NAMES = ["Up", "Up-Right", "Down-Right", "Down", "Down-Left", "Up-Left"]


def normalize_direction(direction: int) -> int:
    return direction % 6


def opposite(direction: int) -> int:
    return (direction + 3) % 6


def neighbor(coord: HexCoord, direction: int) -> HexCoord:
    """Returns the adjacent cell in the given direction (any int, wrapped into 0-5)."""
    d = DIRECTIONS[normalize_direction(direction)]
    return HexCoord(coord.q + d.q, coord.r + d.r, coord.s + d.s)


def neighbors(coord: HexCoord) -> List[HexCoord]:
    return [neighbor(coord, d) for d in range(6)]


def distance(a: HexCoord, b: HexCoord) -> int:
    return max(abs(a.q - b.q), abs(a.r - b.r), abs(a.s - b.s))


def line(coord: HexCoord, direction: int, steps: int) -> Iterator[HexCoord]:
    """Yields the cells walked outward from coord, one step at a time, excluding coord itself."""
    current = coord
    for _ in range(steps):
        current = neighbor(current, direction)
        yield current


def coord_key(coord: HexCoord) -> str:
    return f"{coord.q},{coord.r},{coord.s}"
