from dataclasses import dataclass
from enum import Enum


class TileKind(Enum):
    """Fixed palette of six tile kinds. Identity only; values are palette slots."""
    RED = 0
    GREEN = 1
    BLUE = 2
    YELLOW = 3
    PURPLE = 4
    ORANGE = 5

    @property
    def index(self) -> int:
        return self.value

    @classmethod
    def from_index(cls, index: int) -> "TileKind":
        return cls(index)


@dataclass(slots=True)
class Tile:
    """Per-tile kind assignment.

    The owning entity id is the tile identity; placement lives in the Grid.
    """
    kind: TileKind
