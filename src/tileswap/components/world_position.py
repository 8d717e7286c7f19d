from dataclasses import dataclass

@dataclass(slots=True)
class WorldPosition:
    """Current visual position of a tile view in world units (centre point)."""
    x: float
    y: float

    def as_tuple(self):
        return (self.x, self.y)
