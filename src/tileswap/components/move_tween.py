from dataclasses import dataclass
from typing import Tuple

@dataclass(slots=True)
class MoveTween:
    """In-flight motion of a tile view. At most one per tile; replacing it cancels the old one."""
    start: Tuple[float, float]
    target: Tuple[float, float]
    duration: float
    elapsed: float = 0.0

    @property
    def progress(self) -> float:
        return min(1.0, self.elapsed / max(0.0001, self.duration))
