from dataclasses import dataclass


@dataclass(slots=True)
class ResolverState:
    """Shared cascade state.

    ``busy`` stays True for the whole cascade and gates player input.
    Seeding runs with ``scoring_enabled`` False and resets ``score`` when done.
    """

    busy: bool = True
    scoring_enabled: bool = False
    score: int = 0

    def reset(self) -> None:
        self.busy = True
        self.scoring_enabled = False
        self.score = 0
