class TileswapError(Exception):
    """Base class for errors raised by the board engine."""


class ConfigurationError(TileswapError, ValueError):
    """Board configuration is unusable; the game refuses to start."""


class GridInvariantError(TileswapError, RuntimeError):
    """A grid precondition was violated (occupied put, empty take)."""


class GridBoundsError(GridInvariantError, IndexError):
    """A cell outside the grid was addressed."""
