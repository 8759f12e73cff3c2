"""
Freeman Chain Code

Greedy single-pass boundary walk over the first dark object of a 0/255
raster. Directions are numbered clockwise from "right":

    3 2 1
    4 . 0
    5 6 7

(y grows downwards, so direction 2 is dy = -1.)

At each step the search starts at the opposite of the last move and takes
the first unvisited, in-bounds, 0-valued neighbour. The walk ends when no
such neighbour exists; it may stop before closing the loop.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Tuple
import numpy as np

from ..raster import RasterBuffer

logger = logging.getLogger(__name__)

FREEMAN_DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (1, 0),    # 0: right
    (1, -1),   # 1: up-right
    (0, -1),   # 2: up
    (-1, -1),  # 3: up-left
    (-1, 0),   # 4: left
    (-1, 1),   # 5: down-left
    (0, 1),    # 6: down
    (1, 1),    # 7: down-right
)

NO_OBJECT_SENTINEL = "no object found"


@dataclass
class ChainCode:
    """
    Directions of one traced contour.

    Attributes:
        start: (x, y) of the first foreground pixel, None if there is none
        directions: Direction codes 0-7, one per accepted step
    """
    start: Optional[Tuple[int, int]] = None
    directions: List[int] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.start is not None

    def __len__(self) -> int:
        return len(self.directions)

    def __str__(self) -> str:
        """Decimal digits of the chain, or the sentinel if no object exists."""
        if not self.found:
            return NO_OBJECT_SENTINEL
        return "".join(str(d) for d in self.directions)


class ContourTracer:
    """
    Freeman chain-code generator.

    Example:
        >>> chain = ContourTracer().trace(otsu_binary)
        >>> str(chain)
        '0007665...'
    """

    def trace(self, binary: RasterBuffer) -> ChainCode:
        """
        Trace the first object in row-major order.

        Args:
            binary: 0/255 raster, 0 = object (not modified)

        Returns:
            chain: ChainCode; start is None when the raster has no 0 pixel,
                   directions is empty for an isolated pixel
        """
        pixels = binary.pixels
        h, w = pixels.shape

        candidates = np.flatnonzero(pixels.ravel() == 0)
        if candidates.size == 0:
            return ChainCode()

        start_y, start_x = divmod(int(candidates[0]), w)
        mask = (pixels == 0).tolist()
        visited = [[False] * w for _ in range(h)]

        x, y = start_x, start_y
        visited[y][x] = True
        prev_dir = 0
        chain = []

        while True:
            next_dir = -1
            for i in range(8):
                d = (prev_dir + i) % 8
                dx, dy = FREEMAN_DIRECTIONS[d]
                nx, ny = x + dx, y + dy
                if 0 <= nx < w and 0 <= ny < h and not visited[ny][nx] and mask[ny][nx]:
                    next_dir = d
                    break

            if next_dir == -1:
                break

            dx, dy = FREEMAN_DIRECTIONS[next_dir]
            x, y = x + dx, y + dy
            visited[y][x] = True
            chain.append(next_dir)
            # opposite of the move just made
            prev_dir = (next_dir + 4) % 8

        logger.debug("Chain code from (%d, %d): %d steps", start_x, start_y, len(chain))
        return ChainCode(start=(start_x, start_y), directions=chain)
