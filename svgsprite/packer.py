import enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from .errors import PackingError


class Rectangle:
    """Represents a rectangle with width, height, and position (x, y)."""
    def __init__(self, width: int, height: int, x: int = 0, y: int = 0, name: str = ""):
        self.width = width
        self.height = height
        self.x = x
        self.y = y
        self.name = name

    def __repr__(self):
        return f"Rectangle({self.width}×{self.height} at ({self.x},{self.y}) - {self.name})"

    def __eq__(self, other):
        if not isinstance(other, Rectangle):
            return NotImplemented
        return (self.width, self.height, self.x, self.y, self.name) == \
            (other.width, other.height, other.x, other.y, other.name)

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def intersects(self, other: 'Rectangle') -> bool:
        """Check if this rectangle intersects with another."""
        return not (
            self.x + self.width <= other.x or
            self.y + self.height <= other.y or
            self.x >= other.x + other.width or
            self.y >= other.y + other.height
        )

    def contains(self, width: int, height: int) -> bool:
        """Check if a rectangle of the given size fits inside this one."""
        return self.width >= width and self.height >= height

    def area(self) -> int:
        """Get the area of the rectangle."""
        return self.width * self.height


class HeuristicType(enum.Enum):
    """Enum for placement heuristics."""
    BEST_SHORT_SIDE_FIT = 1  # Minimize the shorter leftover side
    BEST_LONG_SIDE_FIT = 2   # Minimize the longer leftover side
    BEST_AREA_FIT = 3        # Minimize the total area of leftover space
    BOTTOM_LEFT = 4          # Place at the top-most, then left-most free rectangle


class SplitHeuristic(enum.Enum):
    """Enum for guillotine split heuristics."""
    SHORTEST_AXIS = 1  # Split along the shorter leftover axis
    LONGEST_AXIS = 2   # Split along the longer leftover axis
    MIN_AREA = 3       # Minimize the area of the smaller resulting rectangle
    MAX_AREA = 4       # Maximize the area of the larger resulting rectangle


class GuillotinePackerSheet:
    """Guillotine bin packer for a single bounded sheet.

    Each placed item goes to the origin of one free rectangle; the leftover
    L-shape is cut once, straight across, into two new free rectangles.
    Free rectangles are never merged back together.
    """

    def __init__(self, width: int, height: int,
                 heuristic: HeuristicType = HeuristicType.BEST_AREA_FIT,
                 split: SplitHeuristic = SplitHeuristic.MIN_AREA):
        if width <= 0 or height <= 0:
            raise ValueError(f"sheet size must be positive, got {width}×{height}")
        self.width = width
        self.height = height
        self.heuristic = heuristic
        self.split = split
        # Start with the entire sheet as a free rectangle
        self.free_rects = [Rectangle(width, height)]
        self.placed_rects: List[Rectangle] = []

    def find_free_rect(self, width: int, height: int) -> Optional[int]:
        """Return the index of the best free rectangle for the item, or None."""
        best_index = None
        best_score = None

        for index, rect in enumerate(self.free_rects):
            if not rect.contains(width, height):
                continue
            score = self._calculate_score(rect, width, height)
            # Strict comparison keeps the earliest rectangle on ties
            if best_score is None or score < best_score:
                best_score = score
                best_index = index

        return best_index

    def _calculate_score(self, free_rect: Rectangle, width: int, height: int) -> Tuple[int, int]:
        """Calculate the score based on the selected heuristic."""
        leftover_width = free_rect.width - width
        leftover_height = free_rect.height - height

        if self.heuristic == HeuristicType.BEST_SHORT_SIDE_FIT:
            return min(leftover_width, leftover_height), max(leftover_width, leftover_height)

        elif self.heuristic == HeuristicType.BEST_LONG_SIDE_FIT:
            return max(leftover_width, leftover_height), min(leftover_width, leftover_height)

        elif self.heuristic == HeuristicType.BOTTOM_LEFT:
            return free_rect.y, free_rect.x

        return free_rect.area() - width * height, min(leftover_width, leftover_height)

    def _split_horizontally(self, free_rect: Rectangle, width: int, height: int) -> bool:
        """Decide whether the leftover space is cut along the item's bottom edge."""
        leftover_width = free_rect.width - width
        leftover_height = free_rect.height - height

        if self.split == SplitHeuristic.SHORTEST_AXIS:
            return leftover_width <= leftover_height
        elif self.split == SplitHeuristic.LONGEST_AXIS:
            return leftover_width > leftover_height
        elif self.split == SplitHeuristic.MAX_AREA:
            return width * leftover_height <= leftover_width * height

        return width * leftover_height > leftover_width * height

    def insert(self, width: int, height: int, name: str) -> Optional[Rectangle]:
        """Try to insert a rectangle with given dimensions. Returns the placed rectangle or None if it couldn't fit."""
        if width < 0 or height < 0:
            raise ValueError(f"item `{name}` has a negative size {width}×{height}")

        index = self.find_free_rect(width, height)
        if index is None:
            return None

        free_rect = self.free_rects.pop(index)
        placed_rect = Rectangle(width, height, free_rect.x, free_rect.y, name)
        self.placed_rects.append(placed_rect)

        self._split_free_rect(free_rect, placed_rect)

        return placed_rect

    def _split_free_rect(self, free_rect: Rectangle, placed: Rectangle):
        """Cut the space left over in free_rect into at most two free rectangles."""
        horizontal = self._split_horizontally(free_rect, placed.width, placed.height)

        # Below the placed item
        bottom = Rectangle(
            free_rect.width if horizontal else placed.width,
            free_rect.height - placed.height,
            free_rect.x,
            free_rect.y + placed.height
        )
        # Right of the placed item
        right = Rectangle(
            free_rect.width - placed.width,
            placed.height if horizontal else free_rect.height,
            free_rect.x + placed.width,
            free_rect.y
        )

        for rect in (bottom, right):
            if rect.width > 0 and rect.height > 0:
                self.free_rects.append(rect)

    def insert_list(self, items: Iterable[Tuple[str, int, int]]) -> Tuple[List[Rectangle], List[Tuple[str, int, int]]]:
        """Insert items in the order given. Returns (placed, rejected)."""
        placed = []
        rejected = []
        for name, width, height in items:
            rect = self.insert(width, height, name)
            if rect is None:
                rejected.append((name, width, height))
            else:
                placed.append(rect)
        return placed, rejected

    def shrink(self):
        """Shrink the sheet to the bounding box of the placed rectangles."""
        self.width = max((rect.right for rect in self.placed_rects), default=0)
        self.height = max((rect.bottom for rect in self.placed_rects), default=0)


class PackResult(NamedTuple):
    """Shrunk canvas size and the placement for every item id."""
    width: int
    height: int
    placements: Dict[str, Rectangle]


def pack(width: int, height: int, items: Iterable[Tuple[str, int, int]],
         heuristic: HeuristicType = HeuristicType.BEST_AREA_FIT,
         split: SplitHeuristic = SplitHeuristic.MIN_AREA) -> PackResult:
    """Pack every (id, width, height) item into a width×height canvas.

    Either all items are placed, or PackingError is raised naming each
    rejected item. The returned canvas is shrunk to the placed items.
    """
    sheet = GuillotinePackerSheet(width, height, heuristic, split)
    placed, rejected = sheet.insert_list(items)
    if rejected:
        raise PackingError(rejected, width, height)

    sheet.shrink()
    return PackResult(sheet.width, sheet.height, {rect.name: rect for rect in placed})
