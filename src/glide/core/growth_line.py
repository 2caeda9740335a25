"""Growth line track model.

- Point: one detected centerline sample (x, y, t)
- LineFrame: all samples of one growth line in one frame, ordered top to bottom
- GrowthLine: one LineFrame per frame for one physical channel
"""

from typing import Iterator, List, NamedTuple, Optional, Tuple

__all__ = ["Point", "LineFrame", "GrowthLine"]


class Point(NamedTuple):
    """Centerline sample in volume pixel coordinates."""
    x: int
    y: int
    t: int


class LineFrame:
    """Centerline points of one growth line in one frame.

    Points are appended while the correspondence builder walks the rows of
    a frame and sorted by y once the frame is finished. An empty LineFrame
    stands for a channel that was not detected in that frame.
    """

    def __init__(self, frame: int, points=()):
        self.frame = int(frame)
        self._points: List[Point] = []
        for p in points:
            self.add_point(p)

    def add_point(self, point: Point) -> None:
        if point.t != self.frame:
            raise ValueError(f"Point {point} does not belong to frame {self.frame}")
        self._points.append(Point(int(point.x), int(point.y), int(point.t)))

    def sort_points(self) -> None:
        self._points.sort(key=lambda p: p.y)

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points)

    @property
    def is_empty(self) -> bool:
        return not self._points

    @property
    def first_point(self) -> Optional[Point]:
        """Topmost point (smallest y)."""
        if not self._points:
            return None
        return min(self._points, key=lambda p: p.y)

    @property
    def last_point(self) -> Optional[Point]:
        """Bottommost point (largest y)."""
        if not self._points:
            return None
        return max(self._points, key=lambda p: p.y)

    @property
    def avg_x(self) -> Optional[float]:
        """Mean x over all points, None for an empty LineFrame."""
        if not self._points:
            return None
        return sum(p.x for p in self._points) / len(self._points)

    @property
    def center_x(self) -> Optional[int]:
        """avg_x rounded to the nearest pixel column."""
        avg = self.avg_x
        if avg is None:
            return None
        return int(round(avg))

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __repr__(self) -> str:
        avg = "empty" if self.avg_x is None else f"{self.avg_x:.1f}"
        return f"LineFrame(frame={self.frame}, n_points={len(self)}, avg_x={avg})"


class GrowthLine:
    """Time series of LineFrames for one channel, indexed by frame."""

    def __init__(self, line_frames=()):
        self._frames: List[LineFrame] = list(line_frames)

    def append(self, line_frame: LineFrame) -> None:
        self._frames.append(line_frame)

    def prepend(self, line_frame: LineFrame) -> None:
        self._frames.insert(0, line_frame)

    @property
    def frames(self) -> Tuple[LineFrame, ...]:
        return tuple(self._frames)

    @property
    def detected_frames(self) -> List[int]:
        """Frame indices in which this line has at least one point."""
        return [lf.frame for lf in self._frames if not lf.is_empty]

    def __getitem__(self, frame: int) -> LineFrame:
        return self._frames[frame]

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[LineFrame]:
        return iter(self.frames)

    def __repr__(self) -> str:
        return f"GrowthLine(n_frames={len(self)}, detected={len(self.detected_frames)})"
