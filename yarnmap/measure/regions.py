# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Region growth engine.

Partitions the opaque pixels of an image into 4-connected regions of
similar color with a breadth-first flood fill:

1. The image is scanned row by row; every unvisited opaque pixel seeds a fill.
2. A fill grows through west/east/north/south neighbors whose color is
   within the similarity threshold of the region's running average.
3. The running average is recomputed each time the region triples in size,
   so the threshold follows the region as its color drifts.
4. Every inspected neighbor is marked visited, rejected ones included.
   A rejected pixel is never reconsidered in the same pass.

Regions come out in scan order of their seed pixels, with member lists
still attached for the crop exporter.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from yarnmap.errors import InvalidArgumentError
from yarnmap.measure.colorspace import (
    DEFAULT_ALPHA_THRESHOLD,
    average_rgb,
    is_similar_rgb,
    rgb_to_hex,
    similarity_radius,
)
from yarnmap.measure.pixels import PixelBuffer
from yarnmap.measure.progress import (
    CancelToken,
    ProgressCallback,
    ProgressReporter,
    check_cancelled,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentationConfig:
    """Tunable constants of the region growth engine."""

    # Neighbors with alpha <= this are transparent and block the fill
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD

    # Members must have alpha > this to survive the final re-filter
    opacity_floor: int = 10

    # Running average is recomputed when the member count reaches
    # recompute_factor × the count at the previous recompute
    recompute_factor: int = 3

    # Fill iterations between cancellation checks
    cancel_check_interval: int = 1000

    # Maximum fill iterations per region; None = width × height
    iteration_budget: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate engine constants."""
        if self.recompute_factor < 1:
            raise InvalidArgumentError(
                f"recompute_factor must be >= 1, got {self.recompute_factor}"
            )
        if self.cancel_check_interval < 1:
            raise InvalidArgumentError(
                f"cancel_check_interval must be >= 1, got {self.cancel_check_interval}"
            )
        if self.iteration_budget is not None and self.iteration_budget < 1:
            raise InvalidArgumentError(
                f"iteration_budget must be >= 1 or None, got {self.iteration_budget}"
            )


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Inclusive pixel bounds of a region."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @classmethod
    def around(cls, pixels: list[tuple[int, int]]) -> BoundingBox:
        """Smallest box containing all given (x, y) coordinates."""
        xs = [x for x, _ in pixels]
        ys = [y for _, y in pixels]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True, slots=True)
class GrownRegion:
    """
    A finished region, before cropping and area filtering.

    Attributes:
        color: Exact average color of the members ("#rrggbb")
        pixels: Member coordinates (x, y) in fill order
        bbox: Bounds of the members
    """
    color: str
    pixels: tuple[tuple[int, int], ...]
    bbox: BoundingBox

    @property
    def pixel_count(self) -> int:
        return len(self.pixels)

    @property
    def seed(self) -> tuple[int, int]:
        return self.pixels[0]


class VisitationMap:
    """
    One byte per pixel, 0 = unvisited, 1 = visited.

    Owned by a single segmentation pass. Marks are never cleared.
    """

    __slots__ = ("width", "height", "_cells")

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._cells = bytearray(width * height)

    def mark(self, x: int, y: int) -> None:
        self._cells[y * self.width + x] = 1

    def is_visited(self, x: int, y: int) -> bool:
        return self._cells[y * self.width + x] == 1

    def count(self) -> int:
        """Number of visited pixels."""
        return self._cells.count(1)


def grow_regions(
    buffer: PixelBuffer,
    threshold: float,
    *,
    cancel: Optional[CancelToken] = None,
    progress: Optional[ProgressCallback] = None,
    config: Optional[SegmentationConfig] = None,
) -> list[GrownRegion]:
    """
    Segment a pixel buffer into similar-color regions.

    Args:
        buffer: Source pixels
        threshold: Similarity threshold, 0-100 percent of max RGB distance
        cancel: Optional token polled before the scan, at every row, every
            cancel_check_interval fill steps and once after the scan
        progress: Optional callback receiving the percent of rows scanned
        config: Engine constants (uses defaults if None)

    Returns:
        Regions in scan order of their seed pixels

    Raises:
        InvalidArgumentError: If threshold is outside [0, 100]
        CancelledError: If the token is cancelled at a checkpoint
    """
    cfg = config or SegmentationConfig()
    radius = similarity_radius(threshold)

    check_cancelled(cancel)

    width, height = buffer.width, buffer.height
    visited = VisitationMap(width, height)
    reporter = ProgressReporter(progress, height)
    regions: list[GrownRegion] = []

    for y in range(height):
        check_cancelled(cancel)

        for x in range(width):
            if visited.is_visited(x, y):
                continue
            if buffer.get_pixel(x, y)[3] <= cfg.alpha_threshold:
                continue

            region = _fill_region(buffer, visited, x, y, radius, cancel, cfg)
            if region is not None:
                regions.append(region)

        reporter.rows_done(y + 1)

    reporter.finish()
    check_cancelled(cancel)

    logger.debug(
        "Segmented %dx%d image into %d regions", width, height, len(regions)
    )
    return regions


def _fill_region(
    buffer: PixelBuffer,
    visited: VisitationMap,
    start_x: int,
    start_y: int,
    radius: float,
    cancel: Optional[CancelToken],
    cfg: SegmentationConfig,
) -> Optional[GrownRegion]:
    """Grow one region from a seed pixel. Returns None if nothing survives."""
    width, height = buffer.width, buffer.height
    get_pixel = buffer.get_pixel
    alpha_threshold = cfg.alpha_threshold

    members: list[tuple[int, int]] = []
    average = get_pixel(start_x, start_y)[:3]
    checkpoint = 0

    queue: deque[tuple[int, int]] = deque([(start_x, start_y)])
    seen = {(start_x, start_y)}
    visited.mark(start_x, start_y)

    max_iterations = cfg.iteration_budget
    if max_iterations is None:
        max_iterations = width * height
    iterations = 0

    while queue and iterations < max_iterations:
        iterations += 1
        if iterations % cfg.cancel_check_interval == 0:
            check_cancelled(cancel)

        x, y = queue.popleft()
        if get_pixel(x, y)[3] <= alpha_threshold:
            continue

        members.append((x, y))

        if checkpoint == 0:
            checkpoint = 1
        elif len(members) >= checkpoint * cfg.recompute_factor:
            average = average_rgb(buffer, members)
            checkpoint = len(members)

        for nx, ny in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)):
            if nx < 0 or nx >= width or ny < 0 or ny >= height:
                continue
            if visited.is_visited(nx, ny):
                continue
            if (nx, ny) in seen:
                continue

            neighbor = get_pixel(nx, ny)
            visited.mark(nx, ny)

            # Transparent pixels are a hard boundary
            if neighbor[3] <= alpha_threshold:
                continue

            if is_similar_rgb(average, neighbor, radius):
                seen.add((nx, ny))
                queue.append((nx, ny))

    if queue:
        logger.warning(
            "Iteration limit reached (%d) for region starting at (%d, %d); "
            "%d queued pixels dropped",
            max_iterations, start_x, start_y, len(queue),
        )

    if not members:
        return None

    opaque = [p for p in members if get_pixel(*p)[3] > cfg.opacity_floor]
    if not opaque:
        return None

    return GrownRegion(
        color=rgb_to_hex(average_rgb(buffer, opaque)),
        pixels=tuple(opaque),
        bbox=BoundingBox.around(opaque),
    )
