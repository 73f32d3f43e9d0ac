"""
Ordered sequences of texture operations.

Runs a fixed list of operations over one buffer, or over many independent
buffers either sequentially or on a thread pool.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .normal_settings import NormalMapSettings
from .operations import (
    CHANNEL_GREEN,
    CHANNEL_RED,
    ChannelInvert,
    ChannelSwap,
    TextureOperation,
    VectorNormalize,
    VerticalFlip,
)
from .pixel_format import PixelLayout

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Result from running the pipeline over a single buffer"""
    success: bool
    label: str
    byte_count: int
    operations: List[str] = field(default_factory=list)  # Names of operations applied
    elapsed: float = 0.0
    error_msg: Optional[str] = None


class TexturePipeline:
    """Applies texture operations to pixel buffers in a fixed order"""

    def __init__(self, operations: Iterable[TextureOperation] = (),
                 enable_parallel: bool = False, max_workers: int = 1):
        self.operations: Tuple[TextureOperation, ...] = tuple(operations)
        self.enable_parallel = enable_parallel
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_settings(cls, settings: NormalMapSettings) -> "TexturePipeline":
        """
        Build the pipeline described by normal map settings.

        Order: channel swap, invert X, invert Y, vertical flip, normalize.
        Normalization goes last so it sees the final channel values.
        """
        operations = []
        if settings.swap_channels is not None:
            operations.append(ChannelSwap(*settings.swap_channels))
        if settings.invert_x:
            operations.append(ChannelInvert(CHANNEL_RED))
        if settings.invert_y:
            operations.append(ChannelInvert(CHANNEL_GREEN))
        if settings.flip_vertical:
            operations.append(VerticalFlip())
        if settings.normalize:
            operations.append(VectorNormalize(mode=settings.normalize_mode))

        return cls(operations,
                   enable_parallel=settings.enable_parallel,
                   max_workers=settings.max_workers)

    @property
    def name(self) -> str:
        """Operation names joined with '_', usable as a cache key or file suffix"""
        return "_".join(op.name for op in self.operations if op.name)

    def __len__(self):
        return len(self.operations)

    def __repr__(self):
        return f"TexturePipeline({list(self.operations)!r})"

    def apply(self, buffer, layout: PixelLayout) -> None:
        """Apply every operation in order. The first failure is raised and stops the pipeline."""
        for op in self.operations:
            logger.debug("Applying %s to %s buffer (%d x %d bytes)",
                         op.name or type(op).__name__, _format_label(layout.pixel_format),
                         layout.stride, layout.height)
            op.apply(buffer, layout)

    def run(self, buffer, layout: PixelLayout, label: str = "") -> PipelineResult:
        """Apply every operation in order and report the outcome instead of raising"""
        result = PipelineResult(success=False, label=label, byte_count=layout.stride * layout.height)
        start = time.perf_counter()
        try:
            for op in self.operations:
                op.apply(buffer, layout)
                result.operations.append(op.name)
            result.success = True
        except Exception as e:
            result.error_msg = str(e)
            logger.warning("Failed to process %s: %s", label or "buffer", e)
        result.elapsed = time.perf_counter() - start
        return result

    def process_buffers(self, items: Sequence[Tuple[str, object, PixelLayout]],
                        progress_callback: Optional[Callable[[int, int, PipelineResult], None]] = None
                        ) -> List[PipelineResult]:
        """
        Run the pipeline over many independent buffers.

        Args:
            items: (label, buffer, layout) tuples. Buffers must not be shared between items.
            progress_callback: Called as (current, total, result) after each buffer

        Returns:
            One PipelineResult per item, in input order
        """
        items = list(items)
        if not items:
            return []

        start = time.perf_counter()
        if self.enable_parallel and len(items) > 1:
            results = self._process_parallel(items, progress_callback)
        else:
            results = self._process_sequential(items, progress_callback)

        failed = sum(1 for r in results if not r.success)
        total_bytes = sum(r.byte_count for r in results)
        logger.info("Processed %d buffers (%.2f MB) in %.3fs, %d failed",
                    len(results), total_bytes / (1024 * 1024),
                    time.perf_counter() - start, failed)
        return results

    def _process_parallel(self, items, progress_callback=None) -> List[PipelineResult]:
        """Process buffers on a thread pool; numpy releases the GIL for the heavy loops"""
        results: List[Optional[PipelineResult]] = [None] * len(items)
        total = len(items)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {}
            for index, (label, buffer, layout) in enumerate(items):
                future = executor.submit(self.run, buffer, layout, label)
                future_to_index[future] = index

            current = 0
            for future in as_completed(future_to_index):
                current += 1
                result = future.result()
                results[future_to_index[future]] = result
                if progress_callback:
                    progress_callback(current, total, result)

        return results

    def _process_sequential(self, items, progress_callback=None) -> List[PipelineResult]:
        """Process buffers one after another"""
        results = []
        total = len(items)
        for current, (label, buffer, layout) in enumerate(items, 1):
            result = self.run(buffer, layout, label)
            results.append(result)
            if progress_callback:
                progress_callback(current, total, result)
        return results


def _format_label(pixel_format) -> str:
    return getattr(pixel_format, 'name', str(pixel_format))
