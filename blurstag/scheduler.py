"""
Parallel blur scheduler.

Fans out the convolution of all pixels onto a thread pool and joins the
results:

- The kernel is built once per call
- The image is split into blocks of rows, one task per block
- Every task computes its pixels and writes each of them into the shared
  :class:`ResultGrid`
- A counting latch signals when the last task finished, after which the
  grid is assembled into the output image and handed to the completion
  callback

Jobs can be cancelled through a :class:`CancellationToken` and the join can
be bounded by a timeout.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

from . import config
from .assembler import assemble
from .convolution import convolve_pixel
from .errors import (
    BlurCancelledError,
    BlurError,
    BlurTimeoutError,
    InvalidParameterError,
)
from .image import Image
from .kernel import GaussianKernel, build_kernel
from .pixel_source import AlphaMode, PixelSource, as_pixel_source, parse_alpha_mode
from .result_grid import ResultGrid

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[Image], Any]
ErrorCallback = Callable[[BaseException], Any]


class CancellationToken:
    """A thread-safe flag telling running blur tasks to stop."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Requests cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raises a BlurCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise BlurCancelledError("Blur was cancelled")


class CountdownLatch:
    """Blocks waiters until count_down was called ``count`` times.

    :param count: The initial count
    """

    def __init__(self, count: int):
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        self._count = count
        self._condition = threading.Condition()

    @property
    def count(self) -> int:
        with self._condition:
            return self._count

    def count_down(self, steps: int = 1) -> None:
        """Decrements the count, waking up all waiters once it reaches zero."""
        with self._condition:
            self._count = max(0, self._count - steps)
            if self._count == 0:
                self._condition.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """Waits until the count reached zero.

        :param timeout: Max seconds to wait (None = forever)
        :returns: True if the count reached zero, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(lambda: self._count == 0, timeout=timeout)


@dataclass
class BlurMetrics:
    """Performance metrics of a blur job.

    :param tasks_submitted: Number of row block tasks submitted to the pool
    :param tasks_completed: Number of tasks which processed all their rows
    :param pixels_written: Number of result grid cells written
    :param start_time: Start timestamp (perf_counter)
    :param end_time: End timestamp (perf_counter)
    """

    tasks_submitted: int = 0
    tasks_completed: int = 0
    pixels_written: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def total_time_s(self) -> float:
        """Total execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def pixels_per_second(self) -> float:
        """Pixel throughput."""
        if self.total_time_s <= 0:
            return 0.0
        return self.pixels_written / self.total_time_s

    def summary(self) -> str:
        """Generate human-readable summary of metrics."""
        return (
            f"Tasks: {self.tasks_completed} / {self.tasks_submitted}, "
            f"pixels: {self.pixels_written}, "
            f"time: {self.total_time_s:.3f}s, "
            f"throughput: {self.pixels_per_second:.1f} px/s"
        )


class BlurJob:
    """Handle of an asynchronously running blur.

    Created by :func:`run_convolution`. Exactly one of the completion and the
    error callback is invoked, exactly once, from the job's coordinator thread.
    """

    def __init__(
        self,
        grid: ResultGrid,
        kernel: GaussianKernel,
        cancel_token: CancellationToken,
        completion: CompletionCallback | None = None,
        on_error: ErrorCallback | None = None,
    ):
        self.grid = grid
        "The result grid the tasks write into"
        self.kernel = kernel
        "The kernel used by this job"
        self.cancel_token = cancel_token
        self.metrics = BlurMetrics()
        self._completion = completion
        self._on_error = on_error
        self._done = threading.Event()
        self._finish_lock = threading.Lock()
        self._image: Image | None = None
        self._error: BaseException | None = None

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def done(self) -> bool:
        """True once the job succeeded or failed."""
        return self._done.is_set()

    @property
    def error(self) -> BaseException | None:
        """The failure of the job, None while running or on success."""
        return self._error

    def cancel(self) -> None:
        """Requests cancellation. Has no effect on a finished job."""
        self.cancel_token.cancel()

    def wait(self, timeout: float | None = None) -> Image:
        """Waits for the job and returns the blurred image.

        :param timeout: Max seconds to wait (None = forever)
        :returns: The output image
        :raises BlurTimeoutError: If the job did not finish in time
        :raises BlurError: Or any other error the job failed with
        """
        if not self._done.wait(timeout):
            raise BlurTimeoutError(f"Blur did not finish within {timeout}s")
        if self._error is not None:
            raise self._error
        return self._image

    def result(self, timeout: float | None = None) -> Image:
        """Alias of :meth:`wait`."""
        return self.wait(timeout)

    def _finish(self, image: Image | None, error: BaseException | None) -> None:
        with self._finish_lock:
            if self._done.is_set():
                return
            self._image = image
            self._error = error
            self.metrics.end_time = time.perf_counter()
            self.metrics.pixels_written = self.grid.written
            self._done.set()
        callback, argument = (
            (self._completion, image) if error is None else (self._on_error, error)
        )
        if callback is None:
            return
        try:
            callback(argument)
        except Exception:
            logger.exception("Blur job callback raised an exception")


def _positive(name: str, value, kind: type = int):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidParameterError(f"{name} must be a positive number, got {value!r}")
    if kind is int and int(value) != value:
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    return kind(value)


def _coordinate(
    job: BlurJob,
    source: PixelSource,
    num_workers: int,
    block_rows: int,
    timeout: float | None,
) -> None:
    """Runs the fan-out, joins all tasks and assembles the output image."""
    width, height = job.width, job.height
    weights, radius = job.kernel.weights, job.kernel.radius
    grid, token, metrics = job.grid, job.cancel_token, job.metrics
    blocks = [(start, min(start + block_rows, height)) for start in range(0, height, block_rows)]
    latch = CountdownLatch(len(blocks))
    errors: list[BaseException] = []
    metrics_lock = threading.Lock()

    def convolve_block(y_start: int, y_end: int) -> None:
        try:
            for y in range(y_start, y_end):
                for x in range(width):
                    if token.cancelled:
                        return
                    color = convolve_pixel(x, y, width, height, weights, radius, source)
                    grid.write(x, y, color)
            with metrics_lock:
                metrics.tasks_completed += 1
            logger.debug(f"Convolved rows {y_start}-{y_end - 1} of {width} x {height} image")
        except Exception as e:
            logger.error(f"Blur task for rows {y_start}-{y_end - 1} failed: {e}")
            with metrics_lock:
                errors.append(e)
            token.cancel()
        finally:
            latch.count_down()

    metrics.start_time = time.perf_counter()
    pool = ThreadPoolExecutor(max_workers=num_workers, thread_name_prefix="blurstag")
    try:
        for index, (y_start, y_end) in enumerate(blocks):
            if token.cancelled:
                latch.count_down(len(blocks) - index)
                break
            pool.submit(convolve_block, y_start, y_end)
            metrics.tasks_submitted += 1
        finished = latch.wait(timeout)
    except Exception as e:
        token.cancel()
        job._finish(None, e)
        return
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    if not finished:
        token.cancel()
        logger.warning(f"Blur of {width} x {height} image timed out after {timeout}s")
        job._finish(None, BlurTimeoutError(f"Blur did not complete within {timeout}s"))
        return
    if errors:
        job._finish(None, errors[0])
        return
    if token.cancelled:
        logger.warning(
            f"Blur of {width} x {height} image cancelled, "
            f"{grid.written} of {grid.cell_count} pixels computed"
        )
        job._finish(None, BlurCancelledError("Blur was cancelled"))
        return
    try:
        image = assemble(grid, width, height)
    except BlurError as e:
        job._finish(None, e)
        return
    job._finish(image, None)
    logger.info(f"Blurred {width} x {height} image: {metrics.summary()}")


def run_convolution(
    image: Any,
    sigma: float | None = None,
    completion: CompletionCallback | None = None,
    *,
    on_error: ErrorCallback | None = None,
    num_workers: int | None = None,
    block_rows: int | None = None,
    timeout: float | None = None,
    cancel_token: CancellationToken | None = None,
    alpha_mode: AlphaMode | str | None = None,
    settings: config.BlurSettings | None = None,
) -> BlurJob:
    """Starts a gaussian blur of an image in the background.

    Parameter and input validation happen synchronously, before any work
    is scheduled. Everything after that is reported through the returned
    job and the callbacks.

    :param image: The input image, a PixelSource or anything accepted by
        :func:`as_pixel_source`
    :param sigma: The standard deviation of the gaussian. Defaults to
        ``settings.SIGMA``.
    :param completion: Called with the output image once the blur finished
    :param on_error: Called with the exception if the blur failed
    :param num_workers: Number of worker threads (default: cpu count)
    :param block_rows: Number of image rows computed per task
    :param timeout: Max seconds to wait for all tasks (None = forever)
    :param cancel_token: Token to cancel the job with. A new one is
        created if omitted, see :meth:`BlurJob.cancel`.
    :param alpha_mode: How the alpha channel of the input is derived
    :param settings: Settings providing the defaults
    :returns: The job handle
    :raises InvalidParameterError: If sigma, alpha_mode or a scheduling option
        is invalid
    :raises DecodeError: If no pixel data can be obtained from the image
    """
    settings = settings or config.settings
    kernel = build_kernel(settings.SIGMA if sigma is None else sigma)
    num_workers = _positive(
        "num_workers", num_workers if num_workers is not None else settings.NUM_WORKERS
    ) or os.cpu_count() or 4
    block_rows = _positive(
        "block_rows", block_rows if block_rows is not None else settings.BLOCK_ROWS
    )
    timeout = _positive(
        "timeout", timeout if timeout is not None else settings.JOIN_TIMEOUT, float
    )
    alpha_mode = parse_alpha_mode(
        alpha_mode if alpha_mode is not None else settings.ALPHA_MODE
    )
    source = as_pixel_source(image, alpha_mode=alpha_mode)
    grid = ResultGrid(source.width, source.height, lock_stripes=settings.LOCK_STRIPES)
    job = BlurJob(
        grid,
        kernel,
        cancel_token or CancellationToken(),
        completion=completion,
        on_error=on_error,
    )
    logger.info(
        f"Starting blur of {source.width} x {source.height} image, sigma={kernel.sigma}, "
        f"radius={kernel.radius}, workers={num_workers}, block_rows={block_rows}"
    )
    coordinator = threading.Thread(
        target=_coordinate,
        args=(job, source, num_workers, block_rows, timeout),
        daemon=True,
        name=f"BlurCoordinator-{source.width}x{source.height}",
    )
    coordinator.start()
    return job


def gaussian_blur(image: Any, sigma: float | None = None, **options) -> Image:
    """Blurs an image and waits for the result.

    :param image: The input image
    :param sigma: The standard deviation of the gaussian
    :param options: Further keyword arguments of :func:`run_convolution`
    :returns: The blurred image
    """
    return run_convolution(image, sigma, **options).wait()


__all__ = [
    "BlurJob",
    "BlurMetrics",
    "CancellationToken",
    "CountdownLatch",
    "run_convolution",
    "gaussian_blur",
]
