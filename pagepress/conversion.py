"""WebP optimization of page and main images, plus pass-through copies."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Callable

from tqdm import tqdm

from .models import (
    ConversionJob,
    JobStatus,
    NamingPlan,
    OptimizeFailed,
    OptimizeResult,
    Optimized,
    OutputDescriptor,
    RunConfig,
)
from .naming import intermediate_path
from .utils import OUTPUT_IMAGE_EXTENSION

log = logging.getLogger(__name__)

ImageOptimizer = Callable[[Path, Path, int], OptimizeResult]


def optimize_image(source: Path, destination_dir: Path, quality: int) -> OptimizeResult:
    """Encode *source* as WebP into ``destination_dir/<stem>.webp``.

    Returns ``Optimized(0)`` when *source* is not a file, ``Optimized(1)``
    once the output is written and ``OptimizeFailed`` when Pillow raises.
    """
    from PIL import Image

    if not source.is_file():
        return Optimized(0)

    target = destination_dir / f"{source.stem}{OUTPUT_IMAGE_EXTENSION}"
    try:
        with Image.open(source) as img:
            has_alpha = img.mode in ("RGBA", "LA") or (
                img.mode == "P" and "transparency" in img.info
            )
            converted = img.convert("RGBA" if has_alpha else "RGB")
            converted.save(target, "WEBP", quality=quality)
    except (OSError, ValueError) as exc:
        target.unlink(missing_ok=True)
        return OptimizeFailed(f"{type(exc).__name__}: {exc}")
    return Optimized(1)


def optimize_and_rename(
    job: ConversionJob,
    final_path: Path,
    quality: int,
    optimizer: ImageOptimizer = optimize_image,
) -> OutputDescriptor:
    """Optimize one image next to *final_path*, then rename it into place.

    Never raises; every failure is captured in the returned descriptor.
    """
    source = job.source_path
    destination_dir = final_path.parent
    descriptor = OutputDescriptor(source_path=source, kind=job.kind, final_path=final_path)

    result = optimizer(source, destination_dir, quality)
    if isinstance(result, OptimizeFailed):
        descriptor.status = JobStatus.FAILED
        descriptor.detail = f"could not optimize: {result.reason}"
        return descriptor
    if result.count == 0:
        descriptor.status = JobStatus.FAILED
        descriptor.detail = "optimizer produced no output"
        return descriptor

    produced = intermediate_path(job, final_path)
    if not produced.exists():
        descriptor.status = JobStatus.FAILED
        descriptor.detail = f"optimization succeeded but {produced.name} was not found"
        log.error("Inconsistent optimizer output for %s: %s missing", source.name, produced)
        return descriptor

    try:
        produced.replace(final_path)
    except OSError as exc:
        descriptor.status = JobStatus.FAILED
        descriptor.detail = f"rename failed: {exc}"
        return descriptor

    descriptor.status = JobStatus.SUCCESS
    descriptor.detail = "optimized"
    return descriptor


async def convert_pages_async(
    jobs: list[ConversionJob],
    plan: NamingPlan,
    page_dir: Path,
    config: RunConfig,
    optimizer: ImageOptimizer = optimize_image,
) -> list[OutputDescriptor]:
    """Convert page images in fixed windows of ``config.concurrency``.

    Each window is awaited in full before the next one starts. Results come
    back in the order of *jobs*.
    """
    window_size = max(1, config.concurrency)
    descriptors: list[OutputDescriptor] = []

    with tqdm(
        total=len(jobs),
        desc="Converting pages",
        unit="img",
        disable=not config.show_progress,
    ) as progress:
        for start in range(0, len(jobs), window_size):
            window = jobs[start : start + window_size]
            log.debug(
                "Window %s-%s of %s", start + 1, start + len(window), len(jobs)
            )
            results = await asyncio.gather(
                *(
                    asyncio.to_thread(
                        optimize_and_rename,
                        job,
                        page_dir / plan.page_filename(job.discriminator),
                        config.quality,
                        optimizer,
                    )
                    for job in window
                ),
                return_exceptions=True,
            )
            for job, result in zip(window, results):
                if isinstance(result, BaseException):
                    log.error(
                        "Unexpected error converting %s",
                        job.source_path.name,
                        exc_info=result,
                    )
                    result = OutputDescriptor(
                        source_path=job.source_path,
                        kind=job.kind,
                        final_path=page_dir / plan.page_filename(job.discriminator),
                        status=JobStatus.FAILED,
                        detail=f"unexpected error: {result}",
                    )
                descriptors.append(result)
            progress.update(len(window))

    return descriptors


def convert_pages(
    jobs: list[ConversionJob],
    plan: NamingPlan,
    page_dir: Path,
    config: RunConfig,
    optimizer: ImageOptimizer = optimize_image,
) -> list[OutputDescriptor]:
    """Blocking entry point for :func:`convert_pages_async`."""
    if not jobs:
        return []
    return asyncio.run(convert_pages_async(jobs, plan, page_dir, config, optimizer))


def convert_main_image(
    job: ConversionJob,
    final_path: Path,
    config: RunConfig,
    optimizer: ImageOptimizer = optimize_image,
) -> OutputDescriptor:
    """Optimize and rename a root-level image (no sequence suffix)."""
    try:
        return optimize_and_rename(job, final_path, config.quality, optimizer)
    except Exception as exc:
        log.exception("Unexpected error converting main image %s", job.source_path.name)
        return OutputDescriptor(
            source_path=job.source_path,
            kind=job.kind,
            final_path=final_path,
            status=JobStatus.FAILED,
            detail=f"unexpected error: {exc}",
        )


def copy_passthrough(job: ConversionJob, final_path: Path) -> OutputDescriptor:
    """Copy a non-image, non-PDF root file verbatim under its new name."""
    descriptor = OutputDescriptor(
        source_path=job.source_path, kind=job.kind, final_path=final_path
    )
    try:
        shutil.copy2(job.source_path, final_path)
    except OSError as exc:
        descriptor.status = JobStatus.FAILED
        descriptor.detail = f"copy failed: {exc}"
        return descriptor
    descriptor.detail = "copied"
    return descriptor
