"""CLI entrypoint: optimize, renumber and rename a folder of scanned pages.

WARNING: every run deletes the output folder first.

Usage:
    python -m pagepress HM_12
    python -m pagepress HM_12 --input-dir ./input --output-dir ./output
    python -m pagepress HM_12 --quality 80 --concurrency 4
    python -m pagepress HM_12 --pdf-preset /screen --pdf-timeout 300
    python -m pagepress HM_12 --report ./report.json --verbose
"""

from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from pathlib import Path
from typing import Optional

from .conversion import (
    ImageOptimizer,
    convert_main_image,
    convert_pages,
    copy_passthrough,
    optimize_image,
)
from .models import (
    ConversionJob,
    JobKind,
    JobStatus,
    OutputDescriptor,
    RunConfig,
)
from .naming import (
    build_naming_plan,
    final_path_for,
    find_collisions,
    validate_base_name,
)
from .pdf import PdfCompressor, compress_pdf, handle_pdf
from .reporting import log_summary, report_outcome, save_report, summarize
from .sources import discover_inputs
from .utils import (
    DEFAULT_CONCURRENCY,
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PDF_PRESET,
    DEFAULT_PDF_TIMEOUT_S,
    DEFAULT_QUALITY,
    PDF_COMPRESS_THRESHOLD,
    PDF_PRESETS,
    ensure_page_dir,
    prepare_output_dir,
)

log = logging.getLogger(__name__)


def _setup_logging(*, verbose: bool, log_file: Path | None) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)

    console_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    detailed_fmt = (
        "%(asctime)s | %(levelname)-8s | %(name)s | "
        "%(threadName)s | %(filename)s:%(lineno)d | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(logging.Formatter(console_fmt, "%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(detailed_fmt, "%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    logging.getLogger("PIL").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description=(
            "Convert page images to WebP, compress the PDF and rename everything "
            "after NEW_NAME. The output folder is deleted and recreated on every run."
        )
    )
    parser.add_argument(
        "new_name",
        nargs="?",
        help="Base name for every output file, e.g. HM_12",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=DEFAULT_INPUT_DIR,
        help="Input folder (default: input/)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Output folder, WIPED before each run (default: output/)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Page images converted at once (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=DEFAULT_QUALITY,
        help=f"WebP quality 0-100 (default: {DEFAULT_QUALITY})",
    )
    parser.add_argument(
        "--pdf-preset",
        choices=PDF_PRESETS,
        default=DEFAULT_PDF_PRESET,
        help=f"Ghostscript PDFSETTINGS preset (default: {DEFAULT_PDF_PRESET})",
    )
    parser.add_argument(
        "--pdf-threshold-mb",
        type=float,
        default=PDF_COMPRESS_THRESHOLD / (1024 * 1024),
        help="Compress PDFs at or above this size in MiB, copy smaller ones (default: 15)",
    )
    parser.add_argument(
        "--pdf-timeout",
        type=float,
        default=DEFAULT_PDF_TIMEOUT_S,
        help="Seconds to wait for Ghostscript, 0 to wait forever (default: 600)",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional path for a JSON run report",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional log file path",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RunConfig:
    if not 0 <= args.quality <= 100:
        raise ValueError(f"--quality must be between 0 and 100, got {args.quality}")
    if args.concurrency < 1:
        raise ValueError(f"--concurrency must be at least 1, got {args.concurrency}")
    return RunConfig(
        input_dir=args.input_dir,
        output_dir=args.output_dir,
        concurrency=args.concurrency,
        quality=args.quality,
        pdf_preset=args.pdf_preset,
        pdf_threshold_bytes=int(args.pdf_threshold_mb * 1024 * 1024),
        pdf_timeout_s=args.pdf_timeout if args.pdf_timeout > 0 else None,
        show_progress=not args.no_progress,
        report_path=args.report,
    )


def _reject_collisions(
    targets: dict[ConversionJob, Path],
    reserved: list[Path],
) -> tuple[dict[ConversionJob, Path], list[OutputDescriptor]]:
    """Split *targets* into safe jobs and FAILED descriptors for colliding ones."""
    collisions = find_collisions(targets, reserved)
    rejected: list[OutputDescriptor] = []
    for path, jobs in collisions.items():
        log.warning(
            "Name collision: %s would all be written to %s; none of them is processed",
            ", ".join(str(j.source_path) for j in jobs),
            path.name,
        )
        for job in jobs:
            if targets.pop(job, None) is None:
                continue
            rejected.append(
                OutputDescriptor(
                    source_path=job.source_path,
                    kind=job.kind,
                    final_path=path,
                    status=JobStatus.FAILED,
                    detail=f"name collision: {path.name}",
                )
            )
    return targets, rejected


def run_pipeline(
    new_name: str,
    config: RunConfig,
    *,
    optimizer: ImageOptimizer = optimize_image,
    compressor: PdfCompressor = compress_pdf,
) -> list[OutputDescriptor]:
    """Run every stage once and return one descriptor per item.

    Raises:
        ValueError: invalid base name or unsafe output folder.
        FileNotFoundError: the input folder does not exist.
    """
    t0 = time.perf_counter()
    validate_base_name(new_name)

    found = discover_inputs(config.input_dir)
    prepare_output_dir(config.output_dir, config.input_dir)

    plan = build_naming_plan(new_name, found.page_jobs)
    page_dir = ensure_page_dir(config.output_dir, plan.base_name)

    all_jobs = [*found.page_jobs, *found.root_jobs]
    targets = {job: final_path_for(job, plan, config.output_dir) for job in all_jobs}
    targets, descriptors = _reject_collisions(targets, [page_dir])

    for path in found.ignored:
        descriptors.append(
            OutputDescriptor(
                source_path=path,
                kind=None,
                status=JobStatus.SKIPPED,
                detail="not a supported image",
            )
        )
    for d in descriptors:
        report_outcome(d)

    # 1. Page images
    page_jobs = [j for j in found.page_jobs if j in targets]
    log.info("Optimizing %s page images (window=%s)", len(page_jobs), config.concurrency)
    for d in convert_pages(page_jobs, plan, page_dir, config, optimizer):
        report_outcome(d)
        descriptors.append(d)

    # 2. Root-level files
    for job in found.root_jobs:
        if job not in targets:
            continue
        final_path = targets[job]
        if job.kind is JobKind.MAIN_IMAGE:
            d = convert_main_image(job, final_path, config, optimizer)
        elif job.kind is JobKind.PDF_DOCUMENT:
            d = handle_pdf(job, final_path, config, compressor)
        else:
            d = copy_passthrough(job, final_path)
        report_outcome(d)
        descriptors.append(d)

    summary = summarize(descriptors)
    log_summary(summary, descriptors, time.perf_counter() - t0, config.output_dir)
    if config.report_path is not None:
        report_path = save_report(config.report_path, descriptors, summary)
        log.info("Report written to %s", report_path)
    return descriptors


def main(argv: Optional[list[str]] = None) -> None:
    """Run the full pipeline."""
    args = parse_args(argv)
    if not args.new_name:
        print("Please provide a new name. Example: pagepress HM_12", file=sys.stderr)
        sys.exit(1)

    _setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = config_from_args(args)
        run_pipeline(args.new_name, config)
    except (ValueError, FileNotFoundError) as exc:
        log.error("%s", exc)
        sys.exit(1)
