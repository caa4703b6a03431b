"""Per-item outcome logging, run summary and the optional JSON report."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from .models import JobStatus, OutputDescriptor, RunSummary

log = logging.getLogger(__name__)


def report_outcome(descriptor: OutputDescriptor) -> None:
    """Log one item at a level matching its status."""
    source = descriptor.source_path.name
    target = descriptor.final_path.name if descriptor.final_path else "-"
    if descriptor.status is JobStatus.SUCCESS:
        log.info("OK      %s -> %s (%s)", source, target, descriptor.detail)
    elif descriptor.status is JobStatus.SKIPPED:
        log.warning("SKIPPED %s (%s)", source, descriptor.detail)
    else:
        log.error("FAILED  %s -> %s (%s)", source, target, descriptor.detail)


def summarize(descriptors: Iterable[OutputDescriptor]) -> RunSummary:
    summary = RunSummary()
    for d in descriptors:
        summary.total += 1
        if d.status is JobStatus.SUCCESS:
            summary.succeeded += 1
        elif d.status is JobStatus.FAILED:
            summary.failed += 1
        else:
            summary.skipped += 1
    return summary


def log_summary(
    summary: RunSummary,
    descriptors: list[OutputDescriptor],
    elapsed_s: float,
    output_dir: Path,
) -> None:
    log.info("=" * 60)
    log.info("RUN COMPLETE")
    log.info("  Items:      %s", summary.total)
    log.info("  Succeeded:  %s", summary.succeeded)
    log.info("  Failed:     %s", summary.failed)
    log.info("  Skipped:    %s", summary.skipped)
    log.info("  Output dir: %s", output_dir)
    log.info("  Runtime:    %.1fs", elapsed_s)
    failed = [d for d in descriptors if d.status is JobStatus.FAILED]
    if failed:
        log.warning("Failed files:")
        for d in failed:
            log.warning("  - %s: %s", d.source_path.name, d.detail[:200])


def descriptor_to_dict(descriptor: OutputDescriptor) -> dict[str, Any]:
    return {
        "source": str(descriptor.source_path),
        "kind": descriptor.kind.value if descriptor.kind else None,
        "final_path": str(descriptor.final_path) if descriptor.final_path else None,
        "status": descriptor.status.value,
        "detail": descriptor.detail,
    }


def save_report(
    path: Path,
    descriptors: list[OutputDescriptor],
    summary: RunSummary,
) -> Path:
    """Write a JSON run report and return its path."""
    items = sorted(
        (descriptor_to_dict(d) for d in descriptors),
        key=lambda item: (item["source"], str(item["final_path"])),
    )
    report = {
        "summary": {
            "total": summary.total,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
            "skipped": summary.skipped,
        },
        "items": items,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2, ensure_ascii=False)
    return path
