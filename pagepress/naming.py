"""Sequence-number extraction and output filename resolution."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional

from .models import (
    ConversionJob,
    Discriminator,
    JobKind,
    NamingPlan,
    Numbered,
    Unnumbered,
)
from .utils import MIN_PADDING_WIDTH, OUTPUT_IMAGE_EXTENSION

log = logging.getLogger(__name__)

_TRAILING_NUMBER_RE = re.compile(r"-?(\d+)$")


def extract_discriminator(filename: str) -> Discriminator:
    """Return the trailing number of *filename*'s stem, or the stem itself.

    ``"BHM-22-007.jpg"`` gives ``Numbered("007")``; ``"cover.png"`` gives
    ``Unnumbered("cover")``.
    """
    stem = Path(filename).stem
    m = _TRAILING_NUMBER_RE.search(stem)
    if m:
        return Numbered(m.group(1))
    return Unnumbered(stem)


def padding_width(discriminators: Iterable[Discriminator]) -> int:
    """Widest numeric discriminator, never less than ``MIN_PADDING_WIDTH``."""
    widths = [len(d.digits) for d in discriminators if isinstance(d, Numbered)]
    return max([MIN_PADDING_WIDTH, *widths])


def validate_base_name(base_name: str) -> str:
    if not base_name or not base_name.strip():
        raise ValueError("Base name must not be empty")
    if "/" in base_name or "\\" in base_name or base_name in (".", ".."):
        raise ValueError(f"Base name must be a plain file name: {base_name!r}")
    return base_name


def build_naming_plan(base_name: str, jobs: Iterable[ConversionJob]) -> NamingPlan:
    """Compute the plan shared by every output of one run."""
    validate_base_name(base_name)
    discriminators = [j.discriminator for j in jobs if j.discriminator is not None]
    unnumbered = [d.name for d in discriminators if isinstance(d, Unnumbered)]
    if unnumbered:
        log.warning(
            "%s page(s) have no trailing number and keep their name: %s",
            len(unnumbered),
            ", ".join(unnumbered),
        )
    plan = NamingPlan(base_name=base_name, padding_width=padding_width(discriminators))
    log.debug("Naming plan: base=%s width=%s", plan.base_name, plan.padding_width)
    return plan


def final_path_for(job: ConversionJob, plan: NamingPlan, output_dir: Path) -> Path:
    """Destination of *job* once renamed."""
    if job.kind is JobKind.PAGE_IMAGE:
        if job.discriminator is None:
            raise ValueError(f"Page image without discriminator: {job.source_path}")
        return output_dir / plan.base_name / plan.page_filename(job.discriminator)
    if job.kind is JobKind.MAIN_IMAGE:
        return output_dir / plan.main_image_filename()
    if job.kind is JobKind.PDF_DOCUMENT:
        return output_dir / plan.pdf_filename()
    return output_dir / plan.passthrough_filename(job.source_path.suffix)


def intermediate_path(job: ConversionJob, final_path: Path) -> Optional[Path]:
    """Where the optimizer writes *job*'s image before it is renamed.

    Only page and main images go through the optimizer; other kinds have none.
    """
    if job.kind in (JobKind.PAGE_IMAGE, JobKind.MAIN_IMAGE):
        return final_path.parent / f"{job.source_path.stem}{OUTPUT_IMAGE_EXTENSION}"
    return None


def find_collisions(
    targets: dict[ConversionJob, Path],
    reserved: Iterable[Path] = (),
) -> dict[Path, list[ConversionJob]]:
    """Group jobs that would write to the same path.

    A job claims its final path and, for optimized images, its intermediate
    path. Any path claimed by two jobs, or any *reserved* path claimed at all,
    is a collision. Paths are compared case-insensitively so the result holds
    on case-insensitive filesystems too.
    """
    groups: dict[str, list[ConversionJob]] = defaultdict(list)
    first_path: dict[str, Path] = {}
    for job, path in targets.items():
        claimed = {str(path).casefold(): path}
        temp = intermediate_path(job, path)
        if temp is not None:
            claimed.setdefault(str(temp).casefold(), temp)
        for key, claimed_path in claimed.items():
            groups[key].append(job)
            first_path.setdefault(key, claimed_path)

    reserved_keys = set()
    for path in reserved:
        key = str(path).casefold()
        reserved_keys.add(key)
        first_path[key] = path

    return {
        first_path[key]: jobs
        for key, jobs in groups.items()
        if len(jobs) > 1 or key in reserved_keys
    }
