"""Input discovery: the page folder and root-level files."""

from __future__ import annotations

import logging
from pathlib import Path

from .models import ConversionJob, DiscoveredInputs, JobKind
from .naming import extract_discriminator
from .utils import PDF_EXTENSION, is_hidden, is_image_file

log = logging.getLogger(__name__)


def classify_root_file(path: Path) -> JobKind:
    """Decide how a root-level file is handled, by extension."""
    if path.suffix.lower() == PDF_EXTENSION:
        return JobKind.PDF_DOCUMENT
    if is_image_file(path):
        return JobKind.MAIN_IMAGE
    return JobKind.PASSTHROUGH_FILE


def list_page_images(folder: Path) -> tuple[list[Path], list[Path]]:
    """Return (images, others) directly inside *folder*, sorted by name."""
    images: list[Path] = []
    others: list[Path] = []
    for entry in sorted(folder.iterdir()):
        if is_hidden(entry) or not entry.is_file():
            continue
        if is_image_file(entry):
            images.append(entry)
        else:
            others.append(entry)
    return images, others


def discover_inputs(input_dir: Path) -> DiscoveredInputs:
    """Scan *input_dir* and build the job list.

    The first subdirectory by name is the page folder; any further
    subdirectories are ignored with a warning. A missing page folder is not
    an error, the run then only handles root-level files.

    Raises:
        FileNotFoundError: if *input_dir* is not a directory.
    """
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Input folder not found: {input_dir}")

    entries = sorted(e for e in input_dir.iterdir() if not is_hidden(e))
    subfolders = [e for e in entries if e.is_dir()]
    root_files = [e for e in entries if e.is_file()]

    found = DiscoveredInputs()

    if subfolders:
        found.page_folder = subfolders[0]
        log.info("Processing page folder: %s", found.page_folder.name)
        if len(subfolders) > 1:
            log.warning(
                "Found %s subfolders; only %s is processed, ignoring: %s",
                len(subfolders),
                found.page_folder.name,
                ", ".join(f.name for f in subfolders[1:]),
            )
        images, others = list_page_images(found.page_folder)
        found.page_jobs = [
            ConversionJob(
                source_path=image,
                kind=JobKind.PAGE_IMAGE,
                discriminator=extract_discriminator(image.name),
            )
            for image in images
        ]
        found.ignored.extend(others)
    else:
        log.warning("No page folder found in %s; no inner images to process", input_dir)

    found.root_jobs = [
        ConversionJob(source_path=path, kind=classify_root_file(path))
        for path in root_files
    ]

    log.info(
        "Discovered %s page images, %s root files, %s ignored",
        len(found.page_jobs),
        len(found.root_jobs),
        len(found.ignored),
    )
    return found
