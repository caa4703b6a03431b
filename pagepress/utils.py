"""Cross-cutting helpers: constants, path utilities, output preparation."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_INPUT_DIR = Path("input")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_CONCURRENCY = 6
DEFAULT_QUALITY = 75
DEFAULT_PDF_PRESET = "/ebook"
DEFAULT_PDF_TIMEOUT_S = 600.0
PDF_COMPRESS_THRESHOLD = 15 * 1024 * 1024
MIN_PADDING_WIDTH = 3

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp"})
PDF_EXTENSION = ".pdf"
OUTPUT_IMAGE_EXTENSION = ".webp"
PDF_PRESETS = ("/screen", "/ebook", "/printer", "/prepress", "/default")


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def is_image_file(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def human_size(num_bytes: int) -> str:
    """Format a byte count as a short human-readable string."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{int(size)} B" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024


def prepare_output_dir(output_dir: Path, input_dir: Path | None = None) -> Path:
    """Wipe *output_dir* recursively and recreate it empty.

    DESTRUCTIVE: any previous output under *output_dir* is deleted without
    confirmation, so that re-runs always start from a clean slate.

    Raises:
        ValueError: if *output_dir* is *input_dir*, one of its ancestors or
            lies inside it.
    """
    if input_dir is not None:
        out = output_dir.resolve()
        inp = input_dir.resolve()
        if out == inp or out in inp.parents or inp in out.parents:
            raise ValueError(
                f"Refusing to use {output_dir}: it overlaps the input folder {input_dir}"
            )

    if output_dir.exists():
        log.info("Cleaning output folder: %s", output_dir)
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    log.debug("Output folder ready: %s", output_dir)
    return output_dir


def ensure_page_dir(output_dir: Path, base_name: str) -> Path:
    """Create and return ``<output_dir>/<base_name>`` for renamed pages."""
    page_dir = output_dir / base_name
    page_dir.mkdir(parents=True, exist_ok=True)
    return page_dir
