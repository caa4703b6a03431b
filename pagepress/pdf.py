"""PDF size check, Ghostscript compression and copy fallback."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Optional

from .models import ConversionJob, JobStatus, OutputDescriptor, RunConfig
from .utils import human_size

log = logging.getLogger(__name__)

PdfCompressor = Callable[[Path, Path, str, Optional[float]], tuple[bool, str]]


def get_ghostscript_command() -> Optional[str]:
    """Get Ghostscript binary name for current platform."""
    for name in ("gs", "gswin64c", "gswin32c"):
        if shutil.which(name):
            return name
    return None


def compress_pdf(
    input_path: Path,
    output_path: Path,
    preset: str = "/ebook",
    timeout: Optional[float] = None,
) -> tuple[bool, str]:
    """Compress *input_path* into *output_path* with Ghostscript.

    Args:
        input_path: Source PDF.
        output_path: Destination for the compressed PDF.
        preset: ``-dPDFSETTINGS`` value, e.g. ``/ebook``.
        timeout: Seconds to wait for Ghostscript; ``None`` waits forever.

    Returns:
        (success, message) tuple.
    """
    gs_cmd = get_ghostscript_command()
    if not gs_cmd:
        return False, "Ghostscript not installed"

    cmd = [
        gs_cmd,
        "-sDEVICE=pdfwrite",
        "-dCompatibilityLevel=1.4",
        f"-dPDFSETTINGS={preset}",
        "-dNOPAUSE",
        "-dQUIET",
        "-dBATCH",
        f"-sOutputFile={output_path}",
        str(input_path),
    ]
    log.debug("Running: %s", " ".join(cmd))

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return False, f"Ghostscript timed out after {timeout}s"
    except OSError as exc:
        return False, f"Ghostscript could not start: {exc}"

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        log.debug("Ghostscript stderr for %s:\n%s", input_path.name, stderr)
        return False, f"Ghostscript exit code {result.returncode}: {stderr[:200]}"

    if not output_path.exists():
        return False, "Output file not created"

    return True, "compressed"


def _copy(
    job: ConversionJob,
    final_path: Path,
    descriptor: OutputDescriptor,
    detail: str,
) -> OutputDescriptor:
    try:
        shutil.copy2(job.source_path, final_path)
    except OSError as exc:
        descriptor.status = JobStatus.FAILED
        descriptor.detail = f"copy failed: {exc}"
        return descriptor
    descriptor.status = JobStatus.SUCCESS
    descriptor.detail = detail
    return descriptor


def handle_pdf(
    job: ConversionJob,
    final_path: Path,
    config: RunConfig,
    compressor: PdfCompressor = compress_pdf,
) -> OutputDescriptor:
    """Compress a large PDF, copy a small one, and copy on compression failure.

    Never raises; the compressor being unavailable only degrades to a copy.
    """
    descriptor = OutputDescriptor(
        source_path=job.source_path, kind=job.kind, final_path=final_path
    )

    try:
        size = job.source_path.stat().st_size
    except OSError as exc:
        descriptor.status = JobStatus.FAILED
        descriptor.detail = f"cannot read PDF: {exc}"
        return descriptor

    if size < config.pdf_threshold_bytes:
        log.info(
            "PDF %s is %s, below %s; copying without compression",
            job.source_path.name,
            human_size(size),
            human_size(config.pdf_threshold_bytes),
        )
        return _copy(job, final_path, descriptor, "copied")

    log.info(
        "Compressing PDF %s (%s) with %s ...",
        job.source_path.name,
        human_size(size),
        config.pdf_preset,
    )
    try:
        ok, message = compressor(
            job.source_path, final_path, config.pdf_preset, config.pdf_timeout_s
        )
    except Exception as exc:
        log.exception("Compressor raised for %s", job.source_path.name)
        ok, message = False, str(exc)

    if ok and not final_path.exists():
        ok, message = False, "compressor reported success but wrote no file"

    if ok:
        new_size = final_path.stat().st_size
        descriptor.status = JobStatus.SUCCESS
        descriptor.detail = f"compressed {human_size(size)} -> {human_size(new_size)}"
        return descriptor

    log.warning("Compression failed for %s (%s); copying original", job.source_path.name, message)
    final_path.unlink(missing_ok=True)
    return _copy(job, final_path, descriptor, f"copied (compression failed: {message})")
