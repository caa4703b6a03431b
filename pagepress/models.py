"""Shared data models for the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .utils import (
    DEFAULT_CONCURRENCY,
    DEFAULT_INPUT_DIR,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PDF_PRESET,
    DEFAULT_PDF_TIMEOUT_S,
    DEFAULT_QUALITY,
    PDF_COMPRESS_THRESHOLD,
)


class JobKind(str, Enum):
    PAGE_IMAGE = "page_image"
    MAIN_IMAGE = "main_image"
    PDF_DOCUMENT = "pdf_document"
    PASSTHROUGH_FILE = "passthrough_file"


class JobStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Numbered:
    """Trailing digit run taken from a page filename, kept as written."""

    digits: str


@dataclass(frozen=True)
class Unnumbered:
    """Fallback discriminator: the filename stem itself."""

    name: str


Discriminator = Union[Numbered, Unnumbered]


@dataclass(frozen=True)
class Optimized:
    """The optimizer ran; *count* files were written (may be 0)."""

    count: int


@dataclass(frozen=True)
class OptimizeFailed:
    """The optimizer raised; *reason* carries the codec error."""

    reason: str


OptimizeResult = Union[Optimized, OptimizeFailed]


@dataclass(frozen=True)
class ConversionJob:
    """One discovered input file and how it should be handled."""

    source_path: Path
    kind: JobKind
    discriminator: Optional[Discriminator] = None


@dataclass(frozen=True)
class NamingPlan:
    """Base name plus zero-padding width shared by every output name."""

    base_name: str
    padding_width: int = 3

    def page_filename(self, discriminator: Discriminator) -> str:
        if isinstance(discriminator, Numbered):
            number = int(discriminator.digits)
            return f"{self.base_name}-{number:0{self.padding_width}d}.webp"
        return f"{self.base_name}-{discriminator.name}.webp"

    def main_image_filename(self) -> str:
        return f"{self.base_name}.webp"

    def pdf_filename(self) -> str:
        return f"{self.base_name}.pdf"

    def passthrough_filename(self, ext: str) -> str:
        return f"{self.base_name}{ext}"


@dataclass
class OutputDescriptor:
    """Tracks the outcome of a single job."""

    source_path: Path
    kind: Optional[JobKind]
    final_path: Optional[Path] = None
    status: JobStatus = JobStatus.SUCCESS
    detail: str = ""


@dataclass
class DiscoveredInputs:
    """Everything the discoverer found under the input root."""

    page_folder: Optional[Path] = None
    page_jobs: list[ConversionJob] = field(default_factory=list)
    root_jobs: list[ConversionJob] = field(default_factory=list)
    ignored: list[Path] = field(default_factory=list)


@dataclass
class RunSummary:
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class RunConfig:
    """Run-wide settings threaded through every pipeline stage."""

    input_dir: Path = DEFAULT_INPUT_DIR
    output_dir: Path = DEFAULT_OUTPUT_DIR
    concurrency: int = DEFAULT_CONCURRENCY
    quality: int = DEFAULT_QUALITY
    pdf_preset: str = DEFAULT_PDF_PRESET
    pdf_threshold_bytes: int = PDF_COMPRESS_THRESHOLD
    pdf_timeout_s: Optional[float] = DEFAULT_PDF_TIMEOUT_S
    show_progress: bool = True
    report_path: Optional[Path] = None
