"""Scanned-page optimizer: WebP pages, compressed PDF, renumbered names.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from pagepress import X`` works.
"""

from .conversion import (
    convert_main_image,
    convert_pages,
    convert_pages_async,
    copy_passthrough,
    optimize_and_rename,
    optimize_image,
)
from .models import (
    ConversionJob,
    DiscoveredInputs,
    JobKind,
    JobStatus,
    NamingPlan,
    Numbered,
    OptimizeFailed,
    Optimized,
    OutputDescriptor,
    RunConfig,
    RunSummary,
    Unnumbered,
)
from .naming import (
    build_naming_plan,
    extract_discriminator,
    final_path_for,
    find_collisions,
    intermediate_path,
    padding_width,
)
from .pdf import compress_pdf, get_ghostscript_command, handle_pdf
from .reporting import log_summary, report_outcome, save_report, summarize
from .sources import classify_root_file, discover_inputs, list_page_images
from .utils import (
    DEFAULT_CONCURRENCY,
    DEFAULT_QUALITY,
    IMAGE_EXTENSIONS,
    PDF_COMPRESS_THRESHOLD,
    ensure_page_dir,
    human_size,
    prepare_output_dir,
)

__all__ = [
    # Models
    "ConversionJob",
    "DiscoveredInputs",
    "JobKind",
    "JobStatus",
    "NamingPlan",
    "Numbered",
    "Unnumbered",
    "Optimized",
    "OptimizeFailed",
    "OutputDescriptor",
    "RunConfig",
    "RunSummary",
    # Constants
    "DEFAULT_CONCURRENCY",
    "DEFAULT_QUALITY",
    "IMAGE_EXTENSIONS",
    "PDF_COMPRESS_THRESHOLD",
    # Utils
    "prepare_output_dir",
    "ensure_page_dir",
    "human_size",
    # Sources
    "discover_inputs",
    "list_page_images",
    "classify_root_file",
    # Naming
    "extract_discriminator",
    "padding_width",
    "build_naming_plan",
    "final_path_for",
    "find_collisions",
    "intermediate_path",
    # Conversion
    "optimize_image",
    "optimize_and_rename",
    "convert_pages",
    "convert_pages_async",
    "convert_main_image",
    "copy_passthrough",
    # PDF
    "get_ghostscript_command",
    "compress_pdf",
    "handle_pdf",
    # Reporting
    "report_outcome",
    "summarize",
    "log_summary",
    "save_report",
]
