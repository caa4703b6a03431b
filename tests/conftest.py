"""Shared fixtures for the pagepress test suite.

Input trees are built on the fly in ``tmp_path`` with small real images.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

import pytest

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)
log = logging.getLogger("conftest")


@pytest.fixture
def make_image() -> Callable[..., Path]:
    """Return a factory writing a small solid-colour image to *path*."""
    from PIL import Image

    def _make(path: Path, color=(200, 30, 30), size=(24, 16), mode: str = "RGB") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if mode == "RGBA" and len(color) == 3:
            color = (*color, 128)
        img = Image.new(mode, size, color)
        fmt = "JPEG" if path.suffix.lower() in (".jpg", ".jpeg") else None
        img.save(path, fmt)
        return path

    return _make


@pytest.fixture
def input_tree(tmp_path: Path, make_image) -> Path:
    """Typical input folder: a page folder, cover, small PDF and a text file."""
    root = tmp_path / "input"
    pages = root / "BHM-22"
    make_image(pages / "BHM-22-001.jpg", color=(10, 20, 30))
    make_image(pages / "BHM-22-002.png", color=(40, 50, 60))
    make_image(pages / "BHM-22-010.jpeg", color=(70, 80, 90))
    (pages / "Thumbs.db").write_bytes(b"\x00\x01")
    make_image(root / "BHM-22.png", color=(5, 150, 5), size=(32, 48))
    (root / "BHM-22.pdf").write_bytes(b"%PDF-1.4\n% small sample\n%%EOF\n")
    (root / "BHM-22.txt").write_text("credits", encoding="utf-8")
    log.info("input_tree built at %s", root)
    return root


@pytest.fixture
def tmp_output(tmp_path: Path) -> Path:
    """Return a temporary output directory for a single test."""
    return tmp_path / "output"


@pytest.fixture
def fake_optimizer():
    """Optimizer stand-in that writes a stub ``<stem>.webp`` and records calls."""
    from pagepress import Optimized

    calls: list[Path] = []

    def _optimize(source: Path, destination_dir: Path, quality: int):
        calls.append(source)
        (destination_dir / f"{source.stem}.webp").write_bytes(
            b"RIFF" + source.name.encode("utf-8")
        )
        return Optimized(1)

    _optimize.calls = calls
    return _optimize


@pytest.fixture
def failing_compressor():
    calls: list[tuple] = []

    def _compress(input_path, output_path, preset, timeout):
        calls.append((input_path, output_path, preset, timeout))
        output_path.write_bytes(b"partial")
        return False, "Ghostscript exit code 1: boom"

    _compress.calls = calls
    return _compress
