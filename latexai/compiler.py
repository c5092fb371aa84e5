"""
LatexAI — PDF Compiler
======================
Wraps editor content in a fixed article preamble and shells out to
``pdflatex`` (or ``LATEX_COMPILER``) inside a throwaway temp directory.

Compiler output is not parsed: the presence of a non-empty
``document.pdf`` is the only success signal. The temp directory is removed
on every path.
"""

from __future__ import annotations

import base64
import shutil
import subprocess
import tempfile
import time
from pathlib import Path

from latexai import config

DOCUMENT_PREAMBLE = r"""\documentclass{article}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage{amsfonts}
\usepackage{graphicx}
\usepackage{hyperref}
\begin{document}
"""
DOCUMENT_END = "\n\\end{document}\n"


class CompilationError(RuntimeError):
    """The compiler could not be run or produced no PDF."""


def wrap_document(content: str) -> str:
    """Return a complete ``.tex`` source with ``content`` as the body."""
    return DOCUMENT_PREAMBLE + content + DOCUMENT_END


def build_command(tex_file: Path, output_dir: Path) -> list[str]:
    return [
        config.LATEX_COMPILER,
        "-interaction=nonstopmode",
        f"-output-directory={output_dir}",
        str(tex_file),
    ]


def compile_latex(content: str) -> str:
    """
    Compile ``content`` to PDF and return it base64-encoded.

    Raises
    ------
    CompilationError
        If the compiler is missing, times out, or leaves no PDF behind.
    """
    tmp_dir = Path(tempfile.mkdtemp(prefix="latex-"))
    tex_file = tmp_dir / "document.tex"
    pdf_file = tmp_dir / "document.pdf"

    try:
        tex_file.write_text(wrap_document(content), encoding="utf-8")

        start_compile = time.time()
        try:
            subprocess.run(
                build_command(tex_file, tmp_dir),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=config.COMPILE_TIMEOUT,
                cwd=str(tmp_dir),
            )
        except subprocess.TimeoutExpired as e:
            raise CompilationError(
                f"{config.LATEX_COMPILER} timed out after {config.COMPILE_TIMEOUT} seconds"
            ) from e
        except FileNotFoundError as e:
            raise CompilationError(
                f"{config.LATEX_COMPILER} not found. Please install a TeX distribution."
            ) from e

        if not pdf_file.exists() or pdf_file.stat().st_size == 0:
            raise CompilationError("PDF file was not created")

        pdf_bytes = pdf_file.read_bytes()
        print(
            f"[Compiler] ✅ PDF compiled ({len(pdf_bytes) / 1024:.1f} KB) "
            f"in {time.time() - start_compile:.2f}s"
        )
        return base64.b64encode(pdf_bytes).decode("ascii")

    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
