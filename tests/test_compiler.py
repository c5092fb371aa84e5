import base64
import subprocess
from pathlib import Path

import pytest

from latexai import compiler
from latexai.compiler import CompilationError, compile_latex, wrap_document


def _output_dir(cmd):
    flag = next(arg for arg in cmd if arg.startswith("-output-directory="))
    return Path(flag.split("=", 1)[1])


@pytest.fixture
def fake_run(monkeypatch):
    """Stand-in for the TeX binary; records each invocation."""
    calls = []

    def install(produce_pdf=True, error=None):
        def _run(cmd, **kwargs):
            out_dir = _output_dir(cmd)
            calls.append({"cmd": cmd, "dir": out_dir, "tex": (out_dir / "document.tex").read_text()})
            if error is not None:
                raise error
            if produce_pdf:
                (out_dir / "document.pdf").write_bytes(b"%PDF-1.5 fake")
            return subprocess.CompletedProcess(cmd, 0 if produce_pdf else 1, "", "")

        monkeypatch.setattr(compiler.subprocess, "run", _run)
        return calls

    return install


def test_wrap_document_has_fixed_preamble():
    source = wrap_document("Hello $x$")
    assert source.startswith("\\documentclass{article}\n")
    for package in ("amsmath", "amssymb", "amsfonts", "graphicx", "hyperref"):
        assert f"\\usepackage{{{package}}}" in source
    assert "\\begin{document}\nHello $x$\n\\end{document}" in source


def test_compile_success_returns_base64_and_cleans_up(fake_run):
    calls = fake_run(produce_pdf=True)
    pdf = compile_latex("Hello")
    assert base64.b64decode(pdf) == b"%PDF-1.5 fake"

    call = calls[0]
    assert call["cmd"][0] == compiler.config.LATEX_COMPILER
    assert "-interaction=nonstopmode" in call["cmd"]
    assert call["cmd"][-1] == str(call["dir"] / "document.tex")
    assert "Hello" in call["tex"]
    assert not call["dir"].exists()


def test_missing_pdf_raises_and_cleans_up(fake_run):
    calls = fake_run(produce_pdf=False)
    with pytest.raises(CompilationError):
        compile_latex("\\badcommand{")
    assert not calls[0]["dir"].exists()


def test_missing_compiler_raises(fake_run):
    calls = fake_run(error=FileNotFoundError("pdflatex"))
    with pytest.raises(CompilationError, match="not found"):
        compile_latex("Hello")
    assert not calls[0]["dir"].exists()


def test_timeout_raises(fake_run):
    calls = fake_run(error=subprocess.TimeoutExpired("pdflatex", 1))
    with pytest.raises(CompilationError, match="timed out"):
        compile_latex("Hello")
    assert not calls[0]["dir"].exists()


def test_each_compile_gets_its_own_directory(fake_run):
    calls = fake_run(produce_pdf=True)
    compile_latex("one")
    compile_latex("two")
    assert calls[0]["dir"] != calls[1]["dir"]
