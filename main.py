"""
LatexAI — Command Line Entry Point
==================================
    serve      Run the FastAPI backend with uvicorn
    compile    Compile a LaTeX body to PDF with the editor's preamble
    classify   Print the math-mode context at a cursor offset

Usage
-----
    python main.py serve --port 3001
    python main.py compile notes.tex -o notes.pdf
    python main.py classify notes.tex --cursor 120
"""

from __future__ import annotations

import argparse
import base64
import json
import sys
from dataclasses import asdict
from pathlib import Path

from latexai import config
from latexai.compiler import CompilationError, compile_latex
from latexai.math_context import classify


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    print(f"🚀 LatexAI backend on http://{args.host}:{args.port} (model: {config.get_model()})")
    uvicorn.run("server.api:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _compile(args: argparse.Namespace) -> int:
    source = Path(args.source)
    if not source.exists():
        print(f"❌ File not found: {source}")
        return 1

    output = Path(args.output) if args.output else source.with_suffix(".pdf")
    try:
        pdf_base64 = compile_latex(source.read_text(encoding="utf-8"))
    except CompilationError as e:
        print(f"❌ Failed to compile document: {e}")
        return 1

    output.write_bytes(base64.b64decode(pdf_base64))
    print(f"✅ PDF written: {output}")
    return 0


def _classify(args: argparse.Namespace) -> int:
    source = Path(args.source)
    if not source.exists():
        print(f"❌ File not found: {source}")
        return 1

    text = source.read_text(encoding="utf-8")
    cursor = len(text) if args.cursor is None else args.cursor
    print(json.dumps(asdict(classify(text, cursor)), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LatexAI editor backend")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=config.HOST)
    serve.add_argument("--port", type=int, default=config.PORT)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_serve)

    comp = sub.add_parser("compile", help="Compile a LaTeX body to PDF")
    comp.add_argument("source", help="File holding the document body")
    comp.add_argument("-o", "--output", default=None, help="Output PDF path")
    comp.set_defaults(func=_compile)

    cls = sub.add_parser("classify", help="Show math-mode context at a cursor")
    cls.add_argument("source", help="LaTeX file")
    cls.add_argument("--cursor", type=int, default=None, help="Offset (default: end)")
    cls.set_defaults(func=_classify)

    return parser


# ──────────────────────────────────────────────
# CLI ENTRY POINT
# ──────────────────────────────────────────────
if __name__ == "__main__":
    args = build_parser().parse_args()
    sys.exit(args.func(args))
