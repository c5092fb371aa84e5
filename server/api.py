"""
LatexAI — FastAPI Backend Server
================================
REST + SSE API behind the browser editor. Allows frontend clients to:
  - Fetch math-aware inline autocompletions
  - Rewrite a selected span of the document
  - Ask questions about the document (blocking or streamed)
  - Compile the document to PDF

Run with:
    uvicorn server.api:app --host 0.0.0.0 --port 3001 --reload

Endpoints:
    POST   /api/latex-suggestion      → Inline autocompletion
    POST   /api/edit-suggestion       → Selection rewrite
    POST   /api/latex-query           → Document Q&A
    POST   /api/latex-query/stream    → Document Q&A as SSE deltas
    POST   /api/compile               → Base64 PDF
    GET    /api/health                → Liveness + configured model
"""

from __future__ import annotations

import json

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from latexai import assistant, config
from latexai.compiler import CompilationError, compile_latex

app = FastAPI(
    title="LatexAI API",
    description="AI-assisted LaTeX editing backend",
    version="1.0.0",
)


# ──────────────────────────────────────────────
# CORS — Allow the editor dev server
# ──────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ──────────────────────────────────────────────
# REQUEST BODIES (camelCase, as sent by the editor)
# ──────────────────────────────────────────────
class SuggestionRequest(BaseModel):
    text: str
    cursorPosition: int


class EditRequest(BaseModel):
    selectedText: str
    query: str
    contextBefore: str = ""
    contextAfter: str = ""


class QueryRequest(BaseModel):
    query: str
    content: str


class CompileRequest(BaseModel):
    content: str


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


# ──────────────────────────────────────────────
# POST /api/latex-suggestion — Autocomplete
# ──────────────────────────────────────────────
@app.post("/api/latex-suggestion")
async def latex_suggestion(body: SuggestionRequest):
    """
    Returns { suggestion, textAtRequest, cursorAtRequest }.
    The echoed text and cursor let the client drop stale responses.
    """
    try:
        result = await assistant.get_latex_suggestion(body.text, body.cursorPosition)
    except Exception as e:
        print(f"[API] ❌ Error getting suggestion: {e}")
        return _error("Failed to get suggestion")
    return result.to_wire()


# ──────────────────────────────────────────────
# POST /api/edit-suggestion — Selection Rewrite
# ──────────────────────────────────────────────
@app.post("/api/edit-suggestion")
async def edit_suggestion(body: EditRequest):
    try:
        suggestion = await assistant.get_edit_suggestion(
            body.selectedText, body.query, body.contextBefore, body.contextAfter
        )
    except Exception as e:
        print(f"[API] ❌ Error getting edit suggestion: {e}")
        return _error("Failed to get suggestion")
    return {"suggestion": suggestion}


# ──────────────────────────────────────────────
# POST /api/latex-query — Document Q&A
# ──────────────────────────────────────────────
@app.post("/api/latex-query")
async def latex_query(body: QueryRequest):
    try:
        response = await assistant.answer_query(body.query, body.content)
    except Exception as e:
        print(f"[API] ❌ Error answering query: {e}")
        return _error("Failed to get response")
    return {"response": response}


@app.post("/api/latex-query/stream")
async def latex_query_stream(body: QueryRequest) -> EventSourceResponse:
    """
    Server-Sent Events stream of the answer.
    Events: message { delta } ... then done {}.
    """

    async def event_generator():
        async for delta in assistant.stream_query(body.query, body.content):
            yield {"event": "message", "data": json.dumps({"delta": delta})}
        yield {"event": "done", "data": "{}"}

    return EventSourceResponse(event_generator())


# ──────────────────────────────────────────────
# POST /api/compile — PDF Compilation
# ──────────────────────────────────────────────
@app.post("/api/compile")
async def compile_document(body: CompileRequest):
    """Returns { pdf: base64 } or 500 { error } when no PDF was produced."""
    try:
        pdf_base64 = await run_in_threadpool(compile_latex, body.content)
    except (CompilationError, OSError) as e:
        print(f"[API] ❌ Compilation error: {e}")
        return _error("Failed to compile document")
    return {"pdf": pdf_base64}


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "model": config.get_model()}
