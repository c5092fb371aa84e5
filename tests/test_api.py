import base64
import subprocess
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from latexai import compiler
from server.api import app


@pytest.fixture
def client():
    return TestClient(app)


def test_latex_suggestion_contract(client, fake_llm):
    fake_llm.reply = "x > 0."
    text = "Error occurs when "
    cursor = len("Error occurs when")
    resp = client.post("/api/latex-suggestion", json={"text": text, "cursorPosition": cursor})
    assert resp.status_code == 200
    assert resp.json() == {
        "suggestion": " $x > 0.$",
        "textAtRequest": text,
        "cursorAtRequest": cursor,
    }


def test_latex_suggestion_degrades_on_model_error(client, fake_llm):
    fake_llm.error = RuntimeError("upstream down")
    resp = client.post("/api/latex-suggestion", json={"text": "abc", "cursorPosition": 3})
    assert resp.status_code == 200
    assert resp.json()["suggestion"] == ""


def test_edit_suggestion(client, fake_llm):
    fake_llm.reply = "The integral $\\int_0^1 x\\,dx$ equals one half."
    resp = client.post(
        "/api/edit-suggestion",
        json={
            "selectedText": "the integral is half",
            "query": "use math",
            "contextBefore": "Note: ",
            "contextAfter": "",
        },
    )
    assert resp.status_code == 200
    assert resp.json() == {"suggestion": "The integral $\\int_0^1 x\\,dx$ equals one half."}


def test_edit_suggestion_returns_original_on_error(client, fake_llm):
    fake_llm.error = RuntimeError("boom")
    resp = client.post(
        "/api/edit-suggestion",
        json={"selectedText": "keep me", "query": "q", "contextBefore": "", "contextAfter": ""},
    )
    assert resp.json() == {"suggestion": "keep me"}


def test_latex_query(client, fake_llm):
    fake_llm.reply = "It is an article."
    resp = client.post("/api/latex-query", json={"query": "what?", "content": "doc"})
    assert resp.json() == {"response": "It is an article."}


def test_latex_query_fallback(client, fake_llm):
    fake_llm.error = RuntimeError("boom")
    resp = client.post("/api/latex-query", json={"query": "what?", "content": "doc"})
    assert resp.json() == {"response": "Failed to get response"}


def test_latex_query_stream_fallback(client, fake_llm):
    fake_llm.error = RuntimeError("boom")
    resp = client.post("/api/latex-query/stream", json={"query": "what?", "content": "doc"})
    assert resp.status_code == 200
    assert "Failed to get response" in resp.text
    assert "event: done" in resp.text


def test_missing_field_is_rejected(client):
    resp = client.post("/api/latex-suggestion", json={"text": "abc"})
    assert resp.status_code == 422


def _record_dirs(monkeypatch, produce_pdf):
    dirs = []

    def _run(cmd, **kwargs):
        flag = next(arg for arg in cmd if arg.startswith("-output-directory="))
        out_dir = Path(flag.split("=", 1)[1])
        dirs.append(out_dir)
        if produce_pdf:
            (out_dir / "document.pdf").write_bytes(b"%PDF-1.5 ok")
        return subprocess.CompletedProcess(cmd, 0 if produce_pdf else 1, "", "")

    monkeypatch.setattr(compiler.subprocess, "run", _run)
    return dirs


def test_compile_success(client, monkeypatch):
    dirs = _record_dirs(monkeypatch, produce_pdf=True)
    resp = client.post("/api/compile", json={"content": "Hello"})
    assert resp.status_code == 200
    assert base64.b64decode(resp.json()["pdf"]) == b"%PDF-1.5 ok"
    assert not dirs[0].exists()


def test_compile_failure_returns_500_and_removes_temp_dir(client, monkeypatch):
    dirs = _record_dirs(monkeypatch, produce_pdf=False)
    resp = client.post("/api/compile", json={"content": "\\begin{broken"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to compile document"}
    assert not dirs[0].exists()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.json()["status"] == "ok"
