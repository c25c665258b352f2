import asyncio
import json

import pytest

from fakes import FakeModelClient, SAMPLE_HTML, png_bytes
from heuristic_auditor import main as cli
from heuristic_auditor.analyzer.pipeline import HeuristicPipeline
from heuristic_auditor.utils.retry import RetryPolicy

URL = "https://shop.example.com/checkout"


@pytest.fixture
def captured_files(tmp_path):
    html = tmp_path / "page.html"
    html.write_text(SAMPLE_HTML, encoding="utf-8")
    screenshot = tmp_path / "page.png"
    screenshot.write_bytes(png_bytes())
    return str(html), str(screenshot)


@pytest.fixture(autouse=True)
def fake_pipeline(monkeypatch):
    client = FakeModelClient(default_evaluation={
        "strengths": [{"description": "Clear order summary", "example": "Right column"}],
    })

    def from_settings(cls, settings=None, client_=None):
        return HeuristicPipeline(client, retry_policy=RetryPolicy.no_retry())

    monkeypatch.setattr(HeuristicPipeline, "from_settings", classmethod(from_settings))
    for name in ("AUDITOR_MAX_CONCURRENCY", "AUDITOR_PIPELINE_TIMEOUT", "AUDITOR_REJECT_TECHNICAL"):
        monkeypatch.delenv(name, raising=False)
    return client


def test_parse_arguments_defaults():
    args = cli.parse_arguments(["--url", URL])
    assert args.heuristics == "all"
    assert args.json_output is None
    assert not args.reject_technical


def test_precaptured_run_writes_json(captured_files, tmp_path, fake_pipeline):
    html, screenshot = captured_files
    output = tmp_path / "out" / "result.json"

    code = asyncio.run(cli.main([
        "--url", URL, "--html", html, "--screenshot", screenshot,
        "--heuristics", "visibility,consistency", "--json", str(output),
    ]))

    assert code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["overallScore"] == 80
    assert data["metadata"]["heuristicsEvaluated"] == 2
    assert len(fake_pipeline.evaluation_calls) == 2


def test_html_without_screenshot_fails(captured_files, fake_pipeline):
    html, _ = captured_files
    assert asyncio.run(cli.main(["--url", URL, "--html", html, "-q"])) == 1
    assert fake_pipeline.visual_calls == 0


def test_unknown_heuristic_fails(captured_files, fake_pipeline):
    html, screenshot = captured_files
    code = asyncio.run(cli.main([
        "--url", URL, "--html", html, "--screenshot", screenshot, "--heuristics", "speed", "-q",
    ]))
    assert code == 1
    assert fake_pipeline.evaluation_calls == []


def test_unreadable_file_fails(tmp_path, captured_files):
    _, screenshot = captured_files
    missing = str(tmp_path / "missing.html")
    assert asyncio.run(cli.main(["--url", URL, "--html", missing, "--screenshot", screenshot, "-q"])) == 1
