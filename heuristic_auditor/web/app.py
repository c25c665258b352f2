"""
Flask web application for the heuristic auditor.

Exposes the evaluation pipeline as a JSON API. Fatal errors come back as
a structured error object, never as a partial result.
"""

import asyncio
from typing import Callable, Optional

from flask import Flask, request, jsonify

from .. import __version__
from ..analyzer.heuristics import ALL_HEURISTICS, parse_selection
from ..analyzer.pipeline import HeuristicPipeline
from ..capture.downloader import resolve_screenshot
from ..capture.page import CapturedPage
from ..capture.renderer import PageCapture
from ..exceptions import (
    AuditorError,
    CaptureError,
    InvalidInputError,
    PipelineTimeoutError,
)
from ..utils.config import Settings
from ..utils.log import get_logger


def _error(exc: AuditorError, status: int):
    return jsonify({'error': exc.to_dict()}), status


def _status_for(exc: AuditorError) -> int:
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, CaptureError):
        return 502
    if isinstance(exc, PipelineTimeoutError):
        return 504
    return 500


def create_app(
    settings: Optional[Settings] = None,
    pipeline_factory: Optional[Callable[[], HeuristicPipeline]] = None,
    capture_factory: Optional[Callable[[], PageCapture]] = None
):
    """
    Create and configure the Flask application.

    Args:
        settings: Settings (loaded from the environment when None)
        pipeline_factory: Builds the pipeline for each request
        capture_factory: Builds the page capture used for live requests
    """
    app = Flask(__name__)
    logger = get_logger("web")

    settings = settings or Settings.from_env()
    app.config['AUDITOR_SETTINGS'] = settings
    app.config['PIPELINE_FACTORY'] = pipeline_factory or (
        lambda: HeuristicPipeline.from_settings(settings)
    )
    app.config['CAPTURE_FACTORY'] = capture_factory or (
        lambda: PageCapture(timeout=settings.capture_timeout)
    )

    async def _build_page(data: dict, url: str) -> CapturedPage:
        if data.get('html') is not None:
            screenshot = await resolve_screenshot(data.get('screenshot'))
            metadata = {'title': data['title']} if data.get('title') else {}
            return CapturedPage.from_payload(
                url, data['html'], data.get('markdown'), screenshot, metadata
            )
        async with app.config['CAPTURE_FACTORY']() as capture:
            return await capture.capture(url)

    async def _evaluate(data: dict, url: str, heuristics):
        page = await _build_page(data, url)
        pipeline = app.config['PIPELINE_FACTORY']()
        return await pipeline.run(page, heuristics)

    @app.route('/api/evaluate', methods=['POST'])
    def evaluate_page():
        """Evaluate a page, captured live or supplied pre-captured."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error(InvalidInputError('No JSON data provided'), 400)

        try:
            url = (data.get('url') or '').strip()
            if not url:
                raise InvalidInputError('URL is required')
            heuristics = parse_selection(data.get('heuristics', 'all'))
            result = asyncio.run(_evaluate(data, url, heuristics))
        except AuditorError as e:
            status = _status_for(e)
            logger.warning(f"Evaluation request failed ({status}): {e}")
            return _error(e, status)

        return jsonify(result.to_dict())

    @app.route('/api/heuristics')
    def list_heuristics():
        """List the heuristic catalogue."""
        return jsonify({'heuristics': [
            {
                'id': h.id,
                'number': h.number,
                'title': h.title,
                'displayName': h.display_name,
                'weight': h.weight,
                'description': h.description,
            }
            for h in ALL_HEURISTICS
        ]})

    @app.route('/api/health')
    def health():
        return jsonify({'status': 'ok', 'version': __version__})

    return app


def run_app(host: str = '127.0.0.1', port: int = 5000, debug: bool = False):
    """Run the Flask web application."""
    app = create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == '__main__':
    run_app()
