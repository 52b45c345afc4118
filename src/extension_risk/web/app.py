"""
Chrome Extension Risk Analyzer - Web Interface
FastAPI backend exposing the analysis pipeline over HTTP
"""

import logging
from pathlib import Path

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
import uvicorn

from .. import __version__
from ..analyzer import AnalysisRun, ExtensionRiskAnalyzer, PipelineStage
from ..config import configure_logging, load_settings
from ..errors import InvalidInputError

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def create_app(analyzer=None):
    """
    Build the FastAPI application

    Args:
        analyzer (ExtensionRiskAnalyzer): Shared, stateless pipeline; built
            from the loaded settings when omitted
    """
    app = FastAPI(
        title="Chrome Extension Risk Analyzer",
        description="Score Chrome extensions for security and privacy risk",
        version=__version__,
    )
    app.state.analyzer = analyzer or ExtensionRiskAnalyzer()

    @app.get("/", response_class=HTMLResponse)
    async def home(request: Request):
        """Render the home page with analysis form"""
        return templates.TemplateResponse(request, "index.html")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/analyze-extension")
    async def analyze_extension(extensionUrl: str = Form("")):
        """Download and score an extension given its store URL or ID"""
        run = AnalysisRun()
        try:
            report = await app.state.analyzer.analyze(extensionUrl, run=run)
        except InvalidInputError:
            return PlainTextResponse("Invalid or disallowed extension URL", status_code=400)
        except Exception:
            logger.exception("Analysis of %r failed at stage %s", extensionUrl, run.stage.value)
            return PlainTextResponse("Failed to analyze extension", status_code=500)

        response = JSONResponse(report)
        run.advance(PipelineStage.RESPONDED)
        return response

    return app


def main():
    settings = load_settings()
    configure_logging(settings.log_level)

    logger.info("Starting server at http://%s:%s", settings.host, settings.port)
    uvicorn.run(create_app(ExtensionRiskAnalyzer(settings)), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
