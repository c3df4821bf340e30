"""
Client for the external PDF renderer (headless browser service).
The service only builds HTML; the renderer turns it into PDF bytes.
"""
import logging
from typing import Optional
import httpx
from jinja2 import Environment, PackageLoader, select_autoescape

from uam.config import get_settings

logger = logging.getLogger(__name__)

templates = Environment(
    loader=PackageLoader("uam", "templates"),
    autoescape=select_autoescape(["html"]),
)


def format_date(value) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_datetime(value) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y %H:%M")


templates.filters["date"] = format_date
templates.filters["datetime"] = format_datetime


def render_html(template_name: str, **context) -> str:
    return templates.get_template(template_name).render(**context)


class PdfRenderError(Exception):
    """The renderer could not be reached or answered with an error."""


class PdfRendererClient:
    """Posts HTML to the renderer and returns the PDF."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        settings = get_settings()
        self.url = url or settings.pdf_renderer_url
        self.client = httpx.Client(
            timeout=timeout or settings.pdf_renderer_timeout,
            transport=transport,
        )

    def __del__(self):
        if hasattr(self, 'client'):
            self.client.close()

    def render(self, html: str, landscape: bool = False) -> bytes:
        payload = {
            "html": html,
            "options": {
                "format": "A4",
                "landscape": landscape,
                "printBackground": True,
                "margin": {"top": "20mm", "right": "12mm", "bottom": "20mm", "left": "12mm"},
            },
        }
        try:
            response = self.client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("PDF renderer request failed: %s", e)
            raise PdfRenderError("The PDF could not be generated") from e
        return response.content


def get_pdf_renderer() -> PdfRendererClient:
    """FastAPI dependency."""
    return PdfRendererClient()
