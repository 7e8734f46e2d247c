"""Web UI service helpers."""

from __future__ import annotations

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from whoami_api.visits.ledger import VisitSnapshot
from whoami_api.web.constants import INDEX_TEMPLATE, TEMPLATE_DIR

_ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_homepage(app_name: str, snapshot: VisitSnapshot) -> HTMLResponse:
    html = _ENV.get_template(INDEX_TEMPLATE).render(
        app_name=app_name,
        total_visits=snapshot.total,
        unique_visitors=snapshot.unique,
    )
    return HTMLResponse(content=html)
