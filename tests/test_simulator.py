"""End-to-end tests for the console simulator with a fake generation backend."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from src.app import create_app
from src.bot.main import repl, run_once
from src.config.settings import Settings

CATALOG_CSV = """listing_id,title,operation_type,price,area_m2,address_municipality,photos
A-1,Piso con terraza,alquiler,850,70,Granada,https://x/a1.jpg|https://x/a2.jpg
C-1,Estudio céntrico,alquiler,550,35,Málaga,https://x/c1.jpg
"""


class _CannedBackend:
    def __init__(self, response: str) -> None:
        self.response = response

    def complete(self, system_prompt: str, user_text: str) -> str:
        return self.response


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    path = tmp_path / "catalog.csv"
    path.write_text(CATALOG_CSV, encoding="utf-8")
    return Settings(_env_file=None, CATALOG_CSV_PATH=str(path), LLM_API_KEY="k")


def test_run_once_prints_plan_and_listings(settings: Settings) -> None:
    app = create_app(settings, backend=_CannedBackend('{"intent":"SEARCH","filters":{"address_municipality":"malaga"}}'))
    out = io.StringIO()

    reply = run_once(app, "pisos en Málaga", out)

    lines = out.getvalue().splitlines()
    assert reply.kind == "listings"
    assert lines[0].startswith("plan: ")
    assert lines[1].startswith("[C-1] Estudio céntrico | Málaga | 550 €")


def test_repl_reloads_catalog_and_stops_on_quit(settings: Settings) -> None:
    app = create_app(settings, backend=_CannedBackend('{"intent":"OTHER"}'))
    Path(settings.catalog_csv_path).write_text("listing_id\nZ-1\n", encoding="utf-8")
    out = io.StringIO()

    repl(app, ["/reload\n", "\n", "q\n", "never handled\n"], out)

    assert out.getvalue().splitlines() == ["Catálogo recargado: 1 inmuebles."]
    assert [r.listing_id for r in app.catalog.all()] == ["Z-1"]


def test_repl_reports_failed_reload_and_keeps_catalog(settings: Settings) -> None:
    app = create_app(settings, backend=_CannedBackend('{"intent":"OTHER"}'))
    Path(settings.catalog_csv_path).write_text("title\nsin id\n", encoding="utf-8")
    out = io.StringIO()

    repl(app, ["/reload"], out)

    assert out.getvalue().startswith("No se pudo recargar el catálogo")
    assert len(app.catalog) == 2


def test_unsupported_reply_is_rendered(settings: Settings) -> None:
    app = create_app(settings, backend=_CannedBackend('{"intent":"OTHER"}'))
    out = io.StringIO()

    run_once(app, "¿qué tiempo hace?", out)

    assert out.getvalue().splitlines()[-1] == "Todavía no puedo ayudarte con eso."
