"""Console chat simulator.

Runs the same pipeline a WhatsApp message goes through (resolver, dispatch, matching) against the
configured catalog, reading utterances from stdin. Delivery to a real channel is out of scope.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from typing import TextIO

from dotenv import load_dotenv

from src.app import App, create_app
from src.bot.handlers import AssistantReply, handle_text
from src.catalog.schema import PropertyRecord
from src.catalog.store import LoadError
from src.config.logging import configure_logging
from src.config.settings import load_settings

logger = logging.getLogger(__name__)

QUIT_COMMAND = "q"
RELOAD_COMMAND = "/reload"

_KIND_MESSAGES: dict[str, str] = {
    "no_results": "Sin resultados con esos filtros.",
    "not_found": "No se encontró la referencia solicitada.",
    "unsupported": "Todavía no puedo ayudarte con eso.",
    "empty": "Escribe un mensaje.",
    "not_understood": "No he entendido la petición.",
    "unavailable": "El servicio no está disponible ahora mismo, inténtalo de nuevo.",
    "error": "Ha ocurrido un error.",
}


def _format_number(value: float | None, suffix: str = "") -> str:
    if value is None:
        return "?"
    return f"{value:,.0f}{suffix}".replace(",", ".")


def format_listing(record: PropertyRecord) -> str:
    """One summary line per listing (enough to check ranking by eye)."""

    name = record.title or record.property_type or "Inmueble"
    location = ", ".join(p for p in (record.address_municipality, record.neighborhood) if p)
    return (
        f"[{record.listing_id}] {name} | {location or '-'} | "
        f"{_format_number(record.price, ' €')} | {_format_number(record.area_m2, ' m²')} | "
        f"{record.photo_count or 0} fotos"
    )


def render_reply(reply: AssistantReply) -> list[str]:
    """Render a reply as console lines."""

    if reply.kind == "listings":
        return [format_listing(record) for record in reply.listings]
    if reply.kind == "photos":
        if not reply.photos:
            return ["Sin fotos adicionales."]
        return [f"[foto {idx}] {url}" for idx, url in enumerate(reply.photos, start=1)]
    if reply.kind == "clarification":
        return ["Faltan datos: " + " | ".join(reply.questions)]
    return [_KIND_MESSAGES[reply.kind]]


def run_once(app: App, text: str, out: TextIO) -> AssistantReply:
    """Handle one utterance and print the plan plus the reply."""

    reply = handle_text(app, text)
    if reply.plan is not None:
        print(f"plan: {reply.plan.model_dump_json()}", file=out)
    for line in render_reply(reply):
        print(line, file=out)
    return reply


def repl(app: App, lines: Iterable[str], out: TextIO) -> None:
    """Read utterances until EOF or `q`; `/reload` reloads the catalog."""

    for line in lines:
        text = line.strip()
        if not text:
            continue
        if text.lower() == QUIT_COMMAND:
            break
        if text == RELOAD_COMMAND:
            try:
                count = app.catalog.load(app.settings.catalog_csv_path)
            except LoadError as exc:
                print(f"No se pudo recargar el catálogo: {exc}", file=out)
            else:
                print(f"Catálogo recargado: {count} inmuebles.", file=out)
            continue
        run_once(app, text, out)


def main() -> None:
    """CLI entry point for the chat simulator."""

    parser = argparse.ArgumentParser(description="Simulate the real-estate chat assistant.")
    parser.add_argument("--text", help="Handle a single message and exit.")
    parser.add_argument("--log-level", help="Override LOG_LEVEL.")
    args = parser.parse_args()

    load_dotenv(".env")
    settings = load_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        app = create_app(settings)
    except LoadError as exc:
        logger.error("catalog load failed: %s", exc)
        sys.exit(1)

    if args.text is not None:
        run_once(app, args.text, sys.stdout)
        return

    print(f"{len(app.catalog)} inmuebles cargados. Escribe tu mensaje (q para salir):")
    try:
        repl(app, sys.stdin, sys.stdout)
    finally:
        logger.info("shutting down")


if __name__ == "__main__":
    main()
