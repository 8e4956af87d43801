"""HTTP API for the CraftConnect web client.

Every response is JSON. Endpoints:
    GET  /                      → API overview
    GET  /health                → Which upstream services are configured
    POST /ai/analyze-business   → Voice note (multipart "audio") → business analysis
    POST /ai/analyze-text       → Typed description → business analysis
    POST /ai/whatsapp-message   → WhatsApp message text for an analysis
    GET  /whatsapp/status       → Delivery mode and features
    POST /whatsapp/preview      → Message + wa.me link
    POST /whatsapp/send         → Deliver one message
    POST /whatsapp/bulk-send    → Deliver to up to 50 recipients
    GET  /enhance/status        → Enhancer capabilities
    POST /enhance/product       → Product photo (multipart "image") → advice + URLs
    POST /enhance/batch         → Up to 10 photos (multipart "images")
    GET  /quotation/status      → Pricing capabilities
    POST /quotation/generate    → AI quotation for one product
    POST /quotation/compare     → Marketplace price comparison
    POST /quotation/bulk        → Template quotations for up to 20 products
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from . import __version__
from .config import CraftConnectConfig
from .exceptions import InvalidRequest
from .friendly_errors import friendly_error_for
from .pipeline import PipelineResult
from .providers.factory import Services
from .schemas.messaging import message_context
from .services import analysis, enhancer, messaging, quotation

logger = logging.getLogger("craftconnect")

SERVICES_KEY = web.AppKey("services", Services)


def _json_error(status: int, code: str, message: str) -> web.Response:
    """Consistent JSON error payload."""
    return web.json_response(
        {"success": False, "code": code, "message": message}, status=status
    )


def _with_help(out: dict[str, Any], result: PipelineResult) -> dict[str, Any]:
    if result.cause is not None:
        friendly = friendly_error_for(result.cause)
        if friendly is not None:
            out["help"] = friendly.to_dict()
    return out


async def _read_json(request: web.Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise InvalidRequest("Request body must be JSON")
    if not isinstance(body, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return body


async def _read_files(request: web.Request, name: str) -> list[web.FileField]:
    try:
        form = await request.post()
    except ValueError:
        raise InvalidRequest("Request body must be multipart/form-data")
    return [f for f in form.getall(name, []) if isinstance(f, web.FileField)]


def create_api_routes(
    services: Services, config: CraftConnectConfig | None = None
) -> web.Application:
    """Create the aiohttp app.

    Args:
        services: Upstream adapters shared by every request.
        config: Server limits and WhatsApp settings; defaults when omitted.
    """
    config = config or CraftConnectConfig()
    routes = web.RouteTableDef()

    @routes.get("/")
    async def index(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "name": "craftconnect",
                "version": __version__,
                "description": "AI business tools for artisans",
                "endpoints": [
                    f"{r.method} {r.path}"
                    for r in routes
                    if isinstance(r, web.RouteDef)
                ],
            }
        )

    @routes.get("/health")
    async def health(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "status": "ok",
                "services": services.status(),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    # ── Business analysis ────────────────────────────────

    @routes.post("/ai/analyze-business")
    async def analyze_business(request: web.Request) -> web.Response:
        files = await _read_files(request, "audio")
        audio = files[0].file.read() if files else b""
        if not audio:
            return _json_error(400, "missing_audio", "No audio file uploaded")
        logger.info("Audio received: %s (%d bytes)", files[0].filename, len(audio))
        outcome = await analysis.analyze_business_audio(services, audio)
        return web.json_response(_with_help(outcome.to_dict(), outcome.result))

    @routes.post("/ai/analyze-text")
    async def analyze_text(request: web.Request) -> web.Response:
        body = await _read_json(request)
        transcript = body.get("transcript")
        if not isinstance(transcript, str) or not transcript.strip():
            raise InvalidRequest("Business transcript is required")
        result = await analysis.analyze_transcript(services, transcript.strip())
        return web.json_response(_with_help(result.to_dict(), result))

    @routes.post("/ai/whatsapp-message")
    async def whatsapp_message(request: web.Request) -> web.Response:
        body = await _read_json(request)
        ctx = message_context(body)
        return web.json_response(await messaging.generate_message(services, ctx))

    # ── WhatsApp ─────────────────────────────────────────

    @routes.get("/whatsapp/status")
    async def whatsapp_status(request: web.Request) -> web.Response:
        return web.json_response(messaging.status(services, config.whatsapp.api_url))

    @routes.post("/whatsapp/preview")
    async def whatsapp_preview(request: web.Request) -> web.Response:
        body = await _read_json(request)
        return web.json_response(
            await messaging.preview(services, message_context(body))
        )

    @routes.post("/whatsapp/send")
    async def whatsapp_send(request: web.Request) -> web.Response:
        body = await _read_json(request)
        phone = body.get("phoneNumber") or body.get("phone_number")
        result = await messaging.send(services, phone, message_context(body))
        return web.json_response(result)

    @routes.post("/whatsapp/bulk-send")
    async def whatsapp_bulk_send(request: web.Request) -> web.Response:
        body = await _read_json(request)
        result = await messaging.bulk_send(
            services, body.get("recipients"), message_context(body)
        )
        return web.json_response(result)

    # ── Smart product enhancer ───────────────────────────

    @routes.get("/enhance/status")
    async def enhance_status(request: web.Request) -> web.Response:
        return web.json_response(enhancer.status(services))

    @routes.post("/enhance/product")
    async def enhance_product(request: web.Request) -> web.Response:
        files = await _read_files(request, "image")
        if not files:
            return _json_error(400, "missing_image", "No image uploaded")
        image = files[0]
        result = await enhancer.enhance_product(
            services, image.file.read(), image.content_type or "image/jpeg"
        )
        return web.json_response(result)

    @routes.post("/enhance/batch")
    async def enhance_batch(request: web.Request) -> web.Response:
        files = await _read_files(request, "images")
        images = [
            (f.filename, f.file.read(), f.content_type or "image/jpeg") for f in files
        ]
        return web.json_response(await enhancer.enhance_batch(services, images))

    # ── Quotation ────────────────────────────────────────

    @routes.get("/quotation/status")
    async def quotation_status(request: web.Request) -> web.Response:
        return web.json_response(quotation.status(services))

    @routes.post("/quotation/generate")
    async def quotation_generate(request: web.Request) -> web.Response:
        body = await _read_json(request)
        return web.json_response(await quotation.generate(services, body))

    @routes.post("/quotation/compare")
    async def quotation_compare(request: web.Request) -> web.Response:
        body = await _read_json(request)
        return web.json_response(quotation.compare_market_prices(body))

    @routes.post("/quotation/bulk")
    async def quotation_bulk(request: web.Request) -> web.Response:
        body = await _read_json(request)
        return web.json_response(quotation.bulk_quotations(body))

    # ── Middleware ───────────────────────────────────────

    @web.middleware
    async def error_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
        """Map request errors to 400 and anything unexpected to 500."""
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except InvalidRequest as e:
            return _json_error(400, "invalid_request", str(e))
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return _json_error(500, "internal_error", "An unexpected error occurred")

    @web.middleware
    async def cors_middleware(request: web.Request, handler: Any) -> web.StreamResponse:
        """Allow any origin; the web client is served from a different host."""
        if request.method == "OPTIONS":
            resp = web.Response()
        else:
            resp = await handler(request)
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "*, Authorization"
        return resp

    async def _close_services(app: web.Application) -> None:
        await app[SERVICES_KEY].close()

    app = web.Application(
        middlewares=[cors_middleware, error_middleware],
        client_max_size=config.server.max_upload_mb * 1024 * 1024,
    )
    app[SERVICES_KEY] = services
    app.add_routes(routes)
    app.on_cleanup.append(_close_services)
    return app
