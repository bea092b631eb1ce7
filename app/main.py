"""Entry point for the FastAPI-powered SeerrFeed service."""

from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import settings
from .models import ArrServiceType, MediaRequestPayload
from .sections import SectionRegistry
from .services.arr import ArrCalendarClient
from .services.image_cache import build_image_resolver
from .services.jellyseerr import JellyseerrClient
from .utils import calculate_end_date

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(timeout=httpx.Timeout(20.0, connect=10.0))
    )

    jellyseerr = JellyseerrClient(
        settings, http_client, build_image_resolver(settings.image_proxy_url)
    )
    calendar = ArrCalendarClient(settings, http_client)

    fastapi_app.state.jellyseerr = jellyseerr
    fastapi_app.state.calendar = calendar
    fastapi_app.state.sections = SectionRegistry.from_settings(
        settings, jellyseerr, calendar
    )
    logger.info(
        "Serving sections: %s", ", ".join(settings.section_keys)
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Discover and release-calendar aggregation for Jellyfin home screens",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def _get_state(fastapi_app: FastAPI, name: str, expected: type):
    value = getattr(fastapi_app.state, name, None)
    if not isinstance(value, expected):
        raise RuntimeError(f"{name} not initialised")
    return value


def _parse_datetime(value: str | None, *, field: str) -> datetime | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {field} date") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/sections")
    async def list_sections() -> JSONResponse:
        registry = _get_state(fastapi_app, "sections", SectionRegistry)
        return JSONResponse(
            [info.model_dump(mode="json") for info in registry.list_info()]
        )

    @fastapi_app.get("/sections/{section_key}")
    async def section_results(
        section_key: str, username: str | None = None
    ) -> JSONResponse:
        registry = _get_state(fastapi_app, "sections", SectionRegistry)
        if not username or not username.strip():
            raise HTTPException(status_code=400, detail="A username is required")
        try:
            section = registry.get(section_key)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        result = await section.get_results(username.strip())
        return JSONResponse(result.model_dump(mode="json"))

    @fastapi_app.get("/calendar/{service}")
    async def calendar_entries(
        service: str, start: str | None = None, end: str | None = None
    ) -> JSONResponse:
        calendar = _get_state(fastapi_app, "calendar", ArrCalendarClient)
        try:
            service_type = ArrServiceType(service.lower())
        except ValueError as exc:
            raise HTTPException(status_code=404, detail="Unknown service") from exc

        start_date = _parse_datetime(start, field="start") or datetime.now(timezone.utc)
        end_date = _parse_datetime(end, field="end") or calculate_end_date(
            start_date,
            settings.calendar_timeframe_value,
            settings.calendar_timeframe_unit,
        )
        if end_date < start_date:
            raise HTTPException(status_code=400, detail="end must not precede start")

        items = await calendar.fetch_calendar(service_type, start_date, end_date)
        if items is None:
            raise HTTPException(
                status_code=503,
                detail=f"{service_type.display_name} is not configured or unavailable",
            )
        return JSONResponse([item.model_dump(mode="json") for item in items])

    @fastapi_app.post("/discover/request")
    async def discover_request(request: Request) -> JSONResponse:
        jellyseerr = _get_state(fastapi_app, "jellyseerr", JellyseerrClient)
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            payload = {}
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload")
        try:
            body = MediaRequestPayload.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=400, detail=exc.errors(include_url=False, include_context=False)
            ) from exc

        requested = await jellyseerr.request_media(
            body.username, body.media_type, body.media_id
        )
        return JSONResponse({"requested": requested})


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
