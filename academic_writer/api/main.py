from __future__ import annotations

"""
HTTP surface for the academic writing assistant.

Design intent:
- `POST /api/generate` is the server boundary: `{draft, style}` in, `{text}` or `{error}` out.
- Session, history and export routes drive one SessionController held on app.state.
- Collaborators are resolved lazily from app.state so tests can inject fakes.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from academic_writer.export import default_exporters
from academic_writer.generation import GenerationError, TextGenerator, build_generation_client
from academic_writer.internal_core import JsonFileStorage, WriterConfig, load_config
from academic_writer.internal_core.contracts import (
    GenerateErrorResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationOutcomeView,
    HistoryItem,
    ReferencingStyle,
    SessionView,
)
from academic_writer.session import (
    EMPTY_DRAFT_MESSAGE,
    ConfirmationRequiredError,
    SessionBusyError,
    SessionController,
    StatePersistence,
    history_preview,
)


class SessionUpdateRequest(BaseModel):
    style: Optional[ReferencingStyle] = None
    draft: Optional[str] = Field(default=None, max_length=200_000)


class SessionGenerateRequest(BaseModel):
    instructions: str = Field(default="", max_length=8000)


class SessionGenerateResponse(BaseModel):
    session: SessionView
    outcome: GenerationOutcomeView


class HistoryEntry(BaseModel):
    id: int
    draft: str
    output: str
    style: ReferencingStyle
    timestamp: str
    preview: str


class HistoryListResponse(BaseModel):
    items: list[HistoryEntry] = Field(default_factory=list)


class HistoryDeleteResponse(BaseModel):
    removed: int
    remaining: int


_STATUS_BY_KIND: dict[str, int] = {
    "configuration": 500,
    "transport": 502,
    "unknown": 500,
}

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    config = _get_config()
    logging.getLogger("academic_writer").setLevel(config.WRITER_LOG_LEVEL.upper())
    # Build the client up front so a missing credential is reported at startup.
    _get_generation_client()
    logger.info("app_started backend=%s", config.WRITER_GENERATION_BACKEND)
    yield


app = FastAPI(title="academic writing assistant", lifespan=_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config().WRITER_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> WriterConfig:
    existing = getattr(app.state, "config", None)
    if isinstance(existing, WriterConfig):
        return existing
    created = load_config()
    setattr(app.state, "config", created)
    return created


def _get_generation_client() -> TextGenerator:
    existing = getattr(app.state, "generation_client", None)
    if existing is not None:
        return existing
    created = build_generation_client(_get_config())
    setattr(app.state, "generation_client", created)
    return created


def _get_session_controller() -> SessionController:
    existing = getattr(app.state, "session_controller", None)
    if isinstance(existing, SessionController):
        return existing
    config = _get_config()
    storage = JsonFileStorage(config.storage_dir_path())
    created = SessionController(
        _get_generation_client(),
        StatePersistence(storage, config.WRITER_STORAGE_KEY),
        history_limit=config.WRITER_HISTORY_LIMIT,
        exporters=default_exporters(),
    )
    created.load()
    setattr(app.state, "session_controller", created)
    return created


def _history_entry(item: HistoryItem) -> HistoryEntry:
    return HistoryEntry(
        id=item.id,
        draft=item.draft,
        output=item.output,
        style=item.style,
        timestamp=item.timestamp,
        preview=history_preview(item),
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=GenerateErrorResponse(error=message).model_dump())


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    _ = request
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{loc}: {err.get('msg', 'invalid value')}" if loc else str(err.get("msg", "invalid value")))
    return _error_response(422, "Invalid request payload: " + "; ".join(problems))


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post(
    "/api/generate",
    response_model=GenerateResponse,
    responses={400: {"model": GenerateErrorResponse}, 500: {"model": GenerateErrorResponse}, 502: {"model": GenerateErrorResponse}},
)
def api_generate(payload: GenerateRequest) -> Any:
    if not payload.draft.strip():
        return _error_response(400, EMPTY_DRAFT_MESSAGE)

    client = _get_generation_client()
    try:
        text = client.generate(payload.draft, payload.style, instructions=payload.instructions)
    except GenerationError as exc:
        logger.warning("api_generate_failed kind=%s error=%s", exc.kind, exc.message)
        return _error_response(_STATUS_BY_KIND.get(exc.kind, 500), exc.message)
    except Exception as exc:
        logger.exception("api_generate_failed kind=unknown")
        return _error_response(500, f"An unknown error occurred while generating feedback: {exc}")
    return GenerateResponse(text=text)


@app.get("/session", response_model=SessionView)
def session_get() -> SessionView:
    return _get_session_controller().view()


@app.put("/session", response_model=SessionView)
def session_update(payload: SessionUpdateRequest) -> SessionView:
    controller = _get_session_controller()
    if payload.style is not None:
        controller.set_style(payload.style)
    if payload.draft is not None:
        controller.set_draft(payload.draft)
    return controller.view()


@app.post("/session/generate", response_model=SessionGenerateResponse)
def session_generate(payload: SessionGenerateRequest) -> SessionGenerateResponse:
    controller = _get_session_controller()
    try:
        outcome = controller.generate(instructions=payload.instructions)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return SessionGenerateResponse(
        session=controller.view(),
        outcome=GenerationOutcomeView(
            ok=outcome.ok,
            error_kind=outcome.error_kind,
            error=outcome.error,
            history_item_id=outcome.history_item.id if outcome.history_item is not None else None,
        ),
    )


@app.get("/history", response_model=HistoryListResponse)
def history_list() -> HistoryListResponse:
    items = _get_session_controller().history.items
    return HistoryListResponse(items=[_history_entry(item) for item in items])


@app.post("/history/{item_id}/restore", response_model=SessionView)
def history_restore(item_id: int) -> SessionView:
    controller = _get_session_controller()
    try:
        controller.restore(item_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"History item not found: {item_id}") from exc
    return controller.view()


@app.delete("/history/{item_id}", response_model=HistoryDeleteResponse)
def history_delete(item_id: int, confirm: bool = Query(default=False)) -> HistoryDeleteResponse:
    controller = _get_session_controller()
    try:
        controller.remove_history(item_id, confirmed=confirm)
    except ConfirmationRequiredError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"History item not found: {item_id}") from exc
    return HistoryDeleteResponse(removed=1, remaining=len(controller.history))


@app.delete("/history", response_model=HistoryDeleteResponse)
def history_clear(confirm: bool = Query(default=False)) -> HistoryDeleteResponse:
    controller = _get_session_controller()
    try:
        removed = controller.clear_history(confirmed=confirm)
    except ConfirmationRequiredError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return HistoryDeleteResponse(removed=removed, remaining=0)


@app.get("/export/{export_format}")
def export_output(export_format: str) -> Response:
    controller = _get_session_controller()
    try:
        document = controller.export(export_format.strip().lower())
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unsupported export format: {export_format}") from exc
    if document is None:
        return Response(status_code=204)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
