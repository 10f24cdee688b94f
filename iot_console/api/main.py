"""
Console API - HTTP surface over a configuration session.
Message type catalog, form state, submission and the device link status.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Depends
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from util.logging import logger
from ..core import config
from ..core.config import VERSION, debug_enabled, validate_config
from ..core.errors import NoSchemaSelectedError, UnknownSchemaError
from ..core.orchestrator import SubmissionState
from ..core.registry import SchemaRegistry, get_registry
from ..core.schema import MessageSchema
from ..core.session import ConfigurationSession
from ..device.connection import ConnectionMonitor
from .feedback import entry_response, router as feedback_router
from .schemas import (
    ConnectionStatusResponse,
    ErrorResponse,
    FieldChangeRequest,
    HealthResponse,
    MessageTypeListResponse,
    MessageTypeResponse,
    SelectRequest,
    SessionResponse,
    SubmitResponse,
    ValidationErrorResponse,
    ValidationResultResponse,
)
from .state import get_monitor, get_session

# Build the registry at import so a malformed catalog stops startup
get_registry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    issues = validate_config()
    for issue in issues:
        logger.warning(f"Configuration issue: {issue}")

    stop_event = asyncio.Event()
    monitor_task = asyncio.create_task(get_monitor().run(stop_event))
    logger.info(f"IoT configuration console API {VERSION} started")
    try:
        yield
    finally:
        stop_event.set()
        await monitor_task


# Initialize the FastAPI application
app = FastAPI(
    title="IoT Configuration Console API",
    version=VERSION,
    description="Schema-driven configuration forms with a simulated device channel",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None,
    lifespan=lifespan,
)

# Add CORS middleware to allow frontend connections
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(feedback_router, prefix="/feedback", tags=["feedback"])


def _message_type_response(schema: MessageSchema) -> MessageTypeResponse:
    return MessageTypeResponse(**schema.to_dict())


def _session_response(session: ConfigurationSession) -> SessionResponse:
    selected = session.selected_schema
    return SessionResponse(schema_id=selected.id if selected else None, values=session.values)


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(
    session: ConfigurationSession = Depends(get_session),
    monitor: ConnectionMonitor = Depends(get_monitor),
):
    """Check console health."""
    issues = validate_config()
    return HealthResponse(
        status="healthy" if not issues else "degraded",
        version=VERSION,
        connected=monitor.connected,
        feedback_count=len(session.ledger),
        config_issues=issues,
    )


@app.get("/message-types", response_model=MessageTypeListResponse)
def list_message_types(registry: SchemaRegistry = Depends(get_registry)):
    return MessageTypeListResponse(
        message_types=[_message_type_response(s) for s in registry.get_all()]
    )


@app.get("/message-types/{schema_id}", response_model=MessageTypeResponse)
def get_message_type(schema_id: str, registry: SchemaRegistry = Depends(get_registry)):
    schema = registry.get_by_id(schema_id)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"Unknown message type: {schema_id}")
    return _message_type_response(schema)


@app.get("/session", response_model=SessionResponse)
def get_session_state(session: ConfigurationSession = Depends(get_session)):
    return _session_response(session)


@app.post("/session/select", response_model=SessionResponse)
def select_message_type(request: SelectRequest, session: ConfigurationSession = Depends(get_session)):
    """Select a message type; the form is re-seeded from its defaults."""
    try:
        session.on_schema_select(request.schema_id)
    except UnknownSchemaError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _session_response(session)


@app.put("/session/fields/{field_name}", response_model=SessionResponse)
def set_field_value(field_name: str, request: FieldChangeRequest,
                    session: ConfigurationSession = Depends(get_session)):
    try:
        session.on_field_change(field_name, request.value)
    except NoSchemaSelectedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _session_response(session)


@app.post("/session/validate", response_model=ValidationResultResponse)
def validate_session(session: ConfigurationSession = Depends(get_session)):
    """Validate the current form without submitting it."""
    try:
        result = session.validate()
    except NoSchemaSelectedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ValidationResultResponse(**result.to_dict())


@app.post("/session/submit", response_model=SubmitResponse)
async def submit_session(session: ConfigurationSession = Depends(get_session)) -> Any:
    """Submit the current form and wait for the device response."""
    try:
        result = await session.on_submit()
    except NoSchemaSelectedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if result.state == SubmissionState.INVALID:
        missing = result.missing_field_labels
        body = ValidationErrorResponse(
            message=f"{config.REQUIRED_FIELD_ERROR}: please fill in {', '.join(missing)}" if missing
            else "Form contains invalid values",
            missing_fields=missing,
            errors=result.validation.to_dict()["errors"],
        )
        return JSONResponse(status_code=422, content=body.model_dump(mode="json"))

    return SubmitResponse(state=result.state.value, entry=entry_response(result.entry))


@app.get("/connection", response_model=ConnectionStatusResponse)
def connection_status(monitor: ConnectionMonitor = Depends(get_monitor)):
    return ConnectionStatusResponse(**monitor.status())


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    body = ErrorResponse(
        error_type="INTERNAL_ERROR",
        message="Internal server error",
        details={"debug": str(exc)} if debug_enabled() else None,
    )
    return JSONResponse(
        status_code=500,
        content=body.model_dump(mode="json"),
    )
