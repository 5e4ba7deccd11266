from __future__ import annotations

import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import ValidationError

from .assistant import VoiceAssistant
from .auth import current_user_id
from .db import ensure_indexes, get_db
from .errors import ConfigurationMissing, Unauthenticated, VoiceAssistantError
from .knowledge import KnowledgeResponder
from .schemas import (
    Conversation,
    PerformanceMetrics,
    VoiceInputRequest,
    VoiceInputResult,
    VoiceSettings,
)
from .settings import load_settings
from .store import MongoStore


def _mask(key: str) -> str:
    return f"{key[:7]}...{key[-4:]}" if len(key) > 12 else "***"


load_dotenv()  # supports local env file usage without committing dotfiles
settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Voice Assistant Backend")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _startup() -> None:
    try:
        client = AsyncIOMotorClient(settings.mongo_uri)
        await client.admin.command("ping")
        db = get_db(client, settings.mongo_db)
        await ensure_indexes(db)

        responder = KnowledgeResponder.from_settings(settings)
        app.state.mongo_client = client
        app.state.assistant = VoiceAssistant(
            MongoStore(db), responder, sentiment_model_name=settings.sentiment_model_name
        )

        logger.info("[API] Backend started: MongoDB connected, CORS origins: %s", settings.cors_origins)
        for provider in responder.providers:
            if provider.configured:
                logger.info("[API] %s ENABLED (model %s, key %s)", provider.name, provider.model, _mask(provider.api_key))
            else:
                logger.info("[API] %s DISABLED (no API key)", provider.name)
    except Exception:
        logger.exception("[API] Startup error (MongoDB URI: %s). Make sure MongoDB is running!", settings.mongo_uri)
        raise


@app.on_event("shutdown")
async def _shutdown() -> None:
    assistant: VoiceAssistant | None = getattr(app.state, "assistant", None)
    if assistant is not None:
        await assistant.responder.aclose()
    client: AsyncIOMotorClient | None = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()


def get_assistant(request: Request) -> VoiceAssistant:
    return request.app.state.assistant


@app.exception_handler(Unauthenticated)
async def _unauthenticated(request: Request, exc: Unauthenticated) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(ConfigurationMissing)
async def _configuration_missing(request: Request, exc: ConfigurationMissing) -> JSONResponse:
    logger.error("[API] Configuration missing: %s", exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(VoiceAssistantError)
async def _voice_assistant_error(request: Request, exc: VoiceAssistantError) -> JSONResponse:
    logger.error("[API] %s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "ok", "service": "voice-assistant-backend"}


@app.post("/voice/initialize")
async def initialize(assistant: VoiceAssistant = Depends(get_assistant)):
    seeded = await assistant.initialize_defaults()
    return {"seeded": seeded}


@app.post("/voice/input", response_model=VoiceInputResult)
async def process_voice_input(
    payload: VoiceInputRequest,
    user_id: Optional[str] = Depends(current_user_id),
    assistant: VoiceAssistant = Depends(get_assistant),
):
    return await assistant.process_voice_input(user_id, payload.text, payload.session_id)


@app.get("/voice/conversations/{session_id}", response_model=Optional[Conversation])
async def get_conversation_history(
    session_id: str,
    user_id: Optional[str] = Depends(current_user_id),
    assistant: VoiceAssistant = Depends(get_assistant),
):
    return await assistant.get_conversation_history(user_id, session_id)


@app.get("/voice/metrics", response_model=Optional[PerformanceMetrics])
async def get_performance_metrics(
    user_id: Optional[str] = Depends(current_user_id),
    assistant: VoiceAssistant = Depends(get_assistant),
):
    return await assistant.get_performance_metrics(user_id)


@app.get("/voice/settings", response_model=VoiceSettings)
async def get_voice_settings(
    user_id: Optional[str] = Depends(current_user_id),
    assistant: VoiceAssistant = Depends(get_assistant),
):
    return await assistant.get_voice_settings(user_id)


@app.put("/voice/settings", response_model=VoiceSettings)
async def save_voice_settings(
    payload: VoiceSettings,
    user_id: Optional[str] = Depends(current_user_id),
    assistant: VoiceAssistant = Depends(get_assistant),
):
    return await assistant.save_voice_settings(user_id, payload)


@app.websocket("/ws/{session_id}")
async def ws_voice(websocket: WebSocket, session_id: str):
    await websocket.accept()
    assistant: VoiceAssistant = websocket.app.state.assistant
    user_id = current_user_id(websocket)

    try:
        while True:
            payload = await websocket.receive_json()
            data = payload if isinstance(payload, dict) else {}
            try:
                request = VoiceInputRequest.model_validate({**data, "sessionId": session_id})
            except ValidationError:
                await websocket.send_json({"error": "Invalid message format. Expected: { text: string }"})
                continue

            try:
                result = await assistant.process_voice_input(user_id, request.text, request.session_id)
            except Unauthenticated as e:
                await websocket.send_json({"error": str(e)})
                await websocket.close(code=1008)
                return
            except VoiceAssistantError as e:
                logger.error("[API] Voice input failed: %s", e)
                await websocket.send_json({"error": str(e)})
                continue
            await websocket.send_json(result.model_dump(by_alias=True, mode="json"))
    except WebSocketDisconnect:
        return
