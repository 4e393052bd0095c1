# backend/skillspot/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google import genai

from .api.endpoints import router as api_router
from .core.config import Settings, settings as default_settings
from .core.exceptions import SkillSpotError
from .core.logging_config import setup_logging
from .core.store import DataStore, SupabaseStore, build_store, create_supabase_client
from .services.assistant import CourseAssistant, create_gemini_client
from .services.auth_provider import AuthProvider, build_auth_provider
from .services.data_loader import load_all

logger = logging.getLogger("skillspot.main")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DataStore] = None,
    auth: Optional[AuthProvider] = None,
    gemini_client: Optional[genai.Client] = None,
) -> FastAPI:
    """Build the API. Anything not passed in is created from ``settings`` at startup."""
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup…")

        # --- Data store + auth ---
        if app.state.store is None:
            client = None
            if cfg.DATA_BACKEND == "supabase":
                client = create_supabase_client(cfg)
            app.state.store = build_store(cfg, client)
            if app.state.auth is None:
                app.state.auth = build_auth_provider(
                    cfg, app.state.store, client=client,
                    client_factory=lambda: create_supabase_client(cfg),
                )
        elif app.state.auth is None:
            app.state.auth = build_auth_provider(cfg, app.state.store)
        logger.info("Data store attached to app.state.store (%s)", app.state.store.name)

        # Quick probe: tiny exact count to confirm RLS/keys are correct.
        if isinstance(app.state.store, SupabaseStore):
            try:
                logger.info("[probe] ngos count=%s", app.state.store.probe())
            except Exception as e:
                logger.warning("[probe] count failed: %r", e)

        # --- Seed the directory on first run ---
        if cfg.SEED_ON_STARTUP:
            try:
                await load_all(app.state.store)
            except SkillSpotError as e:
                logger.error("[loader] startup load failed:\n%s", e.message)

        # --- Gemini ---
        client = gemini_client if gemini_client is not None else create_gemini_client(cfg.GEMINI_API_KEY)
        app.state.assistant = CourseAssistant(client, cfg.GEMINI_MODEL)
        logger.info("[Gemini] assistant ready=%s model=%s", app.state.assistant.ready, cfg.GEMINI_MODEL)

        yield
        logger.info("Application shutdown.")

    app = FastAPI(
        title="SkillSpot API",
        description="Directory and enrollment portal connecting training NGOs with students.",
        version="2.0.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.store = store
    app.state.auth = auth

    # -------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.allowed_origins(),
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------
    # Errors
    # -------------------------------------------------------------------
    @app.exception_handler(SkillSpotError)
    async def skillspot_error_handler(request: Request, exc: SkillSpotError):
        if exc.status_code >= 500:
            logger.error("[%s] %s %s -> %s", type(exc).__name__, request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    # -------------------------------------------------------------------
    # Health + Root
    # -------------------------------------------------------------------
    @app.get("/")
    def read_root():
        return {"message": "Welcome to the SkillSpot API"}

    @app.get("/healthz")
    def healthz(request: Request):
        """Liveness/readiness probe. Also verifies a DB read briefly."""
        store: DataStore | None = getattr(request.app.state, "store", None)
        if store is None:
            raise HTTPException(status_code=500, detail="Data store missing")
        try:
            ngos = len(store.select("ngos"))
        except SkillSpotError as e:
            logger.warning("[healthz] ngos read failed: %s", e.message)
            ngos = -1
        return {"ok": True, "backend": store.name, "ngosCount": ngos}

    @app.get("/api/health/gemini")
    def gemini_health(request: Request):
        assistant: CourseAssistant | None = getattr(request.app.state, "assistant", None)
        if assistant is None or not assistant.ready:
            return JSONResponse(
                status_code=503,
                content={"error": "Gemini client not initialized. Check GEMINI_API_KEY."},
            )
        return {"ok": True, "model_env": assistant.model}

    app.include_router(api_router, prefix="/api")
    return app


setup_logging()
app = create_app()
