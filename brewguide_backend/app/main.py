# main.py : backend entrypoint
import importlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from brewguide_backend.app.config import API_HOST, API_PORT, APP_ENV, DEBUG_MODE, validate_manifest

log = logging.getLogger("brewguide.main")
if not log.handlers:
    log.addHandler(logging.StreamHandler())
    log.setLevel(logging.DEBUG if DEBUG_MODE else logging.INFO)

app = FastAPI(title="BrewGuide API")

# --- CORS for Vite dev -------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include routers under /api ----------------------------------------------
def _include(module_name: str, prefix: str = "/api") -> None:
    m = importlib.import_module(f"brewguide_backend.app.routers.{module_name}")
    app.include_router(m.router, prefix=prefix)
    log.debug("Mounted %s at %s", module_name, prefix)

_include("recipes")   # /api/recipes/...
_include("brew")      # /api/brew/scale, /api/brew/plan
_include("sessions")  # /api/sessions/...
_include("logs")      # /api/logs/...

# --- Startup: tables + starter recipes ----------------------------------------
@app.on_event("startup")
async def _init_storage():
    from brewguide_backend.app.db.session import init_db
    from brewguide_backend.app.db.seed import seed_defaults

    manifest = validate_manifest()
    if manifest["status"] != "ok":
        log.warning("Rules manifest incomplete: %s", manifest["missing_required"])
    init_db()
    log.info("Starter recipes: %s (env=%s)", seed_defaults(), APP_ENV)

@app.on_event("shutdown")
async def _stop_sessions():
    from brewguide_backend.app.services.router_helpers.sessions_helpers import registry
    registry.clear()

# --- Health ------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"ok": True}

@app.get("/api/health")
async def api_health():
    # mirror the non-prefixed /health so the FE's /api/health succeeds
    return {"ok": True, "env": APP_ENV, "rules": validate_manifest()["status"]}

# --- Dev server (`brewguide-api` console script) --------------------------------
def run() -> None:
    import uvicorn

    uvicorn.run(app, host=API_HOST, port=API_PORT, log_level="debug" if DEBUG_MODE else "info")
