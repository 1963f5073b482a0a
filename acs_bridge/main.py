# acs_bridge/main.py
from __future__ import annotations

import logging
from logging import Logger

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from acs_bridge.settings import settings
from acs_bridge.routers.devices_router import router as devices_router  # resumo, Wi-Fi, tasks
from acs_bridge.routers.devices_router import genieacs_router  # ping do NBI
from acs_bridge.database import init_db  # metadados do operador

# =========================
# LOGGING
# =========================
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
log: Logger = logging.getLogger("acs-bridge")

# =========================
# APP
# =========================
app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    redirect_slashes=False,
)

# =========================
# CORS
# =========================
origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()] or ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    # '*' com credentials é bloqueado pelos navegadores
    allow_credentials=(origins != ["*"]),
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================
# MIDDLEWARE DE ACCESS LOG
# =========================
@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    method = request.method
    path = request.url.path
    if settings.ACCESS_LOG:
        log.info(f"REQ {method} {path} ?{request.url.query}")

    try:
        response = await call_next(request)
    except Exception as e:
        log.exception(f"UNHANDLED {method} {path}: {e}")
        raise

    if settings.ACCESS_LOG:
        log.info(f"RES {method} {path} -> {response.status_code}")
    return response

# =========================
# ROTAS
# =========================
app.include_router(devices_router)
app.include_router(genieacs_router)


@app.get("/health")
async def health():
    return {
        "ok": True,
        "service": settings.APP_TITLE,
        "version": settings.APP_VERSION,
        "genie_nbi": settings.GENIE_NBI,
    }

# =========================
# INICIALIZAÇÃO DO BANCO
# =========================
@app.on_event("startup")
async def startup_event():
    init_db()
    log.info(f"{settings.APP_TITLE} iniciado (GenieACS: {settings.GENIE_NBI})")

# =========================
# RUN (uvicorn)
# =========================
# uvicorn acs_bridge.main:app --host 0.0.0.0 --port 8087 --reload
