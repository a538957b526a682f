import logging

from fastapi import FastAPI

from .config import settings
from .middleware.audit import audit_middleware
from .middleware.auth import partner_auth_middleware
from .routers import partner

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

app = FastAPI(title="Reserve partner API")

# ===== Middleware order (last added runs first) =====
app.middleware("http")(partner_auth_middleware)
app.middleware("http")(audit_middleware)

app.include_router(partner.router)


@app.get("/health")
def health():
    return {"status": "ok"}
