# Partner authentication for /google/* (health excluded).
# X-Api-Key must match; if an HMAC secret is configured, X-Signature must be
# "sha256=<hex hmac of the raw body>".

import logging

from fastapi import Request
from starlette.responses import JSONResponse

from ..config import settings
from ..utils.hashing import safe_equals, sign_body

logger = logging.getLogger(__name__)

PROTECTED_PREFIX = "/google"
PUBLIC_PATHS = ("/google/health",)


def _deny(detail: str, status: int = 403) -> JSONResponse:
    return JSONResponse(status_code=status, content={"detail": detail})


async def partner_auth_middleware(request: Request, call_next):
    path = request.url.path

    if not path.startswith(PROTECTED_PREFIX) or path in PUBLIC_PATHS:
        return await call_next(request)

    # No key configured -> endpoints stay closed
    api_key = request.headers.get("X-Api-Key") or ""
    if not safe_equals(settings.partner_api_key, api_key):
        logger.warning(f"[AUTH] invalid API key on {path}")
        return _deny("Invalid API key")

    if settings.partner_hmac_secret:
        body = await request.body()
        expected = sign_body(body, settings.partner_hmac_secret)
        if not safe_equals(expected, request.headers.get("X-Signature")):
            logger.warning(f"[AUTH] invalid signature on {path}")
            return _deny("Invalid signature")

    return await call_next(request)
