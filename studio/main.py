"""
Myanmar Content Studio API
Token-metered Myanmar social-media post generation with a personal content library.
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import os
import sys

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True
)

logger = logging.getLogger(__name__)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from studio.api.routes import profiles, tokens, content, functions
from studio.core.errors import StudioError, InsufficientBalance, NotEligible
from studio.db.migrations import create_tables, upgrade_to_head

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

app = FastAPI(title="Myanmar Content Studio")


@app.on_event("startup")
async def startup_event():
    create_tables()
    upgrade_to_head()


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    """Render ledger/library errors as a message for the user who triggered the action."""
    body = {"detail": exc.message, "error": exc.kind}
    if isinstance(exc, InsufficientBalance):
        body["tokens"] = exc.balance
    if isinstance(exc, NotEligible) and exc.next_claim_at:
        body["next_claim_at"] = exc.next_claim_at.isoformat()
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins or DEFAULT_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


# Register routers
app.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
app.include_router(tokens.router, prefix="/tokens", tags=["Tokens"])
app.include_router(content.router, prefix="/content", tags=["Content"])
app.include_router(functions.router, prefix="/functions/v1", tags=["Functions"])
