import os

import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.database import init_db
from app.logging_config import setup_logging
from app.middleware import RequestLoggingMiddleware
from app.ratelimit import limiter
from app.routes import fx, receipts

load_dotenv()

# Sentry
sentry_dsn = os.getenv("SENTRY_DSN")
if sentry_dsn:
    # Disable the auto-detected OpenAI Agents integration due to
    # version incompatibility (sentry-sdk expects a different internal API)
    _disabled = []
    try:
        from sentry_sdk.integrations.openai_agents import OpenAIAgentsIntegration
        _disabled.append(OpenAIAgentsIntegration)
    except ImportError:
        pass
    sentry_sdk.init(
        dsn=sentry_dsn,
        traces_sample_rate=0.1,
        send_default_pii=False,
        disabled_integrations=_disabled,
    )

logger = setup_logging(os.getenv("LOG_LEVEL", "INFO").upper())

app = FastAPI(title="TripMoney API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in origins],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)
app.add_middleware(RequestLoggingMiddleware)

# Rate cache table
init_db()

# Routes
app.include_router(fx.router, prefix="/api")
app.include_router(receipts.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}
