"""
facts.hype Backend - FastAPI Application

Main entry point for the facts.hype question/answer/bounty market API.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from factshype.routers import chain, questions, sources
from factshype.config import get_settings
from factshype.database import check_database_connection

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("facts.hype API starting up (chain %s)", settings.chain_id)
    yield
    logger.info("facts.hype API shutting down")


app = FastAPI(
    title="facts.hype API",
    description="""
    Front-end backend for the facts.hype question and bounty market.

    ## Features
    - Read-only views of on-chain questions with derived lifecycle status
    - Per-viewer action hints (answer, vouch, challenge, settle, override, finalize)
    - Storage for question rules and answer sources
    """,
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(chain.router)
app.include_router(questions.router)
app.include_router(sources.router)


@app.get("/")
async def root():
    """Liveness endpoint."""
    return {
        "status": "healthy",
        "service": "facts.hype API",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    settings = get_settings()
    database_ok = check_database_connection()

    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "database_connected": database_ok,
        "rpc_configured": bool(settings.rpc_url and settings.facts_contract_address),
        "chain_id": settings.chain_id,
    }
    if not database_ok:
        return JSONResponse(status_code=503, content=body)
    return body
