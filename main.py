"""
BillaBot API - team availability and billability analytics over Tempo and JIRA
"""
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import close_connectors
from api.routes import api_router
from config import settings
from utils.logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title=settings.app.app_name,
    description="Team availability and billability analytics from Tempo and JIRA",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests as 400s"""
    logger.warning("Rejected request", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={
        "detail": "Invalid request",
        "errors": [error.get("msg") for error in exc.errors()]
    })


@app.on_event("startup")
async def startup_event():
    logger.info("Starting BillaBot API",
                jira_configured=settings.atlassian.jira_configured,
                tempo_configured=settings.atlassian.tempo_configured)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup connections on shutdown"""
    await close_connectors()


@app.get("/")
async def root():
    return {"message": "BillaBot API", "status": "healthy"}


@app.get("/health")
async def health_check():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/config")
async def get_config():
    """Which upstreams have credentials configured"""
    return {
        "app_name": settings.app.app_name,
        "jira_configured": settings.atlassian.jira_configured,
        "tempo_configured": settings.atlassian.tempo_configured,
        "default_days": settings.analysis.default_days,
        "debug": settings.app.debug
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.app.host,
        port=settings.app.port,
        reload=settings.app.debug,
        log_level="info"
    )
