"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from eventinsight.config import settings
from eventinsight.auth import auth, handlers
from eventinsight.api import ingest, login, projects, environments, api_keys, events
from eventinsight.middleware import AuthGateMiddleware

app = FastAPI(
    title="EventInsight API",
    description="Backend API for EventInsight web analytics",
    version="0.1.0",
)

# Route gate; added first so CORS wraps it and preflights never hit the gate
app.add_middleware(AuthGateMiddleware, auth=auth)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(handlers)
app.include_router(login.router)
app.include_router(ingest.router)
app.include_router(projects.router)
app.include_router(environments.router)
app.include_router(api_keys.router)
app.include_router(events.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "EventInsight API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
