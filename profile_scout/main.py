from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from profile_scout.api.routes import discovery, models
from profile_scout.config import settings
from profile_scout.services import logger as log_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_service.log_event(
        event_type="startup",
        message="ProfileScout API starting",
        model_provider=settings.model_provider,
        search_provider=settings.search_provider,
    )
    yield


app = FastAPI(
    title="ProfileScout",
    description="Social profile discovery from natural-language descriptions",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(discovery.router)
app.include_router(models.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "profile-scout"}
