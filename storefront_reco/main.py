from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront_reco.core.config import get_settings
from storefront_reco.core.exceptions import RecoServiceError
from storefront_reco.core.lifespan import lifespan
from storefront_reco.core.logging import configure_logging
from storefront_reco.api.v1.routers.health import router as health_router
from storefront_reco.api.v1.routers.recommendations import router as recommendations_router

import logging, os

settings = get_settings()
configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# ------- CORS -------
# ALLOWED_ORIGINS is a CSV, e.g. "https://shop.example.com,https://admin.example.com"
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


@app.exception_handler(RecoServiceError)
async def reco_service_error_handler(request: Request, exc: RecoServiceError):
    logger.warning("Request failed path=%s status=%s error=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "message": exc.message, "details": exc.details},
    )


# ------- Routes -------
app.include_router(health_router)
app.include_router(recommendations_router, prefix=settings.api_prefix)   # /api/recommendations/...
