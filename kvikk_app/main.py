# kvikk_app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import RedirectResponse

from kvikk_app.core.config import get_settings
from kvikk_app.core.logging_config import configure_logging
from kvikk_app.core.security import get_current_username, require_auth
from kvikk_app.database import engine, init_models
from kvikk_app.routes import admin, health, install, settings as settings_routes, shipping_rates, webhooks

configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.DB_AUTO_CREATE:
        logger.info("Creating database tables...")
        await init_models()
    if not settings.KVIKK_API_KEY:
        logger.warning("KVIKK_API_KEY is not set; shops without their own key cannot reach Kvikk")
    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(
    title="Kvikk Shopify App",
    lifespan=lifespan
)


# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    response = await call_next(request)
    return response


# Shopify calls these without basic auth
app.include_router(shipping_rates.router)
app.include_router(webhooks.router)
app.include_router(health.router)

app.include_router(settings_routes.router, dependencies=[require_auth()])
app.include_router(install.router, dependencies=[require_auth()])
app.include_router(admin.router, dependencies=[require_auth()])


@app.get("/", dependencies=[Depends(get_current_username)])
async def root():
    return RedirectResponse(url="/app")
