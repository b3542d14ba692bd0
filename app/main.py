import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.config.settings import settings
from app.core.errors import install_error_handlers
from app.core.middleware import SecurityHeadersMiddleware, security_headers
from app.modules.auth import routes as auth_routes
from app.modules.checklists import routes as checklists_routes
from app.modules.feature_requests import routes as feature_requests_routes
from app.modules.ideas import routes as ideas_routes
from app.modules.notifications import routes as notifications_routes
from app.modules.posts import routes as posts_routes
from app.modules.users import routes as users_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)

app = FastAPI(title=settings.app_name, debug=settings.debug, redirect_slashes=False)
app.state.limiter = limiter
# slowapi renders its own {"error": "Rate limit exceeded: ..."} body with a 429
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
install_error_handlers(app, hide_internal_errors=settings.is_production)

# Last added runs first: CORS wraps the security headers, which wrap the limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware, headers=security_headers(settings.is_production))
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (
    auth_routes,
    users_routes,
    ideas_routes,
    checklists_routes,
    posts_routes,
    feature_requests_routes,
    notifications_routes,
):
    app.include_router(module.router, prefix=API_PREFIX)


@app.on_event("startup")
async def on_startup():
    logger.info("%s starting (%s)", settings.app_name, settings.environment)


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("%s stopped", settings.app_name)


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Ready once the settings point at a Supabase project."""
    if not settings.supabase_url or not settings.supabase_key:
        return JSONResponse(status_code=503, content={"status": "not ready", "error": "Supabase is not configured"})
    return {"status": "ready"}
