import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from template_registry.core.config import settings
from template_registry.core.middleware import apply_cors
from template_registry.routes import health_router, v1_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler.

    Logs configuration problems on startup; the Supabase client itself is
    created lazily on the first registry call.
    """
    logger.info("=== Template Registry Starting ===")

    if not settings.supabase_url or not settings.supabase_service_role_key:
        logger.warning("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not set; registry calls will fail")
    if not settings.build_token_secret:
        logger.warning("BUILD_TOKEN_SECRET not set; publish requests will be rejected")

    logger.info(
        f"Registry tables: templates={settings.templates_table}, "
        f"names={settings.template_names_table}, pipelines={settings.pipelines_table}"
    )
    logger.info("=== Template Registry Ready ===")

    yield

    logger.info("=== Template Registry Shutting Down ===")


app = FastAPI(title="Template Registry", lifespan=lifespan)
logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

apply_cors(app, settings)

app.include_router(health_router)
app.include_router(v1_router)
