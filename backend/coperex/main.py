from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from coperex.api.router import api_router
from coperex.core.config import settings
from coperex.core.logging import configure_logging, get_logger
from coperex.core.rate_limit import limiter
from coperex.db.init_db import check_connection, create_tables, seed_default_admin

configure_logging(settings.log_level)
logger = get_logger(__name__)


def _run_migrations_if_needed():
    """Apply Alembic migrations automatically in production if enabled.

    Controlled by AUTO_APPLY_MIGRATIONS (default on). Safe to run repeatedly.
    """
    if not settings.is_production or not settings.auto_apply_migrations:
        return
    from alembic import command
    from alembic.config import Config
    alembic_ini = Path(__file__).resolve().parents[1] / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found at %s, skipping auto-migrations", alembic_ini)
        return
    cfg = Config(str(alembic_ini))
    # Ensure script_location resolves correctly when launched from arbitrary CWD
    cfg.set_main_option("script_location", str(Path(__file__).resolve().parents[1] / "alembic"))
    logger.info("Applying Alembic migrations -> head")
    command.upgrade(cfg, "head")


app = FastAPI(title=settings.app_name, version="1.0.0")

origins = settings.cors_origins
logger.info("Resolved CORS origins: %s", origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(api_router, prefix=settings.api_prefix)


@app.on_event("startup")
def startup():
    try:
        check_connection()
    except SQLAlchemyError as e:
        logger.critical("Database connection failed: %s", e)
        raise SystemExit(1)
    _run_migrations_if_needed()
    if not settings.is_production:
        create_tables()
    seed_default_admin()
