import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flightbook.api.errors import register_exception_handlers
from flightbook.api.router import api_router
from flightbook.core.config import settings
from flightbook.db.init_db import create_tables, seed_demo_data

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parents[1]


def _run_migrations_if_needed():
    """Apply Alembic migrations to head when running in production.

    Controlled by AUTO_APPLY_MIGRATIONS (default '1'). Upgrading is idempotent.
    """
    if settings.env.lower() != "prod":
        return
    if os.getenv("AUTO_APPLY_MIGRATIONS", "1") != "1":
        return
    from alembic import command
    from alembic.config import Config

    alembic_ini = BACKEND_DIR / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found at %s, skipping migrations", alembic_ini)
        return
    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    logger.info("applying migrations -> head")
    try:
        command.upgrade(cfg, "head")
    except Exception:
        # keep serving; the upgrade can be retried with `alembic upgrade head`
        logger.exception("migration failed")
        return
    logger.info("migrations applied")


app = FastAPI(title=settings.app_name, version="0.1.0")

origins = settings.cors_origins
logger.info("CORS origins: %s", origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router)


@app.on_event("startup")
def startup():
    _run_migrations_if_needed()
    if settings.env.lower() in {"dev", "development"}:
        create_tables()
        seed_demo_data()
