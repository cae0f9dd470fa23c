from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os

from .config import settings
from .database import engine, Base
from .formulas import FormulaError
from .routers import formulas, parts, cabinet_models

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("cabinet_formulas")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)


BASE_REVISION = "5a1e0c7d9b21"
ALEMBIC_INI = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")


def _run_migrations():
    """Bring the schema to head with Alembic.

    A database whose cabinet tables were made by create_all() but never
    stamped is marked as being at BASE_REVISION before upgrading.
    """
    try:
        from alembic.config import Config
        from alembic import command
        from sqlalchemy import inspect

        if not os.path.exists(ALEMBIC_INI):
            logger.info("No alembic.ini at %s, skipping migrations", ALEMBIC_INI)
            return

        alembic_cfg = Config(ALEMBIC_INI)
        alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

        tables = set(inspect(engine).get_table_names())
        if "alembic_version" not in tables and "cabinet_parts" in tables:
            logger.info("Cabinet tables predate Alembic, stamping %s", BASE_REVISION)
            command.stamp(alembic_cfg, BASE_REVISION)

        command.upgrade(alembic_cfg, "head")
        logger.info("Schema is at head")

    except Exception as e:
        # Startup continues on the create_all() schema
        logger.warning("Alembic migration failed: %s", e)


app = FastAPI(
    title=settings.APP_NAME,
    description="Parametric cabinet part dimensions from stored formulas",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FormulaError)
def formula_error_handler(request: Request, exc: FormulaError):
    return JSONResponse(status_code=422, content=exc.to_dict())


# API routes
app.include_router(formulas.router, prefix="/api")
app.include_router(parts.router, prefix="/api")
app.include_router(cabinet_models.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "cabinet-formulas"}


@app.on_event("startup")
def auto_migrate():
    """Run pending Alembic migrations on startup."""
    _run_migrations()


@app.on_event("startup")
def auto_seed():
    """Auto-seed the default part catalog on first run."""
    if not settings.SEED_ON_STARTUP:
        return
    from .database import SessionLocal
    db = SessionLocal()
    try:
        parts.seed_default_parts(db)
    finally:
        db.close()
