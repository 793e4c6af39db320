"""
SITE_COMPOSER — FastAPI app
Démarrer : uvicorn site_composer.api.main:app --reload --port 8002
"""
import logging, os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .routes.composer import close_sessions, router as composer_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s — %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="SITE_COMPOSER — Éditeur de site par blocs", version=__version__, docs_url="/docs")

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.on_event("startup")
def startup():
    from ..database import init_db
    init_db(os.getenv("DB_PATH"))
    log.info("DB initialisée (SQLite)")

    # Scheduler — resynchronisation du cache local (désactivable pour les tests)
    if os.getenv("SCHEDULER_ENABLED", "1") != "0":
        try:
            from ..scheduler import start_scheduler
            start_scheduler(os.getenv("CACHE_DIR"))
        except Exception as e:
            log.warning("Scheduler non démarré : %s", e)


@app.on_event("shutdown")
async def shutdown():
    await close_sessions()
    from ..scheduler import stop_scheduler
    stop_scheduler()


@app.get("/health")
def health():
    return {"status": "ok", "service": "site_composer", "version": __version__}


app.include_router(composer_router)
