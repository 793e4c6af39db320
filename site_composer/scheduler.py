"""
Tâches de fond site_composer (APScheduler, BackgroundScheduler).

Un seul job : SYNC_JOB_ID rejoue toutes les CACHE_SYNC_MINUTES les
enregistrements restés en attente dans le cache fichier. L'état du scheduler
est exposé par GET /api/composer/jobs, le job peut être forcé par
POST /api/composer/jobs/sync.
"""
import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from .config import CACHE_DIR, CACHE_SYNC_MINUTES
from .persistence import FileLocalCache, SqlPersistenceStore, sync_pending_records

log = logging.getLogger(__name__)

SYNC_JOB_ID = "sync_pending_cache"

_scheduler: Optional[BackgroundScheduler] = None


def start_scheduler(cache_dir: Optional[str] = None) -> BackgroundScheduler:
    """Démarre le scheduler si besoin et le renvoie."""
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        return _scheduler

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        sync_cache_now,
        trigger=IntervalTrigger(minutes=CACHE_SYNC_MINUTES),
        kwargs={"cache_dir": cache_dir},
        id=SYNC_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=300,
    )
    scheduler.start()
    _scheduler = scheduler
    log.info("Scheduler démarré (resync du cache toutes les %d min)", CACHE_SYNC_MINUTES)
    return scheduler


def stop_scheduler():
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
        log.info("Scheduler arrêté")
    _scheduler = None


def scheduler_status() -> dict:
    """
    État courant : {"running": bool, "jobs": [{"id", "next_run", "trigger"}]}.
    `next_run` est une date ISO, ou None pour un job en pause.
    """
    if _scheduler is None or not _scheduler.running:
        return {"running": False, "jobs": []}
    jobs = []
    for job in _scheduler.get_jobs():
        jobs.append({
            "id":       job.id,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger":  str(job.trigger),
        })
    return {"running": True, "jobs": jobs}


def sync_cache_now(cache_dir: Optional[str] = None) -> dict:
    """
    Rejoue les écritures en attente du cache fichier vers la DB.
    Renvoie les compteurs de sync_pending_records, ou {"error": ...}.
    """
    try:
        stats = sync_pending_records(FileLocalCache(cache_dir or CACHE_DIR), SqlPersistenceStore())
    except (OSError, SQLAlchemyError) as e:
        log.warning("Resync du cache en échec : %s", e)
        return {"error": str(e)}
    if stats["checked"]:
        log.info("Resync du cache : %s", stats)
    return stats
