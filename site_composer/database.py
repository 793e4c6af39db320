"""SQLite — init + session + CRUD helpers (store distant des sites)"""
import json
from pathlib import Path
from typing import List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import DB_PATH
from .models import Base, SiteRecordDB, utcnow

Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)

ENGINE       = create_engine(f"sqlite:///{DB_PATH}", connect_args={"check_same_thread": False})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ENGINE)


def init_db(db_path: Optional[str] = None):
    """Crée les tables. Avec db_path, rebranche le moteur sur un autre fichier (tests)."""
    global ENGINE
    if db_path:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        ENGINE = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
        SessionLocal.configure(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def new_session() -> Session:
    """Session indépendante pour les écritures en arrière-plan."""
    return SessionLocal()


# ── JSON helpers ──
def jl(s: str) -> list:
    try:
        return json.loads(s or "[]")
    except ValueError:
        return []

def jd(o) -> str:
    return json.dumps(o, ensure_ascii=False)


# ── SiteRecord ──
def db_get_site_record(db: Session, owner_id: str) -> Optional[SiteRecordDB]:
    return db.query(SiteRecordDB).filter_by(owner_id=owner_id).first()

def db_get_by_slug(db: Session, slug: str) -> Optional[SiteRecordDB]:
    return db.query(SiteRecordDB).filter_by(published_slug=slug, published=True).first()

def db_list_site_records(db: Session) -> List[SiteRecordDB]:
    return db.query(SiteRecordDB).order_by(SiteRecordDB.last_modified.desc()).all()

def db_upsert_site_record(db: Session, owner_id: str, **kwargs) -> SiteRecordDB:
    """Écrasement aveugle (last-writer-wins, pas de jeton de concurrence)."""
    row = db_get_site_record(db, owner_id)
    if not row:
        row = SiteRecordDB(owner_id=owner_id)
        db.add(row)
    for k, v in kwargs.items():
        setattr(row, k, v)
    if "last_modified" not in kwargs:
        row.last_modified = utcnow()
    db.commit(); db.refresh(row); return row
