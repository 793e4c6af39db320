"""
Cache local — miroir du dernier enregistrement synchronisé ou en attente.

Utilisé uniquement comme repli en cas d'échec d'écriture distante, jamais
comme source de vérité.
"""
import hashlib
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from ..models import CachedRecord, SiteRecord

log = logging.getLogger(__name__)

KEY_PREFIX = "site_record:"


@runtime_checkable
class LocalCache(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryLocalCache:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self._data if k.startswith(prefix))


class FileLocalCache:
    """Une entrée = un fichier texte dans `root`, nommé d'après le sha1 de la clé."""

    def __init__(self, root: str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / (hashlib.sha1(key.encode("utf-8")).hexdigest() + ".json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self, prefix: str = "") -> List[str]:
        keys = []
        for path in sorted(self.root.glob("*.json")):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                owner_id = data["record"]["owner_id"]
            except (OSError, ValueError, KeyError, TypeError):
                continue
            key = cache_key(owner_id)
            if key.startswith(prefix):
                keys.append(key)
        return keys


# ── Helpers SiteRecord ────────────────────────────────────────────────────

def cache_key(owner_id: str) -> str:
    return f"{KEY_PREFIX}{owner_id}"


def write_cached_record(cache: LocalCache, record: SiteRecord, pending: bool) -> bool:
    """Écrit l'enregistrement dans le cache local. Retourne False si le cache est indisponible."""
    entry = CachedRecord(record=record, pending=pending)
    try:
        cache.set(cache_key(record.owner_id), entry.model_dump_json())
        return True
    except OSError as e:
        log.warning("Cache local indisponible pour %s : %s", record.owner_id, e)
        return False


def read_cached_record(cache: LocalCache, owner_id: str) -> Optional[CachedRecord]:
    try:
        raw = cache.get(cache_key(owner_id))
    except OSError as e:
        log.warning("Lecture cache local impossible pour %s : %s", owner_id, e)
        return None
    if not raw:
        return None
    try:
        entry = CachedRecord.model_validate_json(raw)
    except PydanticValidationError as e:
        log.warning("Entrée de cache corrompue pour %s — ignorée (%d erreur(s))", owner_id, e.error_count())
        return None
    if entry.record.owner_id != owner_id:
        log.warning("Entrée de cache de %s lue pour %s — ignorée", entry.record.owner_id, owner_id)
        return None
    return entry
