"""
Configuration site_composer — variables d'environnement + valeurs par défaut.
"""
import os
from pathlib import Path

DATA_DIR = Path(os.getenv("DATA_DIR", str(Path(__file__).parent.parent / "data")))

DB_PATH            = os.getenv("DB_PATH", str(DATA_DIR / "site_composer.db"))
CACHE_DIR          = os.getenv("CACHE_DIR", str(DATA_DIR / "cache"))
AUTOSAVE_DELAY_S   = float(os.getenv("AUTOSAVE_DELAY_S", "2.0"))
HISTORY_CAPACITY   = int(os.getenv("HISTORY_CAPACITY", "20"))
PUBLIC_BASE_URL    = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")
PUBLIC_PATH_PREFIX = "/tour"
CACHE_SYNC_MINUTES = int(os.getenv("CACHE_SYNC_MINUTES", "15"))
SCHEMA_VERSION     = 1

# Nom affiché tant que l'opérateur n'a pas renseigné son entreprise
PLACEHOLDER_COMPANY_NAME = "Votre agence"
PLACEHOLDER_TAGLINE      = "Découvrez des expériences culturelles uniques"
