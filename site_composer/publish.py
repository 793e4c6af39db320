"""
Publish Pipeline — validation des préconditions, slug public stable, publication.

Préconditions (dans l'ordre, la première qui échoue l'emporte) :
  1. une session utilisateur existe
  2. le nom de l'entreprise a été renseigné (différent du placeholder)

Slug : nom en minuscules, suites de caractères non alphanumériques → "-",
tirets de bord retirés, puis suffixe stable dérivé de l'identifiant de compte.
Même nom + même compte → même slug (republication idempotente).
"""
import hashlib
import logging
import re
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel

from .config import PLACEHOLDER_COMPANY_NAME, PUBLIC_BASE_URL, PUBLIC_PATH_PREFIX
from .core.events import Topic
from .errors import PersistenceError, ValidationError
from .models import SiteFields
from .notifications import NotificationKind

if TYPE_CHECKING:
    from .session import EditorSession, UserSession

log = logging.getLogger(__name__)

FRAGMENT_LENGTH = 8
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class PublishResult(BaseModel):
    slug:      str
    url:       str
    published: bool = True


def slugify(name: str) -> str:
    slug = _NON_ALNUM.sub("-", (name or "").lower()).strip("-")
    return slug or "site"


def account_fragment(account_id: str) -> str:
    return hashlib.sha1(account_id.encode("utf-8")).hexdigest()[:FRAGMENT_LENGTH]


def derive_slug(name: str, account_id: str) -> str:
    return f"{slugify(name)}-{account_fragment(account_id)}"


def public_url(slug: str, base_url: Optional[str] = None) -> str:
    base = PUBLIC_BASE_URL if base_url is None else base_url.rstrip("/")
    return f"{base}{PUBLIC_PATH_PREFIX}/{slug}"


def check_preconditions(user: Optional["UserSession"], site: SiteFields) -> None:
    """Lève ValidationError si la publication n'est pas possible. Aucune écriture."""
    if user is None or not user.account_id:
        raise ValidationError("Connexion requise pour publier le site")
    name = (site.company_name or "").strip()
    if not name or name == PLACEHOLDER_COMPANY_NAME:
        raise ValidationError(
            "Renseignez le nom de votre entreprise avant de publier "
            f"(actuellement : {site.company_name!r})"
        )


async def publish(session: "EditorSession", base_url: Optional[str] = None) -> PublishResult:
    """
    Publie le site de la session via le même chemin d'écriture que l'autosave.

    Raises:
        ValidationError:  préconditions non remplies (rien n'est écrit)
        PersistenceError: écriture distante en échec (flags de publication rétablis)
    """
    check_preconditions(session.user, session.site)
    slug = derive_slug(session.site.company_name.strip(), session.user.account_id)

    previous = (session.site.published, session.site.published_slug)
    session.site.published = True
    session.site.published_slug = slug

    if not await session.autosave.save_now(notify=False):
        session.site.published, session.site.published_slug = previous
        session.autosave.stash()
        session.notifier.notify(NotificationKind.PUBLISH_ERROR, "La publication a échoué — réessayez", retryable=True)
        raise PersistenceError(f"Publication de {session.owner_id} non enregistrée")

    url = public_url(slug, base_url)
    log.info("Site %s publié : %s", session.owner_id, url)
    session.notifier.notify(NotificationKind.PUBLISH_SUCCESS, f"Site publié : {url}")
    session.bus.publish(Topic.PUBLISHED, slug=slug, url=url, published=True)
    return PublishResult(slug=slug, url=url)


async def unpublish(session: "EditorSession") -> bool:
    """Retire le site de la publication. Le slug est conservé pour une republication stable."""
    if session.user is None:
        raise ValidationError("Connexion requise pour dépublier le site")
    if not session.site.published:
        return False
    session.site.published = False
    if not await session.autosave.save_now(notify=False):
        session.site.published = True
        session.autosave.stash()
        raise PersistenceError(f"Dépublication de {session.owner_id} non enregistrée")
    session.bus.publish(Topic.PUBLISHED, slug=session.site.published_slug, url=None, published=False)
    return True
