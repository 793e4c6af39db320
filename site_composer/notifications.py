"""
Canal de notification — messages utilisateur "fire-and-forget".

Le moteur décide uniquement QUAND notifier ; le rendu (toast, bannière…)
appartient à l'interface.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional, Protocol, runtime_checkable

from .models import utcnow

log = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SAVE_SUCCESS    = "save_success"
    SAVE_ERROR      = "save_error"
    PUBLISH_SUCCESS = "publish_success"
    PUBLISH_ERROR   = "publish_error"


@dataclass(frozen=True)
class Notification:
    kind:       NotificationKind
    message:    str
    retryable:  bool = False
    created_at: datetime = field(default_factory=utcnow)


@runtime_checkable
class Notifier(Protocol):
    def notify(self, kind: NotificationKind, message: str, retryable: bool = False) -> None: ...


class LogNotifier:
    """Notifications vers le logger (défaut hors interface)."""

    def notify(self, kind: NotificationKind, message: str, retryable: bool = False) -> None:
        level = logging.WARNING if kind in (NotificationKind.SAVE_ERROR, NotificationKind.PUBLISH_ERROR) else logging.INFO
        log.log(level, "[%s] %s%s", kind.value, message, " (réessayer)" if retryable else "")


class RecordingNotifier(LogNotifier):
    """Conserve les derniers messages (lus par GET /status)."""

    def __init__(self, maxlen: int = 50):
        self._items: Deque[Notification] = deque(maxlen=maxlen)

    def notify(self, kind: NotificationKind, message: str, retryable: bool = False) -> None:
        super().notify(kind, message, retryable)
        self._items.append(Notification(kind=kind, message=message, retryable=retryable))

    @property
    def items(self) -> List[Notification]:
        return list(self._items)

    def last(self) -> Optional[Notification]:
        return self._items[-1] if self._items else None
