"""
Debouncer asyncio — retarde une action jusqu'à un silence de `delay` secondes.

schedule(fn) : (ré)arme le timer ; chaque appel remet le compteur à zéro
cancel()     : annule l'action en attente
flush()      : exécute immédiatement l'action en attente
"""
import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)


class Debouncer:
    def __init__(self, delay: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.delay = delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._fn: Optional[Callable[[], Any]] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, fn: Callable[[], Any]) -> None:
        """Lève RuntimeError hors d'une boucle asyncio si aucune boucle n'a été fournie."""
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._fn = fn
        self._handle = loop.call_later(self.delay, self._run)

    def cancel(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        self._fn = None
        return True

    def flush(self) -> bool:
        if self._handle is None:
            return False
        self._handle.cancel()
        self._run()
        return True

    def _run(self) -> None:
        fn, self._fn, self._handle = self._fn, None, None
        if fn is None:
            return
        result = fn()
        if inspect.isawaitable(result):
            asyncio.ensure_future(result)
