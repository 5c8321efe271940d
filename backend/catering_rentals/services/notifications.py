"""Toast notifications — at most one visible at a time, auto-dismissed on expiry."""

import logging
import time
from collections.abc import Callable

from catering_rentals.schemas.notification import Redirect, Toast, ToastType

logger = logging.getLogger(__name__)

DEFAULT_TOAST_DURATION_MS = 3000


class NotificationCenter:
    """Holds the current toast for one session.

    Showing a toast replaces whatever was visible. Reading :attr:`current`
    after the toast's duration has elapsed dismisses it. The clock returns
    seconds and defaults to :func:`time.monotonic`.
    """

    def __init__(
        self,
        *,
        default_duration_ms: int = DEFAULT_TOAST_DURATION_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_duration_ms = default_duration_ms
        self._clock = clock
        self._toast: Toast | None = None
        self._shown_at = 0.0
        self.redirect: Redirect | None = None

    def show(self, message: str, type: ToastType = "success", duration_ms: int | None = None) -> Toast:
        toast = Toast(
            message=message,
            type=type,
            duration_ms=self.default_duration_ms if duration_ms is None else duration_ms,
        )
        self._toast = toast
        self._shown_at = self._clock()
        logger.debug("Toast (%s): %s", type, message)
        return toast

    def success(self, message: str) -> Toast:
        return self.show(message, "success")

    def error(self, message: str) -> Toast:
        return self.show(message, "error")

    def warning(self, message: str) -> Toast:
        return self.show(message, "warning")

    def dismiss(self) -> None:
        self._toast = None

    @property
    def current(self) -> Toast | None:
        if self._toast is None:
            return None
        elapsed_ms = (self._clock() - self._shown_at) * 1000
        if elapsed_ms >= self._toast.duration_ms:
            self._toast = None
        return self._toast

    def redirect_to(self, to: str, delay_ms: int) -> Redirect:
        self.redirect = Redirect(to=to, delay_ms=delay_ms)
        return self.redirect
