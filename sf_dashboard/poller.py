"""
Notification Poller — keeps one role-scoped notification feed fresh.

Lifecycle per consumer:
    unbound → bind(role) → fetch now, then every `interval` seconds
            → bind(other role)   old timer stopped before the new one starts
            → unbind() / close() timer stopped, no further fetches

Every fetch is tagged with the binding it was issued under; a response that
lands after the binding changed is dropped. Each accepted response replaces
the whole feed. Fetch errors are logged, leave the feed empty and do not
stop the timer.

Schedulers: IntervalScheduler (one daemon thread per handle) or
DueScheduler, which runs nothing until its owner calls run_due().
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count

from sf_dashboard import config
from sf_dashboard.models import Notification
from sf_dashboard.roles import Role
from sf_dashboard.session_store import DISTRICT_ID_KEY, SCHOOL_ID_KEY, USER_ID_KEY

logger = logging.getLogger("poller")
logger.setLevel(logging.INFO)

# Storage key holding the id each role's feed is scoped to (None → unscoped).
SCOPE_KEYS: dict[Role, str | None] = {
    Role.DISTRICT: DISTRICT_ID_KEY,
    Role.SCHOOL: SCHOOL_ID_KEY,
    Role.SUPPLIER: USER_ID_KEY,
    Role.STOCK: SCHOOL_ID_KEY,
    Role.GOVERNMENT: None,
    Role.ADMIN: None,
}


# ════════════════════════════════════════════
# Scheduling
# ════════════════════════════════════════════

class PollHandle:
    """Owned handle for one running interval timer."""

    def __init__(self):
        self._stopped = threading.Event()

    @property
    def active(self) -> bool:
        return not self._stopped.is_set()

    def stop(self) -> None:
        self._stopped.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout`; True once the handle has been stopped."""
        return self._stopped.wait(timeout)


class IntervalScheduler:
    """Runs `callback` every `interval` seconds on a daemon thread per handle."""

    def start(self, callback: Callable[[], None], interval: float) -> PollHandle:
        handle = PollHandle()

        def _loop():
            while not handle.wait(interval):
                callback()

        threading.Thread(target=_loop, name="notification-poll", daemon=True).start()
        return handle


class DueScheduler:
    """Runs due callbacks only when the owner calls `run_due()`.

    For UI loops that already re-render on a timer (a Streamlit fragment):
    no thread is started, so polling ends when the owning session stops
    calling `run_due()`.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._jobs: list[list] = []  # [handle, callback, interval, next_due]

    def start(self, callback: Callable[[], None], interval: float) -> PollHandle:
        handle = PollHandle()
        self._jobs.append([handle, callback, interval, self._clock() + interval])
        return handle

    def run_due(self) -> None:
        self._jobs = [job for job in self._jobs if job[0].active]
        for job in list(self._jobs):
            handle, callback, interval, due = job
            now = self._clock()
            if handle.active and now >= due:
                job[3] = now + interval
                callback()


# ════════════════════════════════════════════
# Poller
# ════════════════════════════════════════════

@dataclass(frozen=True)
class Binding:
    role: Role
    scope_id: str | None
    tag: int = field(compare=False)


class NotificationPoller:
    """Polls `fetch(role, scope_id)` for the currently bound role."""

    def __init__(self, fetch, store, interval: float = config.POLL_INTERVAL, scheduler=None):
        self._fetch = fetch
        self._store = store
        self.interval = interval
        self._scheduler = scheduler or IntervalScheduler()
        self._lock = threading.Lock()
        self._tags = count(1)
        self._binding: Binding | None = None
        self._handle: PollHandle | None = None
        self._feed: tuple[Notification, ...] = ()
        self._loading = False
        self._error: str | None = None

    # ── read-only views ──

    @property
    def role(self) -> Role | None:
        binding = self._binding
        return binding.role if binding else None

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._feed

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._feed if not n.read)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    # ── binding ──

    def bind(self, role: Role | str | None) -> None:
        if role is None:
            self.unbind()
            return
        try:
            role = Role(role)
        except ValueError:
            logger.warning("Unknown role %r, notifications disabled", role)
            self.unbind()
            return

        scope_key = SCOPE_KEYS[role]
        scope_id = self._store.scope_id(scope_key) if scope_key else None

        with self._lock:
            current = self._binding
            if current is not None and current.role == role and current.scope_id == scope_id:
                return
            self._cancel_locked()
            binding = Binding(role, scope_id, next(self._tags))
            self._binding = binding
            self._feed = ()
            self._loading = False
            self._error = None

        if scope_key and not scope_id:
            logger.info("No %s stored; %s notifications skipped", scope_key, role.value)
            return

        self._run(binding)
        with self._lock:
            if self._binding is binding:
                self._handle = self._scheduler.start(lambda: self._run(binding), self.interval)

    def unbind(self) -> None:
        with self._lock:
            self._cancel_locked()
            self._binding = None
            self._feed = ()
            self._loading = False
            self._error = None

    close = unbind

    def refresh(self) -> None:
        """Fetch immediately for the current binding (no-op when unbound)."""
        binding = self._binding
        if binding is None:
            return
        if SCOPE_KEYS[binding.role] and not binding.scope_id:
            return
        self._run(binding)

    def _cancel_locked(self) -> None:
        if self._handle is not None:
            self._handle.stop()
            self._handle = None

    # ── fetching ──

    def _run(self, binding: Binding) -> None:
        with self._lock:
            if self._binding is not binding:
                return
            self._loading = True
        try:
            feed = tuple(self._fetch(binding.role, binding.scope_id))
            error = None
        except Exception as exc:
            logger.exception("Notification fetch failed (%s)", binding.role.value)
            feed, error = (), str(exc) or "Failed to fetch notifications"

        with self._lock:
            if self._binding is not binding:
                logger.info("Dropped stale %s notifications", binding.role.value)
                return
            self._feed = feed
            self._error = error
            self._loading = False
