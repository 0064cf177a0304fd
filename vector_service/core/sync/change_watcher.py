"""
Change-stream watcher.

Runs the CDC watch loop on a background thread as an explicit state machine:

    STOPPED -> CONNECTING -> WATCHING -> ERROR -> RECONNECTING -> CONNECTING ...

Events are applied one at a time in arrival order. A failing event is logged
and counted without leaving WATCHING. Feed failures trigger reconnection with
a fixed or bounded exponential delay; when attempts run out the watcher stops
and keeps the last error for health reporting.

Dependencies: threading (stdlib), vector_service.core.sync.sync_engine
System role: Continuous incremental synchronization
"""

import logging
import threading
from enum import Enum
from typing import Literal

from pydantic import BaseModel

from vector_service.boundary.source.base import ChangeFeed
from vector_service.boundary.source.source_schemas import ChangeEvent
from vector_service.core.exceptions import FeedError
from vector_service.core.sync.sync_engine import SyncEngine, SyncOptions
from vector_service.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class WatcherState(str, Enum):
    STOPPED = "stopped"
    CONNECTING = "connecting"
    WATCHING = "watching"
    ERROR = "error"
    RECONNECTING = "reconnecting"


class WatcherStatus(BaseModel):
    """Non-blocking snapshot of the watcher."""

    is_running: bool
    state: WatcherState
    reconnect_attempts: int
    max_reconnect_attempts: int
    connected: bool
    has_change_stream: bool
    last_error: str | None = None
    events_processed: int = 0
    events_failed: int = 0
    options: SyncOptions


class ChangeStreamWatcher:
    """Applies change-feed events to the vector index through a SyncEngine."""

    def __init__(
        self,
        feed: ChangeFeed,
        engine: SyncEngine,
        options: SyncOptions | None = None,
        max_reconnect_attempts: int = 10,
        reconnect_delay_seconds: float = 5.0,
        backoff: Literal["fixed", "exponential"] = "fixed",
        max_reconnect_delay_seconds: float = 60.0,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            feed: Re-openable change feed
            engine: Sync engine applying each event
            options: Field mapping and chunking parameters
            max_reconnect_attempts: Consecutive failed attempts before stopping
            reconnect_delay_seconds: Base delay between attempts
            backoff: fixed or exponential delay growth
            max_reconnect_delay_seconds: Cap for exponential delays
        """
        self._feed = feed
        self._engine = engine
        self._options = options or SyncOptions()
        self._max_attempts = max_reconnect_attempts
        self._base_delay = reconnect_delay_seconds
        self._backoff = backoff
        self._max_delay = max_reconnect_delay_seconds

        self._state = WatcherState.STOPPED
        self._attempts = 0
        self._last_error: str | None = None
        self._events_processed = 0
        self._events_failed = 0

        self._condition = threading.Condition()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> WatcherState:
        with self._condition:
            return self._state

    def _set_state(self, state: WatcherState) -> None:
        with self._condition:
            if self._state is not state:
                logger.info(
                    f"{__name__}:_set_state - {self._state.value} -> {state.value}",
                    extra={"reconnect_attempts": self._attempts},
                )
            self._state = state
            self._condition.notify_all()

    def is_running(self) -> bool:
        return self.state is not WatcherState.STOPPED

    def start(self) -> None:
        """Start watching in a background thread. No-op when already running."""
        with self._condition:
            if self._thread is not None and self._thread.is_alive():
                logger.warning(f"{__name__}:start - Change stream watcher is already running")
                return
            self._stop_event = threading.Event()
            self._attempts = 0
            self._last_error = None
            self._state = WatcherState.CONNECTING
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="change-stream-watcher",
                daemon=True,
            )
            self._thread.start()
        logger.info(f"{__name__}:start - Change stream watcher starting")

    def stop(self, timeout: float | None = 10.0) -> None:
        """
        Stop watching and close the feed.

        Safe to call from any state, repeatedly, or before start() finishes.
        """
        with self._condition:
            thread = self._thread
            self._stop_event.set()

        self._feed.close()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning(f"{__name__}:stop - Watcher thread did not exit within {timeout}s")

        with self._condition:
            self._thread = None
        self._set_state(WatcherState.STOPPED)

    def wait_for_state(self, state: WatcherState, timeout: float | None = None) -> bool:
        """Block until the watcher reaches state. Returns False on timeout."""
        with self._condition:
            return self._condition.wait_for(lambda: self._state is state, timeout)

    def _reconnect_delay(self) -> float:
        if self._backoff == "exponential":
            return min(self._base_delay * 2 ** (self._attempts - 1), self._max_delay)
        return self._base_delay

    def _handle_feed_failure(self, error: Exception, stop_event: threading.Event) -> bool:
        """
        Move through ERROR and RECONNECTING.

        Returns:
            bool: True to retry, False to stop
        """
        with self._condition:
            self._last_error = str(error)
        self._set_state(WatcherState.ERROR)
        logger.error(f"{__name__}:_handle_feed_failure - Change stream error: {error}")
        self._feed.close()

        if stop_event.is_set():
            return False
        if self._attempts >= self._max_attempts:
            logger.error(
                f"{__name__}:_handle_feed_failure - Max reconnection attempts reached, "
                f"stopping change stream watcher",
                extra={"max_attempts": self._max_attempts},
            )
            return False

        with self._condition:
            self._attempts += 1
        delay = self._reconnect_delay()
        self._set_state(WatcherState.RECONNECTING)
        logger.warning(
            f"{__name__}:_handle_feed_failure - Attempting to reconnect change stream",
            extra={"attempt": self._attempts, "max_attempts": self._max_attempts, "delay_s": delay},
        )
        return not stop_event.wait(delay)

    def _dispatch(self, event: ChangeEvent) -> None:
        try:
            self._engine.handle_change_event(event, self._options)
        except Exception as e:
            with self._condition:
                self._events_failed += 1
            log_exception_with_context(
                logger,
                f"{__name__}:_dispatch - Error processing change event",
                e,
                doc_id=event.document_id,
                operation_type=event.operation_type.value,
            )
            return
        with self._condition:
            self._events_processed += 1

    def _watch(self, stop_event: threading.Event) -> None:
        """Read and apply events until stopped. Raises FeedError on feed failure."""
        self._set_state(WatcherState.CONNECTING)
        self._feed.open()
        with self._condition:
            self._attempts = 0
        self._set_state(WatcherState.WATCHING)

        while not stop_event.is_set():
            event = self._feed.next_event()
            if event is not None and not stop_event.is_set():
                self._dispatch(event)

    def _run(self, stop_event: threading.Event) -> None:
        try:
            while not stop_event.is_set():
                try:
                    self._watch(stop_event)
                except FeedError as e:
                    if stop_event.is_set() or not self._handle_feed_failure(e, stop_event):
                        break
        except Exception as e:
            with self._condition:
                self._last_error = str(e)
            log_exception_with_context(logger, f"{__name__}:_run - Watcher crashed", e)
        finally:
            self._feed.close()
            self._set_state(WatcherState.STOPPED)
            logger.info(f"{__name__}:_run - Change stream watcher stopped")

    def status(self) -> WatcherStatus:
        with self._condition:
            return WatcherStatus(
                is_running=self._state is not WatcherState.STOPPED,
                state=self._state,
                reconnect_attempts=self._attempts,
                max_reconnect_attempts=self._max_attempts,
                connected=self._feed.connected,
                has_change_stream=self._feed.has_stream,
                last_error=self._last_error,
                events_processed=self._events_processed,
                events_failed=self._events_failed,
                options=self._options,
            )

    def health_check(self) -> bool:
        """True when the watcher is watching and the source answers a ping."""
        return self.state is WatcherState.WATCHING and self._feed.ping()
