"""Open-document bookkeeping and diagnostic publishing for an editing session."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Mapping

from lsprotocol.types import Diagnostic

from gherkin_analyzer.engine import AnalysisEngine
from gherkin_analyzer.rule_config import RuleConfiguration

logger = logging.getLogger(__name__)

PublishFunction = Callable[[str, list[Diagnostic]], None]


class DocumentSession:
    """Keeps the text of open documents and publishes their diagnostics.

    Analyses may run concurrently. Every analysis takes a ticket before it
    starts computing; a result is published only when no newer ticket for
    the same URI has been published already, so a slow stale analysis never
    overwrites a fresher one. Publishing for one URI never waits on another.

    Per-URI publishing state lives only as long as the document is open. A
    document remembers the ticket it was opened at, and results computed
    before that ticket are dropped, so reopening never resurrects a result
    from an earlier editing cycle.
    """

    def __init__(self, engine: AnalysisEngine, publish: PublishFunction):
        self._engine = engine
        self._publish = publish
        self._texts: dict[str, tuple[str, int]] = {}
        self._texts_lock = threading.Lock()
        self._tickets = itertools.count(1)
        self._tickets_lock = threading.Lock()
        self._uri_locks: dict[str, threading.Lock] = {}
        self._published: dict[str, int] = {}
        self._guard = threading.Lock()

    @property
    def engine(self) -> AnalysisEngine:
        return self._engine

    def open(self, uri: str, text: str) -> None:
        with self._texts_lock:
            previous = self._texts.get(uri)
            opened = previous[1] if previous is not None else self._take_ticket()
            self._texts[uri] = (text, opened)
        self._refresh(uri, text)

    def change(self, uri: str, text: str) -> None:
        self.open(uri, text)

    def save(self, uri: str) -> None:
        # Saves carry no new content under full-text sync.
        pass

    def close(self, uri: str) -> None:
        ticket = self._take_ticket()
        with self._texts_lock:
            self._texts.pop(uri, None)
        self._engine.remove_file(uri)
        self._deliver(uri, ticket, [], require_open=False)
        self._release(uri)

    def reconfigure(self, settings: Mapping[str, object] | None) -> None:
        self._engine.update_configuration(RuleConfiguration.from_settings(settings))
        for uri, text in self.open_documents().items():
            self._refresh(uri, text)

    def is_open(self, uri: str) -> bool:
        with self._texts_lock:
            return uri in self._texts

    def open_documents(self) -> dict[str, str]:
        with self._texts_lock:
            return {uri: text for uri, (text, _) in self._texts.items()}

    def tracked_uris(self) -> set[str]:
        """URIs that currently hold publishing state."""
        with self._guard:
            return set(self._uri_locks) | set(self._published)

    def _refresh(self, uri: str, text: str) -> None:
        ticket = self._take_ticket()
        diagnostics = self._engine.analyze_file(uri, text)
        self._deliver(uri, ticket, diagnostics)
        for target, extra in self._engine.cross_file_diagnostics().items():
            if target == uri:
                self._deliver(uri, ticket, diagnostics + extra)
                continue
            with self._texts_lock:
                entry = self._texts.get(target)
            if entry is None:
                continue
            other_ticket = self._take_ticket()
            other = self._engine.analyze_file(target, entry[0])
            self._deliver(target, other_ticket, other + extra)

    def _take_ticket(self) -> int:
        with self._tickets_lock:
            return next(self._tickets)

    def _lock_for(self, uri: str) -> threading.Lock:
        with self._guard:
            lock = self._uri_locks.get(uri)
            if lock is None:
                lock = self._uri_locks[uri] = threading.Lock()
            return lock

    def _release(self, uri: str) -> None:
        with self._guard:
            if self.is_open(uri):
                return
            self._uri_locks.pop(uri, None)
            self._published.pop(uri, None)

    def _deliver(
        self,
        uri: str,
        ticket: int,
        diagnostics: list[Diagnostic],
        require_open: bool = True,
    ) -> None:
        if require_open and not self.is_open(uri):
            return
        with self._lock_for(uri):
            still_open = self._publish_if_current(uri, ticket, diagnostics, require_open)
        if not still_open:
            self._release(uri)

    def _publish_if_current(
        self,
        uri: str,
        ticket: int,
        diagnostics: list[Diagnostic],
        require_open: bool,
    ) -> bool:
        """Publish unless a newer result went out; False when the document closed meanwhile."""
        if self._published.get(uri, 0) > ticket:
            logger.debug("dropping stale diagnostics for %s (ticket %d)", uri, ticket)
            return True
        if require_open:
            with self._texts_lock:
                entry = self._texts.get(uri)
            if entry is None:
                return False
            if ticket < entry[1]:
                logger.debug("dropping diagnostics from before %s was opened", uri)
                return True
        self._published[uri] = ticket
        self._publish(uri, diagnostics)
        return True
