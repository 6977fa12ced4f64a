# -*- test-case-name: earl.store.csv.test.test_csv -*-
"""
Extensions to :mod:`twisted.trial`
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from hypothesis import HealthCheck, settings
from twisted.logger import (
    ILogObserver,
    LogEvent,
    globalLogPublisher,
    formatEvent,
)
from twisted.trial.unittest import SynchronousTestCase as SuperTestCase
from zope.interface import implementer

from earl.model import User


__all__ = ("TestCase",)


# Configure Hypothesis
settings.register_profile(
    "ci",
    deadline=None,
    suppress_health_check=[
        HealthCheck.data_too_large,
        HealthCheck.too_slow,
    ],
)
settings.load_profile("ci")


@implementer(ILogObserver)
class _EventCollector:
    def __init__(self) -> None:
        self.events: list[LogEvent] = []

    def __call__(self, event: LogEvent) -> None:
        self.events.append(event)


class TestCase(SuperTestCase):
    """
    A unit test.
    """

    @contextmanager
    def capturedLogEvents(self) -> Iterator[list[LogEvent]]:
        """
        Collect events emitted to the global log publisher while the context
        is active.
        """
        collector = _EventCollector()
        globalLogPublisher.addObserver(collector)
        try:
            yield collector.events
        finally:
            globalLogPublisher.removeObserver(collector)

    def assertLogged(
        self, events: list[LogEvent], text: str, **fields: Any
    ) -> LogEvent:
        """
        Assert that one of the given events formats to text containing the
        given text and carries the given fields, and return that event.
        """
        for event in events:
            message = formatEvent(event)
            if text not in message:
                continue
            if all(event.get(k) == v for k, v in fields.items()):
                return event

        self.fail(
            f"No log event containing {text!r} with fields {fields!r} in: "
            f"{[formatEvent(e) for e in events]!r}"
        )

    def assertStartsWith(self, string: str, prefix: str) -> None:
        """
        Assert that the given string starts with the given prefix.
        """
        if len(prefix) < len(string):
            self.assertEqual(prefix, string[: len(prefix)])
        else:
            self.assertEqual(prefix, string)

    def assertUserEqual(self, userA: User, userB: User) -> None:
        """
        Assert that the given users are equal, reporting the first field that
        differs.
        """
        for name in (
            "name",
            "generatedName",
            "contactInfo",
            "level",
            "sponsors",
            "validFrom",
            "validTo",
            "codes",
        ):
            try:
                self.assertEqual(getattr(userA, name), getattr(userB, name))
            except self.failureException as e:
                self.fail(f"User.{name}: {e}")

        self.assertEqual(userA, userB)
