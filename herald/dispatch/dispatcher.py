"""Command dispatch pipeline.

Each accepted delivery runs through::

    Received -> Parsed -> {no command: end
                           | Dispatched -> {unauthorised: end
                                            | Executed -> end}}

The dispatcher never retries across these states and does not deduplicate
repeated deliveries; GitHub's delivery semantics apply unchanged.

Usage
-----
Dispatch inline (tests, scripts)::

    outcome = await dispatcher.dispatch(event)

Dispatch in the background from the webhook receiver::

    dispatcher.submit(event)
    ...
    await dispatcher.drain(timeout=30.0)

"""

from __future__ import annotations

import asyncio
import dataclasses
import datetime as dt
import enum
import time
import typing as typ

from herald.commands.errors import InsufficientPermissionError
from herald.commands.parser import parse_command
from herald.github.errors import ExternalAPIError
from herald.logging import get_logger, log_exception, log_info, log_warning
from herald.permissions import PermissionLevel

from .observability import DispatchEventLogger

if typ.TYPE_CHECKING:
    from herald.commands.parser import Command
    from herald.commands.registry import CommandRegistry, HandlerSpec
    from herald.github.client import GitHubIssuesClient
    from herald.webhook.models import Event

logger = get_logger(__name__)


class DispatchOutcome(enum.StrEnum):
    """Terminal state reached by one event."""

    NO_COMMAND = "no_command"
    UNKNOWN_COMMAND = "unknown_command"
    UNAUTHORIZED = "unauthorized"
    EXECUTED = "executed"
    FAILED = "failed"


class DispatcherDrainingError(RuntimeError):
    """Raised by :meth:`Dispatcher.submit` once shutdown has begun."""

    def __init__(self) -> None:
        """Initialise with a fixed message."""
        super().__init__("Dispatcher is draining; new events are refused")


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchPolicy:
    """Per-process dispatch settings.

    Attributes
    ----------
    handler_timeout_s
        Deadline for one handler invocation; expiry counts as an API error.
    report_failures
        Post a follow-up comment when a handler fails.
    deny_message
        Reply posted to actors lacking permission; ``None`` keeps denials
        silent.

    """

    handler_timeout_s: float = 10.0
    report_failures: bool = False
    deny_message: str | None = None


class Dispatcher:
    """Resolve parsed commands against the registry and run their handlers.

    Parameters
    ----------
    registry
        Frozen command registry shared for the process lifetime.
    client
        Client used for reactions, permission lookups and notices.
    policy
        Timeout and notification settings.
    event_logger
        Structured event sink; a default instance is created when omitted.

    """

    def __init__(
        self,
        registry: CommandRegistry,
        client: GitHubIssuesClient,
        *,
        policy: DispatchPolicy | None = None,
        event_logger: DispatchEventLogger | None = None,
    ) -> None:
        """Bind the dispatcher to its registry, client and policy."""
        self._registry = registry
        self._client = client
        self._policy = policy or DispatchPolicy()
        self._events = event_logger or DispatchEventLogger()
        self._tasks: set[asyncio.Task[DispatchOutcome]] = set()
        self._draining = False

    @property
    def registry(self) -> CommandRegistry:
        """Return the registry commands are resolved against."""
        return self._registry

    @property
    def in_flight(self) -> int:
        """Return the number of submitted events still being processed."""
        return len(self._tasks)

    @property
    def draining(self) -> bool:
        """Return True once :meth:`drain` has been called."""
        return self._draining

    async def dispatch(self, event: Event) -> DispatchOutcome:
        """Run the pipeline for *event* and return its outcome.

        ``ExternalAPIError`` and ``InsufficientPermissionError`` are handled
        here and reported through the outcome.
        """
        command = parse_command(event.body)
        if command is None:
            return DispatchOutcome.NO_COMMAND

        spec = self._registry.lookup(command.token)
        if spec is None:
            self._events.log_unknown_command(event, command.token)
            return DispatchOutcome.UNKNOWN_COMMAND

        try:
            await self._authorize(spec, event)
        except InsufficientPermissionError as exc:
            self._events.log_unauthorized(event, spec.token, exc.held, exc.required)
            await self._post_notice(event, self._policy.deny_message, "denial")
            return DispatchOutcome.UNAUTHORIZED

        await self._acknowledge(spec, event)

        started = time.monotonic()
        try:
            await self._invoke(spec, event, command)
        except ExternalAPIError as exc:
            self._events.log_failed(event, spec.token, exc, _elapsed(started))
            if self._policy.report_failures:
                notice = f"`/{spec.token}` could not be completed: {exc}"
                await self._post_notice(event, notice, "failure")
            return DispatchOutcome.FAILED

        self._events.log_executed(event, spec.token, _elapsed(started))
        return DispatchOutcome.EXECUTED

    def submit(self, event: Event) -> asyncio.Task[DispatchOutcome]:
        """Schedule :meth:`dispatch` for *event* on the running loop.

        Returns immediately; the task is tracked until it finishes so that
        :meth:`drain` can wait for it.

        Raises
        ------
        DispatcherDrainingError
            If the dispatcher is shutting down.

        """
        if self._draining:
            raise DispatcherDrainingError

        task = asyncio.get_running_loop().create_task(
            self._run(event),
            name=f"dispatch-{event.delivery_id or event.comment_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self, timeout: float | None = None) -> int:
        """Refuse new events and wait for in-flight ones to finish.

        Tasks still running after *timeout* are left untouched rather than
        cancelled, so a handler is never interrupted between its reaction and
        its effect.

        Returns
        -------
        int
            Number of events still running when the wait ended.

        """
        self._draining = True
        pending = set(self._tasks)
        if not pending:
            return 0

        log_info(logger, "Draining %d in-flight dispatches", len(pending))
        _done, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            log_warning(
                logger,
                "Drain timed out with %d dispatches still running",
                len(still_running),
            )
        return len(still_running)

    async def _run(self, event: Event) -> DispatchOutcome:
        try:
            return await self.dispatch(event)
        except Exception as exc:  # noqa: BLE001 - one event must not affect others
            log_exception(
                logger,
                f"Unhandled error dispatching comment {event.comment_id} "
                f"on {event.repository}#{event.issue_number}",
                exc,
            )
            return DispatchOutcome.FAILED

    async def _authorize(self, spec: HandlerSpec, event: Event) -> None:
        held = event.permission
        if held is None:
            held = await self._resolve_permission(event)
        if not held.at_least(spec.permission):
            raise InsufficientPermissionError(
                event.actor, spec.token, str(held), str(spec.permission)
            )

    async def _resolve_permission(self, event: Event) -> PermissionLevel:
        try:
            return await self._client.get_permission_level(
                event.repository, event.actor
            )
        except ExternalAPIError as exc:
            log_warning(
                logger,
                "Permission lookup for %s on %s failed; treating as none: %s",
                event.actor,
                event.repository,
                exc,
            )
            return PermissionLevel.NONE

    async def _acknowledge(self, spec: HandlerSpec, event: Event) -> None:
        if spec.reaction is None:
            return
        try:
            await self._client.add_reaction(
                event.repository, event.comment_id, spec.reaction
            )
        except ExternalAPIError as exc:
            self._events.log_reaction_failed(event, spec.token, exc)

    async def _invoke(self, spec: HandlerSpec, event: Event, command: Command) -> None:
        try:
            async with asyncio.timeout(self._policy.handler_timeout_s):
                await spec.handler.handle(event, command)
        except TimeoutError as exc:
            raise ExternalAPIError.timeout(f"/{spec.token} handler") from exc

    async def _post_notice(self, event: Event, body: str | None, purpose: str) -> None:
        if body is None:
            return
        try:
            await self._client.create_comment(
                event.repository, event.issue_number, body
            )
        except ExternalAPIError as exc:
            self._events.log_reply_failed(event, purpose, exc)


def _elapsed(started: float) -> dt.timedelta:
    return dt.timedelta(seconds=time.monotonic() - started)
