"""Incident reports built from a CloudFormation stack's event history."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import ApiError, StackNotFound
from ..utils.logging import get_logger
from .models import DeploymentEvent, IncidentReport, StackOutput

logger = get_logger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DeploymentEventAnalyzer:
    """
    Surfaces why a deployment failed.

    Works against a boto3 ``cloudformation`` client (or anything exposing
    ``describe_stacks`` and a ``describe_stack_events`` paginator). One
    blocking call per page, no retries: API failures surface as ``ApiError``.
    """

    def __init__(
        self,
        client: Any,
        region: Optional[str] = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.region = region
        self._clock = clock

    def analyze(self, stack_name: str, window: timedelta = DEFAULT_WINDOW) -> IncidentReport:
        observed_at = self._clock()
        stack = self._describe_stack(stack_name)

        events = self.chronological(self._fetch_events(stack_name))
        recent = self.within_window(events, observed_at, window)
        failures = [event for event in recent if event.is_failure]
        outputs = [StackOutput.from_api(item) for item in stack.get("Outputs") or []]

        logger.debug(
            "Stack %s: %d events, %d in window, %d failures",
            stack_name, len(events), len(recent), len(failures),
        )
        return IncidentReport(
            stack_name=stack_name,
            observed_at=observed_at,
            window=window,
            events=recent,
            failures=failures,
            outputs=outputs,
            stack_status=stack.get("StackStatus"),
            stack_id=stack.get("StackId"),
            region=self.region,
        )

    @staticmethod
    def chronological(events: List[DeploymentEvent]) -> List[DeploymentEvent]:
        """Reverse provider (newest-first) order, then stable-sort by time."""
        return sorted(reversed(events), key=lambda event: event.timestamp)

    @staticmethod
    def within_window(
        events: List[DeploymentEvent],
        observed_at: datetime,
        window: timedelta,
    ) -> List[DeploymentEvent]:
        return [event for event in events if observed_at - event.timestamp <= window]

    def _describe_stack(self, stack_name: str) -> Dict[str, Any]:
        try:
            response = self.client.describe_stacks(StackName=stack_name)
        except ClientError as exc:
            message, code = self._error_details(exc)
            if code == "ValidationError" and "does not exist" in message:
                raise StackNotFound(stack_name, self.region) from exc
            raise ApiError(message, stack_name, self.region) from exc
        except BotoCoreError as exc:
            raise ApiError(str(exc), stack_name, self.region) from exc

        stacks = response.get("Stacks") or []
        if not stacks:
            raise StackNotFound(stack_name, self.region)
        return stacks[0]

    def _fetch_events(self, stack_name: str) -> List[DeploymentEvent]:
        events: List[DeploymentEvent] = []
        try:
            paginator = self.client.get_paginator("describe_stack_events")
            for page in paginator.paginate(StackName=stack_name):
                events.extend(
                    DeploymentEvent.from_api(item) for item in page.get("StackEvents", [])
                )
        except ClientError as exc:
            message, _ = self._error_details(exc)
            raise ApiError(message, stack_name, self.region) from exc
        except BotoCoreError as exc:
            raise ApiError(str(exc), stack_name, self.region) from exc
        return events

    @staticmethod
    def _error_details(exc: ClientError) -> Tuple[str, str]:
        error = exc.response.get("Error", {})
        return error.get("Message") or str(exc), error.get("Code", "")
