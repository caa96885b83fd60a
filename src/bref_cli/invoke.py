"""Remote invocation of a deployed Lambda function."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .errors import ApiError, InvocationError
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class InvocationResult:
    function: str
    status_code: int
    payload: Any
    logs: Optional[str] = None


class FunctionInvoker:
    """Sends an event to a Lambda function and returns its decoded response."""

    def __init__(self, client: Any, region: Optional[str] = None) -> None:
        self.client = client
        self.region = region

    def invoke(
        self,
        function: str,
        event: Optional[Dict[str, Any]] = None,
        *,
        include_logs: bool = False,
    ) -> InvocationResult:
        kwargs: Dict[str, Any] = {
            "FunctionName": function,
            "InvocationType": "RequestResponse",
            "Payload": json.dumps(event or {}).encode("utf-8"),
        }
        if include_logs:
            kwargs["LogType"] = "Tail"

        logger.debug("Invoking %s", function)
        try:
            response = self.client.invoke(**kwargs)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            raise ApiError(error.get("Message") or str(exc), region=self.region) from exc
        except BotoCoreError as exc:
            raise ApiError(str(exc), region=self.region) from exc

        raw = response["Payload"].read().decode("utf-8")
        logs = None
        if response.get("LogResult"):
            logs = base64.b64decode(response["LogResult"]).decode("utf-8", errors="replace")

        try:
            payload = json.loads(raw) if raw else None
        except json.JSONDecodeError as exc:
            raise InvocationError(function, f"response is not valid JSON: {raw[:200]}") from exc

        if response.get("FunctionError"):
            message = payload.get("errorMessage") if isinstance(payload, dict) else None
            raise InvocationError(function, message or response["FunctionError"])
        if payload is None:
            raise InvocationError(function, "empty response")

        return InvocationResult(
            function=function,
            status_code=response.get("StatusCode", 0),
            payload=payload,
            logs=logs,
        )
