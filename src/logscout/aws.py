"""AWS CloudWatch Logs operations via boto3."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from logscout.errors import LogServiceError
from logscout.models import QueryPage, QueryRow, QueryStatus

if TYPE_CHECKING:
    from mypy_boto3_logs import CloudWatchLogsClient

logger = logging.getLogger(__name__)


def create_client(
    region: str | None = None,
    profile: str | None = None,
    access_key: str | None = None,
    secret_key: str | None = None,
    session_token: str | None = None,
    endpoint_url: str | None = None,
) -> CloudWatchLogsClient:
    """Create a boto3 CloudWatch Logs client."""
    session = boto3.Session(
        profile_name=profile,
        region_name=region,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        aws_session_token=session_token,
    )
    return session.client("logs", endpoint_url=endpoint_url)


def _describe(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "Error")
        message = error.get("Message", str(exc))
        return f"{code}: {message}"
    return str(exc)


class CloudWatchLogService:
    """Blocking CloudWatch Logs calls, with failures raised as LogServiceError."""

    def __init__(self, client: CloudWatchLogsClient) -> None:
        self._client = client

    def list_groups(self, prefix: str | None = None, next_token: str | None = None) -> tuple[list[str], str | None]:
        """Fetch one page of log group names and the continuation token, if any."""
        kwargs: dict[str, str] = {}
        if prefix:
            kwargs["logGroupNamePrefix"] = prefix
        if next_token:
            kwargs["nextToken"] = next_token
        try:
            response = self._client.describe_log_groups(**kwargs)  # type: ignore[arg-type]
        except (BotoCoreError, ClientError) as exc:
            raise LogServiceError(_describe(exc)) from exc
        names = [g["logGroupName"] for g in response.get("logGroups", []) if "logGroupName" in g]
        return names, response.get("nextToken")

    def start_query(self, log_group: str, start_ms: int, end_ms: int, query: str) -> str:
        """Submit a Logs Insights query and return its id."""
        logger.debug("Starting query on %s [%d, %d]: %s", log_group, start_ms, end_ms, query)
        try:
            response = self._client.start_query(
                logGroupName=log_group,
                startTime=start_ms // 1000,
                endTime=end_ms // 1000,
                queryString=query,
            )
        except (BotoCoreError, ClientError) as exc:
            raise LogServiceError(_describe(exc)) from exc
        query_id = response.get("queryId")
        if not query_id:
            msg = "start_query returned no query id"
            raise LogServiceError(msg)
        return query_id

    def poll_query(self, query_id: str) -> QueryPage:
        """Fetch the status and current rows of a submitted query."""
        try:
            response = self._client.get_query_results(queryId=query_id)
        except (BotoCoreError, ClientError) as exc:
            raise LogServiceError(_describe(exc)) from exc
        rows = [
            QueryRow(fields=[(f.get("field", ""), f.get("value", "")) for f in result])
            for result in response.get("results", [])
        ]
        return QueryPage(status=QueryStatus.parse(response.get("status")), rows=rows)
