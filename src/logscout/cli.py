"""CLI entry point for logscout."""

from __future__ import annotations

from typing import Annotated

import typer
from botocore.exceptions import BotoCoreError

from logscout.app import LogScoutApp
from logscout.aws import CloudWatchLogService, create_client
from logscout.config import load_config
from logscout.logs import LogLevel, setup_logging
from logscout.utils import parse_time

app = typer.Typer(add_completion=False)

# Type aliases for AWS credential options
_AccessKey = Annotated[
    str | None, typer.Option("--aws-access-key-id", help="AWS access key ID", envvar="AWS_ACCESS_KEY_ID")
]
_SecretKey = Annotated[
    str | None, typer.Option("--aws-secret-access-key", help="AWS secret access key", envvar="AWS_SECRET_ACCESS_KEY")
]
_SessionToken = Annotated[
    str | None, typer.Option("--aws-session-token", help="AWS session token", envvar="AWS_SESSION_TOKEN")
]
_Profile = Annotated[str | None, typer.Option("--profile", help="AWS profile", envvar="AWS_PROFILE")]
_Region = Annotated[str | None, typer.Option("--aws-region", help="AWS region", envvar="AWS_DEFAULT_REGION")]
_EndpointUrl = Annotated[
    str | None, typer.Option("--aws-endpoint-url", help="AWS endpoint URL", envvar="AWS_ENDPOINT_URL")
]


def _validate_time(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        parse_time(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return value


@app.command()
def browse(  # noqa: PLR0913
    prefix: Annotated[str | None, typer.Argument(help="Only list log groups starting with this prefix")] = None,
    start: Annotated[
        str | None,
        typer.Option(
            "--start", "-s", help="Start time in UTC (5m, 1h, 2days, or ISO 8601)", callback=_validate_time
        ),
    ] = None,
    end: Annotated[
        str | None, typer.Option("--end", "-e", help="End time in UTC (default: now)", callback=_validate_time)
    ] = None,
    query: Annotated[str | None, typer.Option("--query", "-q", help="Logs Insights query string")] = None,
    message_key: Annotated[
        str | None, typer.Option("--message-key", "-m", help="Extract nested JSON key from each message")
    ] = None,
    log_level: Annotated[
        LogLevel,
        typer.Option("--log-level", help="Log file verbosity", envvar="LOGSCOUT_LOG_LEVEL", case_sensitive=False),
    ] = LogLevel.WARNING,
    aws_access_key_id: _AccessKey = None,
    aws_secret_access_key: _SecretKey = None,
    aws_session_token: _SessionToken = None,
    profile: _Profile = None,
    aws_region: _Region = None,
    aws_endpoint_url: _EndpointUrl = None,
) -> None:
    """Browse CloudWatch log groups and view their recent log lines."""
    setup_logging(log_level.value)
    config = load_config()
    overrides = {key: value for key, value in (("query", query), ("message_key", message_key)) if value}
    config = config.model_copy(update=overrides)

    try:
        client = create_client(
            region=aws_region,
            profile=profile,
            access_key=aws_access_key_id,
            secret_key=aws_secret_access_key,
            session_token=aws_session_token,
            endpoint_url=aws_endpoint_url,
        )
    except BotoCoreError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    source = " ".join(part for part in (profile, client.meta.region_name) if part)
    LogScoutApp(
        CloudWatchLogService(client),
        config,
        start=start,
        end=end,
        prefix=prefix,
        source=source,
    ).run()


def main() -> None:
    """Entry point for the CLI."""
    app()
