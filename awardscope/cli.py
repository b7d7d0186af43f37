"""Typer-based command line interface for AwardScope."""
from __future__ import annotations

import json
import os
import subprocess
import sys
from typing import Any, Dict, List, Optional

import typer
from dotenv import load_dotenv

from backend.config import Settings
from backend.connectors.usaspending import USAspendingClient
from backend.errors import AwardScopeError
from backend.logging_config import configure_logging
from backend.services import awards as award_service

app = typer.Typer(help="AwardScope control plane")


@app.callback()
def main_callback() -> None:
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level, settings.upstream_log_level)


def _client(upstream_url: Optional[str]) -> USAspendingClient:
    return USAspendingClient.from_settings(Settings.from_env(upstream_url=upstream_url))


def _emit(run, *args: Any) -> None:
    try:
        payload = run(*args)
    except AwardScopeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(payload, indent=2, default=str))


def _criteria(
    keyword: List[str],
    agency: Optional[str],
    naics: List[str],
    psc: List[str],
    start: Optional[str],
    end: Optional[str],
) -> Dict[str, Any]:
    return {
        "keywords": keyword or None,
        "agencyName": agency,
        "naicsCodes": naics or None,
        "pscCodes": psc or None,
        "activityStartDate": start,
        "activityEndDate": end,
    }


@app.command()
def serve(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("backend.app:app", host=host, port=port, reload=False)


@app.command()
def test() -> None:
    env = os.environ.copy()
    cmd = [sys.executable, "-m", "pytest", "-q", "backend/tests", "tests"]
    typer.echo("Running pytest...")
    subprocess.run(cmd, check=True, env=env)


@app.command()
def search(
    keyword: List[str] = typer.Option([], "--keyword", "-k", help="Keyword (repeatable)"),
    recipient: Optional[str] = typer.Option(None, "--recipient", help="Recipient name"),
    agency: Optional[str] = typer.Option(None, "--agency", help="Awarding toptier agency name"),
    naics: List[str] = typer.Option([], "--naics", help="NAICS code (repeatable)"),
    psc: List[str] = typer.Option([], "--psc", help="PSC code (repeatable)"),
    start: Optional[str] = typer.Option(None, "--start", help="Activity start date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Activity end date (YYYY-MM-DD)"),
    min_amount: Optional[float] = typer.Option(None, "--min-amount"),
    max_amount: Optional[float] = typer.Option(None, "--max-amount"),
    state: Optional[str] = typer.Option(None, "--state", help="Place of performance state code"),
    limit: int = typer.Option(10, "--limit", min=1),
    page: int = typer.Option(1, "--page", min=1),
    upstream_url: Optional[str] = typer.Option(None, "--upstream-url", help="Override AWARDSCOPE_UPSTREAM_URL."),
):
    body = _criteria(keyword, agency, naics, psc, start, end)
    body.update(
        recipientName=recipient,
        minAmount=min_amount,
        maxAmount=max_amount,
        state=state,
        limit=limit,
        page=page,
    )
    _emit(award_service.search_awards, _client(upstream_url), award_service.AwardSearchRequest.model_validate(body))


@app.command()
def competition(
    keyword: List[str] = typer.Option([], "--keyword", "-k", help="Keyword (repeatable)"),
    agency: Optional[str] = typer.Option(None, "--agency", help="Awarding toptier agency name"),
    naics: List[str] = typer.Option([], "--naics", help="NAICS code (repeatable)"),
    psc: List[str] = typer.Option([], "--psc", help="PSC code (repeatable)"),
    start: Optional[str] = typer.Option(None, "--start", help="Defaults to one year ago"),
    end: Optional[str] = typer.Option(None, "--end", help="Defaults to today"),
    min_amount: Optional[float] = typer.Option(None, "--min-amount"),
    limit: int = typer.Option(20, "--limit", min=1, help="Top recipients to keep"),
    upstream_url: Optional[str] = typer.Option(None, "--upstream-url", help="Override AWARDSCOPE_UPSTREAM_URL."),
):
    body = _criteria(keyword, agency, naics, psc, start, end)
    body.update(minAmount=min_amount, limit=limit)
    _emit(award_service.analyze_competition, _client(upstream_url), award_service.CompetitionRequest.model_validate(body))


@app.command()
def recipient(
    name: str = typer.Argument(..., help="Recipient name to search for"),
    limit: int = typer.Option(10, "--limit", help="Awards to return (capped at 50)"),
    upstream_url: Optional[str] = typer.Option(None, "--upstream-url", help="Override AWARDSCOPE_UPSTREAM_URL."),
):
    request = award_service.RecipientSearchRequest(name=name, limit=limit)
    _emit(award_service.search_recipients, _client(upstream_url), request)


@app.command()
def trends(
    keyword: List[str] = typer.Option([], "--keyword", "-k", help="Keyword (repeatable)"),
    recipient: Optional[str] = typer.Option(None, "--recipient", help="Recipient name"),
    agency: Optional[str] = typer.Option(None, "--agency", help="Awarding toptier agency name"),
    naics: List[str] = typer.Option([], "--naics", help="NAICS code (repeatable)"),
    psc: List[str] = typer.Option([], "--psc", help="PSC code (repeatable)"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    group: str = typer.Option("fiscal_year", "--group", help="fiscal_year, quarter or month"),
    upstream_url: Optional[str] = typer.Option(None, "--upstream-url", help="Override AWARDSCOPE_UPSTREAM_URL."),
):
    body = _criteria(keyword, agency, naics, psc, start, end)
    body.update(recipientName=recipient, group=group)
    _emit(award_service.spending_over_time, _client(upstream_url), award_service.SpendingOverTimeRequest.model_validate(body))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
