#!/usr/bin/env python3
"""
CLI for Scorebook - scorecards from match files, database setup, API server
"""
import json

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from app.api.schemas import MatchDocument
from app.config import settings
from app.database import init_db
from app.engine.scorecard import build_scorecard
from app.engine.strike import CreaseStatus
from app.logging_config import configure_logging

console = Console()


@click.group()
def cli():
    """Scorebook - ball-by-ball cricket scoring"""
    configure_logging(settings.LOG_LEVEL)


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.argument("match_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--side-size", default=None, type=int, help="Players in a full batting side")
def scorecard(match_file: str, side_size):
    """Print the scorecard for a match stored as JSON"""
    with open(match_file) as f:
        raw = json.load(f)

    try:
        document = MatchDocument.model_validate(raw)
    except ValidationError as e:
        console.print(f"[red]Invalid match file:[/red]\n{e}")
        raise SystemExit(1)

    match = document.to_snapshot()
    card = build_scorecard(match, side_size or settings.BATTING_SIDE_SIZE)

    console.print(Panel(
        f"[bold]{document.match_name}[/bold]\n"
        f"{match.team_name(match.team_a_id)} vs {match.team_name(match.team_b_id)}"
        + (f" at {document.venue}" if document.venue else ""),
        title="Scorebook",
    ))

    if not card.innings:
        console.print("[yellow]No innings yet.[/yellow]")
        return

    for innings in card.innings:
        summary = innings.summary
        title = (
            f"Innings {innings.number}{' (Super Over)' if innings.is_super_over else ''}: "
            f"{match.team_name(innings.batting_team_id)} "
            f"{summary.score_display} ({innings.overs_display} overs, RR {summary.run_rate:.2f})"
        )

        batting = Table(title=title)
        batting.add_column("Batter", style="cyan")
        batting.add_column("Dismissal")
        batting.add_column("R", justify="right", style="green")
        batting.add_column("B", justify="right")
        batting.add_column("4s", justify="right")
        batting.add_column("6s", justify="right")
        batting.add_column("SR", justify="right")
        for entry in innings.batting:
            if entry.balls == 0 and not entry.is_out:
                continue  # did not bat
            batting.add_row(
                entry.player_id,
                entry.dismissal if entry.is_out else "not out",
                str(entry.runs),
                str(entry.balls),
                str(entry.fours),
                str(entry.sixes),
                f"{entry.strike_rate:.2f}",
            )
        console.print(batting)

        extras = ", ".join(f"{k} {v}" for k, v in sorted(summary.extras_breakdown.items()))
        console.print(f"Extras: {summary.extras_total}" + (f" ({extras})" if extras else ""))

        bowling = Table()
        bowling.add_column("Bowler", style="magenta")
        bowling.add_column("O", justify="right")
        bowling.add_column("R", justify="right")
        bowling.add_column("W", justify="right", style="green")
        bowling.add_column("Econ", justify="right")
        for entry in innings.bowling:
            if entry.overs == 0 and entry.balls == 0 and entry.runs_conceded == 0:
                continue
            bowling.add_row(
                entry.player_id,
                entry.overs_display,
                str(entry.runs_conceded),
                str(entry.wickets),
                f"{entry.economy:.2f}",
            )
        console.print(bowling)

        if innings.chase:
            chase = innings.chase
            console.print(
                f"Target {chase.target}: need {chase.runs_needed} from {chase.balls_left} balls "
                f"(RRR {chase.required_rate:.2f})"
            )
        if innings.end_check.end:
            console.print(f"[bold]Innings over:[/bold] {innings.end_check.reason.value}")

    batters = card.current_batters
    if batters and not card.current.end_check.end:
        partner = batters.non_striker_id or "none (last man standing)"
        console.print(f"\nOn strike: [cyan]{batters.striker_id}[/cyan], non-striker: {partner}")
    if batters and batters.status == CreaseStatus.LEDGER_INCONSISTENT:
        for problem in batters.problems:
            console.print(f"[red]Ledger problem:[/red] {problem}")

    if card.result:
        colour = "yellow" if card.result.is_tie else "green"
        console.print(f"\n[bold {colour}]{card.result.message}[/bold {colour}]")
        if card.result.needs_super_over:
            plan = card.result.next_super_over
            console.print(f"Super Over required: {match.team_name(plan.batting_team_id)} bat first")


@cli.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind")
@click.option("--port", default=8000, help="Port to listen on")
def serve(host: str, port: int):
    """Run the scoring API"""
    import uvicorn
    uvicorn.run("main:app", host=host, port=port)


if __name__ == "__main__":
    cli()
