"""mneme CLI: scheduling commands, settings and config inspection."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from mneme.application.config import resolve_config
from mneme.application.scheduling import (
    ReviewService,
    Scheduler,
    format_next_review,
    is_leech,
    load_settings,
    resolve_settings,
)
from mneme.domain.errors import InvalidQualityError
from mneme.domain.scheduling.models import Progress
from mneme.infrastructure.adapters import JsonProgressRepository, YamlSettingsRepository

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mneme: spaced-repetition scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

VERBOSITY_LEVELS = {0: logging.ERROR, 1: logging.WARNING, 2: logging.INFO}

settings_app = typer.Typer(help="Inspect scheduling settings.", no_args_is_help=True)
app.add_typer(settings_app, name="settings")

config_app = typer.Typer(help="Manage mneme configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for mneme."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.getLogger("mneme").setLevel(VERBOSITY_LEVELS.get(verbose, logging.DEBUG))


def _fail(message: str) -> None:
    typer.secho(message, fg="red", err=True)
    raise typer.Exit(1)


def _dump(data: dict[str, Any]) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def _stores(config) -> tuple[JsonProgressRepository, YamlSettingsRepository]:
    return (
        JsonProgressRepository(config.progress_file),
        YamlSettingsRepository(config.settings_file),
    )


# ---------------------------------------------------------------------------
# Scheduling commands
# ---------------------------------------------------------------------------


@app.command()
def schedule(
    quality: Annotated[str, typer.Argument(help="Quality 0-5 or again/hard/good/easy.")],
    progress: Annotated[
        str | None,
        typer.Option(help="Current progress record as JSON. Omit for a new card."),
    ] = None,
    settings_json: Annotated[
        str | None,
        typer.Option("--settings", help="Raw settings record as JSON. Omit for defaults."),
    ] = None,
):
    """[bold green]Compute[/bold green] a card's next state without touching storage."""
    try:
        record = json.loads(progress) if progress else None
        raw_settings = json.loads(settings_json) if settings_json else None
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON: {e}")

    try:
        current = Progress.from_record(record)
    except (TypeError, ValueError, ArithmeticError) as e:
        _fail(f"Invalid progress record: {e}")

    scheduler = Scheduler()
    settings = resolve_settings(raw_settings)
    try:
        updated = scheduler.schedule_next(current, quality, settings)
    except InvalidQualityError as e:
        _fail(str(e))

    result = updated.to_record()
    result["next_review"] = format_next_review(updated, updated.last_attempt_at)
    result["is_leech"] = is_leech(updated, settings)
    _dump(result)


@app.command()
def review(
    card_id: Annotated[str, typer.Argument(help="Card identifier.")],
    quality: Annotated[str, typer.Argument(help="Quality 0-5 or again/hard/good/easy.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Learner identifier.")] = "default",
    data_dir: Annotated[Path | None, typer.Option(help="Directory holding the stores.")] = None,
):
    """[bold green]Submit[/bold green] an answer and persist the card's next state."""
    config = resolve_config({"data_dir": data_dir})
    progress_repo, settings_repo = _stores(config)
    service = ReviewService(progress_repo, settings_repo)

    try:
        outcome = asyncio.run(service.submit_review(card_id, user, quality))
    except InvalidQualityError as e:
        _fail(str(e))
    except ValueError as e:
        _fail(f"Could not read progress store: {e}")

    _dump(
        {
            "card_id": outcome.card_id,
            "user_id": outcome.user_id,
            "rating": outcome.rating.name.lower(),
            "card_phase": outcome.after.card_phase.value,
            "interval_days": outcome.after.interval_days,
            "ease_factor": str(outcome.after.ease_factor),
            "lapses": outcome.after.lapses,
            "next_review_at": outcome.after.next_review_at.isoformat(),
            "next_review": outcome.next_review,
            "is_leech": outcome.is_leech,
            "leech_action": outcome.leech_action.value if outcome.leech_action else None,
        }
    )
    if outcome.became_leech:
        typer.secho(
            f"Card {card_id} is now a leech ({outcome.after.lapses} lapses).",
            fg="yellow",
            err=True,
        )


@app.command()
def leech(
    card_id: Annotated[str, typer.Argument(help="Card identifier.")],
    user: Annotated[str, typer.Option("--user", "-u", help="Learner identifier.")] = "default",
    data_dir: Annotated[Path | None, typer.Option(help="Directory holding the stores.")] = None,
):
    """Check whether a stored card has lapsed often enough to be a leech."""
    config = resolve_config({"data_dir": data_dir})
    progress_repo, settings_repo = _stores(config)
    service = ReviewService(progress_repo, settings_repo)

    try:
        result = asyncio.run(service.check_leech(card_id, user))
    except ValueError as e:
        _fail(f"Could not read progress store: {e}")

    _dump({"card_id": card_id, "user_id": user, "is_leech": result})


# ---------------------------------------------------------------------------
# Settings subgroup
# ---------------------------------------------------------------------------


@settings_app.command("show")
def settings_show(
    user: Annotated[str, typer.Option("--user", "-u", help="Learner identifier.")] = "default",
    data_dir: Annotated[Path | None, typer.Option(help="Directory holding the stores.")] = None,
):
    """Display the resolved settings for a learner."""
    config = resolve_config({"data_dir": data_dir})
    _, settings_repo = _stores(config)
    settings = asyncio.run(load_settings(settings_repo, user))
    _dump(settings.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    _dump(d)


def main():
    app()


if __name__ == "__main__":
    main()
