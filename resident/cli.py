"""
Typer CLI for the resident quiz core.

Commands:
    resident validate                 - Load every collection and bank, count questions per variant
    resident preview dosimetry        - Build a challenge and print its voiced questions
    resident version                  - Show version information

Usage:
    resident validate --content-dir ./content
    resident preview linac-anatomy --type boss --mentor Jesse --seed 7
"""

from __future__ import annotations

import asyncio
import random
from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from resident import __version__
from resident.challenge.models import ChallengeConfig, ChallengeDifficulty, ChallengeType
from resident.config import Settings, configure_logging, get_settings
from resident.content.models import DifficultyTier, KnowledgeDomain, MentorId, QuestionType
from resident.content.repository import ContentRepository
from resident.content.store import FileContentStore
from resident.core.errors import ContentLoadError, ContentNotFoundError
from resident.questions import get_handler
from resident.service import QuizService

app = typer.Typer(
    help="resident: adaptive quiz content pipeline tools",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Loguru level (DEBUG, INFO, ...)"),
) -> None:
    """Quiz content validation and preview."""
    configure_logging(log_level)


def _settings(content_dir: Optional[Path]) -> Settings:
    if content_dir is None:
        return get_settings()
    return Settings(content_dir=content_dir)


# ========================================
# VALIDATE
# ========================================


async def _validate(repository: ContentRepository) -> tuple[Table, list[str]]:
    table = Table(title="Question Content")
    table.add_column("Domain", style="cyan")
    table.add_column("Tier", style="dim")
    for question_type in QuestionType:
        table.add_column(question_type.value, justify="right")
    table.add_column("Total", style="green", justify="right")

    problems: list[str] = []
    for domain in KnowledgeDomain:
        for tier in DifficultyTier:
            try:
                collection = await repository.load_collection(domain, tier)
            except ContentNotFoundError as e:
                table.add_row(domain.directory, tier.label, *["-"] * len(QuestionType), "[yellow]missing[/yellow]")
                logger.warning(f"Skipping {e.key}: {e.reason}")
                continue
            except ContentLoadError as e:
                problems.append(str(e))
                table.add_row(domain.directory, tier.label, *["-"] * len(QuestionType), "[red]invalid[/red]")
                continue

            counts = Counter(q.type for q in collection.questions)
            table.add_row(
                domain.directory,
                tier.label,
                *[str(counts.get(t.value, 0)) for t in QuestionType],
                str(len(collection.questions)),
            )

        try:
            await repository.load_banks(domain)
        except ContentNotFoundError as e:
            logger.warning(f"Skipping {e.key}: {e.reason}")
        except ContentLoadError as e:
            problems.append(str(e))

    return table, problems


@app.command("validate")
def validate(
    content_dir: Optional[Path] = typer.Option(
        None,
        "--content-dir", "-c",
        help="Content root (defaults to the packaged questions)",
    ),
) -> None:
    """
    Load every domain collection and bank document.

    Prints question counts per variant; exits non-zero if any document
    fails validation.
    """
    settings = _settings(content_dir)
    repository = ContentRepository(FileContentStore(settings.content_dir))
    table, problems = asyncio.run(_validate(repository))

    console.print(table)
    if problems:
        for problem in problems:
            rprint(f"[red]✗[/red] {problem}")
        raise typer.Exit(1)
    rprint(f"[green]✓[/green] Content in {settings.content_dir} is valid")


# ========================================
# PREVIEW
# ========================================


@app.command("preview")
def preview(
    domain: str = typer.Argument(..., help="Knowledge domain (dosimetry, linac-anatomy, ...)"),
    challenge_type: ChallengeType = typer.Option(ChallengeType.STANDARD, "--type", "-t", help="Challenge type"),
    difficulty: ChallengeDifficulty = typer.Option(
        ChallengeDifficulty.BALANCED, "--difficulty", "-d", help="Challenge difficulty"
    ),
    mentor: Optional[str] = typer.Option(None, "--mentor", "-m", help="Mentor voicing the questions"),
    count: Optional[int] = typer.Option(None, "--count", "-n", min=1, help="Number of questions"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed for a repeatable preview"),
    content_dir: Optional[Path] = typer.Option(None, "--content-dir", "-c", help="Content root"),
) -> None:
    """Build a challenge and print its voiced questions."""
    try:
        knowledge_domain = KnowledgeDomain(domain)
        mentor_id = MentorId(mentor) if mentor else None
    except ValueError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(2)

    service = QuizService(settings=_settings(content_dir), rng=random.Random(seed))
    config = ChallengeConfig(
        domain=knowledge_domain,
        type=challenge_type,
        difficulty=difficulty,
        mentor=mentor_id,
        question_count=count,
    )
    session = asyncio.run(service.create_challenge(config))

    console.print(f"\n[bold cyan]{session.title}[/bold cyan]")
    console.print(
        f"[dim]{session.config.type.value} · {session.config.difficulty.value} · "
        f"{len(session.questions)} questions · pass at {session.mastery_threshold:.2f}[/dim]\n"
    )
    if not session.questions:
        rprint("[yellow]⚠[/yellow] No questions available for this challenge")
        raise typer.Exit(1)

    for index, instance in enumerate(session.questions, 1):
        console.print(f"[bold]{index}.[/bold] [dim]{instance.id} · {instance.mentor.value} · {instance.tier.label}[/dim]")
        get_handler(instance.type).present(instance, console)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint(f"[bold]resident[/bold] v{__version__}")
    rprint("  Adaptive quiz content pipeline")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
