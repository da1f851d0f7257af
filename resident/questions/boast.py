"""
Boast question handler.

A boast wraps one of the other variants; instantiation and checking are
delegated to the wrapped variant's handler. Only the gain range and the
voice context differ.
"""

from typing import Any, Mapping

from rich.console import Console

from resident.content.models import BoastQuestion

from . import QuestionType, get_handler, register
from .base import CheckOutcome, GeneratedQuestion, Instantiation


@register(QuestionType.BOAST)
class BoastHandler:
    """Handler for boast questions."""

    async def instantiate(
        self,
        question: BoastQuestion,
        generator,
        values: Mapping[str, float] | None = None,
    ) -> Instantiation:
        wrapped = question.wrapped
        return await get_handler(wrapped.type).instantiate(wrapped, generator, values)

    def check(self, instance: GeneratedQuestion, answer: Any) -> CheckOutcome:
        return get_handler(instance.scored.type).check(instance, answer)

    def present(self, instance: GeneratedQuestion, console: Console) -> None:
        console.print("[bold magenta]BOAST[/bold magenta] [dim]higher stakes, higher reward[/dim]")
        get_handler(instance.scored.type).present(instance, console)
