"""
Procedural (ordering) question handler.

The declared step ids are the correct order. Steps are attached in bank
order; the consumer shuffles them for display.
"""

import random
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel

from resident.content.models import ProceduralQuestion
from resident.core.errors import BankReferenceError

from . import QuestionType, register
from .base import CheckOutcome, GeneratedQuestion, Instantiation, ProceduralPayload


@register(QuestionType.PROCEDURAL)
class ProceduralHandler:
    """Handler for procedural questions."""

    async def instantiate(self, question: ProceduralQuestion, generator, values=None) -> Instantiation:
        bank = await generator.repository.get_procedural_bank(question.tags.domain, question.bank_ref)

        declared = set(question.include_steps)
        missing = [step_id for step_id in question.include_steps if bank.step(step_id) is None]
        if missing:
            raise BankReferenceError(f"Steps {missing} not found in bank {bank.bank_id}")

        steps = tuple(step for step in bank.steps if step.step_id in declared)
        return Instantiation(
            payload=ProceduralPayload(
                bank_id=bank.bank_id,
                title=bank.title,
                steps=steps,
                description=bank.description,
            ),
            prompt=question.question or f"Put the steps of {bank.title} in order.",
        )

    def check(self, instance: GeneratedQuestion, answer: Any) -> CheckOutcome:
        """Correct only for the exact declared sequence."""
        question: ProceduralQuestion = instance.scored
        if isinstance(answer, (str, bytes)) or not hasattr(answer, "__iter__"):
            return CheckOutcome(correct=False)
        submitted = [str(step_id) for step_id in answer]
        return CheckOutcome(correct=submitted == list(question.include_steps))

    def present(self, instance: GeneratedQuestion, console: Console) -> None:
        payload: ProceduralPayload = instance.payload
        steps = list(payload.steps)
        random.shuffle(steps)

        lines = [instance.prompt, ""]
        for step in steps:
            lines.append(f"  [cyan]{step.step_id:>3}[/cyan]  {step.step_text}")
        console.print(Panel(
            "\n".join(lines),
            title=f"[bold cyan]{payload.title.upper()}[/bold cyan]",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))
