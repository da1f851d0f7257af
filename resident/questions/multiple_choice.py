"""
Multiple choice question handler.

- Presents a prompt with lettered options.
- The answer is the selected option index, optionally with a follow-up index.
- An out-of-range or unparsable index is simply incorrect.
"""

from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel

from resident.content.models import MultipleChoiceOption, MultipleChoiceQuestion

from . import QuestionType, register
from .base import CheckOutcome, ChoicePayload, GeneratedQuestion, Instantiation


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _is_correct_choice(options: tuple[MultipleChoiceOption, ...], choice: Any) -> bool:
    index = _as_index(choice)
    if index is None or not 0 <= index < len(options):
        return False
    return options[index].is_correct


def split_choice_answer(answer: Any) -> tuple[Any, Any]:
    """Return (choice, follow_up) from an int or a ``{"choice", "followUp"}`` dict."""
    if isinstance(answer, dict):
        follow_up = answer.get("followUp", answer.get("follow_up"))
        return answer.get("choice"), follow_up
    return answer, None


@register(QuestionType.MULTIPLE_CHOICE)
class MultipleChoiceHandler:
    """Handler for multiple choice questions."""

    async def instantiate(self, question: MultipleChoiceQuestion, generator, values=None) -> Instantiation:
        return Instantiation(
            payload=ChoicePayload(options=question.options, follow_up=question.follow_up),
            prompt=question.question,
        )

    def check(self, instance: GeneratedQuestion, answer: Any) -> CheckOutcome:
        """Correct when the chosen option (and the follow-up, if answered) is flagged correct."""
        payload: ChoicePayload = instance.payload
        choice, follow_up = split_choice_answer(answer)
        correct = _is_correct_choice(payload.options, choice)
        if correct and follow_up is not None and payload.follow_up is not None:
            correct = _is_correct_choice(payload.follow_up.options, follow_up)
        return CheckOutcome(correct=correct)

    def present(self, instance: GeneratedQuestion, console: Console) -> None:
        payload: ChoicePayload = instance.payload
        lines = [instance.prompt, ""]
        for i, option in enumerate(payload.options):
            lines.append(f"  [cyan]({chr(65 + i)})[/cyan] {option.text}")
        if payload.follow_up is not None:
            lines.append(f"\n[dim]Follow-up:[/dim] {payload.follow_up.question}")
        console.print(Panel(
            "\n".join(lines),
            title="[bold cyan]MULTIPLE CHOICE[/bold cyan]",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))
