"""
Matching question handler.

Items and their correct matches come from a domain matching bank. The learner
submits a mapping of item id to one or more match ids; the question passes
only when every declared item is matched exactly, but the number of fully
correct items is reported for partial-credit display.
"""

import random
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel

from resident.content.models import MatchingOption, MatchingQuestion
from resident.core.errors import BankReferenceError

from . import QuestionType, register
from .base import CheckOutcome, GeneratedQuestion, Instantiation, MatchingPayload


def _as_id_set(value: Any) -> set[str]:
    if value is None:
        return set()
    if isinstance(value, (list, tuple, set, frozenset)):
        return {str(v) for v in value}
    return {str(value)}


@register(QuestionType.MATCHING)
class MatchingHandler:
    """Handler for matching questions."""

    async def instantiate(self, question: MatchingQuestion, generator, values=None) -> Instantiation:
        """Resolve item records and per-item match records from the bank."""
        bank = await generator.repository.get_matching_bank(question.tags.domain, question.bank_ref)

        items = []
        matches_by_item: dict[str, tuple[MatchingOption, ...]] = {}
        for pair in question.include_items:
            item = bank.item(pair.item_id)
            if item is None:
                raise BankReferenceError(f"Item {pair.item_id} not found in bank {bank.bank_id}")
            matches = []
            for match_id in pair.match_ids:
                match = bank.match(match_id)
                if match is None:
                    raise BankReferenceError(f"Match {match_id} not found in bank {bank.bank_id}")
                matches.append(match)
            items.append(item)
            matches_by_item[item.item_id] = tuple(matches)

        # Every referenced match once, in bank order
        referenced = {m.match_id for group in matches_by_item.values() for m in group}
        options = tuple(m for m in bank.matches if m.match_id in referenced)

        return Instantiation(
            payload=MatchingPayload(
                bank_id=bank.bank_id,
                items=tuple(items),
                matches_by_item=matches_by_item,
                options=options,
            ),
            prompt=question.question or bank.title or "Match each item with its counterpart.",
        )

    def check(self, instance: GeneratedQuestion, answer: Any) -> CheckOutcome:
        """All-or-nothing per declared item; match ids compared as strings."""
        question: MatchingQuestion = instance.scored
        submitted = {str(k): v for k, v in answer.items()} if isinstance(answer, dict) else {}

        correct_matches = 0
        for pair in question.include_items:
            if _as_id_set(submitted.get(pair.item_id)) == set(pair.match_ids):
                correct_matches += 1

        total = len(question.include_items)
        return CheckOutcome(
            correct=total > 0 and correct_matches == total,
            correct_matches=correct_matches,
            total_matches=total,
        )

    def present(self, instance: GeneratedQuestion, console: Console) -> None:
        payload: MatchingPayload = instance.payload
        options = list(payload.options)
        random.shuffle(options)

        lines = [instance.prompt, "", "[bold cyan]ITEMS:[/bold cyan]"]
        for i, item in enumerate(payload.items, 1):
            lines.append(f"  [{i}] {item.item_text}")
        lines.append("\n[bold cyan]MATCHES:[/bold cyan]")
        for i, option in enumerate(options):
            lines.append(f"  ({chr(65 + i)}) {option.match_text}")
        console.print(Panel(
            "\n".join(lines),
            title="[bold cyan]MATCH PAIRS[/bold cyan]",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))
