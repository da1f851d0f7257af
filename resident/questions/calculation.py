"""
Calculation question handler.

Each variable is drawn uniformly on its stepped grid (two decimals when the
variable has no step), substituted into the prompt and the formula solution
steps, and the answer formula is evaluated with the restricted expression
evaluator. An answer is correct inside any accepted range or within
10^-precision of the generated answer.
"""

import math
import random
import re
from decimal import Decimal
from typing import Any, Mapping

from rich import box
from rich.console import Console
from rich.panel import Panel

from resident.content.models import CalculationQuestion, CalculationVariable
from resident.core.expression import Formula

from . import QuestionType, register
from .base import CalculationPayload, CheckOutcome, GeneratedQuestion, Instantiation, format_number

_VAR_RE = re.compile(r"\{\s*([A-Za-z_]\w*)\s*\}")

# Absorbs float noise at the tolerance boundary (50.01 vs 50.00)
_EPSILON = 1e-9


def _decimals(value: float) -> int:
    exponent = Decimal(str(value)).normalize().as_tuple().exponent
    return max(0, -exponent) if isinstance(exponent, int) else 0


def draw_value(variable: CalculationVariable, rng: random.Random) -> float:
    """Draw one value on the variable's grid."""
    if variable.step:
        count = math.floor((variable.maximum - variable.minimum) / variable.step + _EPSILON)
        value = variable.minimum + rng.randint(0, count) * variable.step
        return round(value, max(_decimals(variable.step), _decimals(variable.minimum)))
    return round(rng.uniform(variable.minimum, variable.maximum), 2)


def substitute(text: str, replacements: Mapping[str, str]) -> str:
    """Replace ``{name}`` tokens that have a replacement; leave the rest."""
    def replace(match: re.Match) -> str:
        return replacements.get(match.group(1), match.group(0))
    return _VAR_RE.sub(replace, text)


def parse_number(answer: Any) -> float | None:
    if isinstance(answer, bool):
        return None
    if isinstance(answer, (int, float)):
        value = float(answer)
    elif isinstance(answer, str):
        try:
            value = float(answer.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


@register(QuestionType.CALCULATION)
class CalculationHandler:
    """Handler for calculation questions."""

    async def instantiate(
        self,
        question: CalculationQuestion,
        generator,
        values: Mapping[str, float] | None = None,
    ) -> Instantiation:
        """
        Draw variable values and compute the answer.

        Args:
            question: Calculation question
            generator: Generator supplying the random source
            values: Fixed values for some or all variables

        Raises:
            FormulaError: If the formula cannot be evaluated for the drawn values
        """
        fixed = dict(values or {})
        drawn: dict[str, float] = {}
        for variable in question.variables:
            if variable.name in fixed:
                drawn[variable.name] = float(fixed[variable.name])
            else:
                drawn[variable.name] = draw_value(variable, generator.rng)

        units = {variable.name: variable.unit for variable in question.variables}
        display = {
            name: f"{format_number(value)} {units[name]}".rstrip()
            for name, value in drawn.items()
        }
        plain = {name: format_number(value) for name, value in drawn.items()}

        solution = tuple(
            substitute(step.step, plain) if step.is_formula else step.step
            for step in question.solution
        )
        precision = question.answer.precision
        answer = round(Formula(question.answer.formula).evaluate(drawn), precision)

        return Instantiation(
            payload=CalculationPayload(
                values=drawn,
                solution=solution,
                answer=answer,
                precision=precision,
                accepted_ranges=question.answer.accepted_ranges,
            ),
            prompt=substitute(question.question, display),
            values=display,
        )

    def check(self, instance: GeneratedQuestion, answer: Any) -> CheckOutcome:
        payload: CalculationPayload = instance.payload
        value = parse_number(answer)
        if value is None:
            return CheckOutcome(correct=False)
        if any(low <= value <= high for low, high in payload.accepted_ranges):
            return CheckOutcome(correct=True)
        tolerance = 10 ** -payload.precision
        return CheckOutcome(correct=abs(value - payload.answer) <= tolerance + _EPSILON)

    def present(self, instance: GeneratedQuestion, console: Console) -> None:
        payload: CalculationPayload = instance.payload
        console.print(Panel(
            f"{instance.prompt}\n\n[dim]Answer to {payload.precision} decimal places.[/dim]",
            title="[bold cyan]CALCULATION[/bold cyan]",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        ))
