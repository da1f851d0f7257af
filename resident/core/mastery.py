"""
Mastery integration.

Turns answer outcomes into signed mastery deltas for the learner's topic
nodes and reports which recently touched nodes are ready to form knowledge
connections. Mastery is a fraction in [0, 1]; storage belongs to the caller.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, Protocol

from loguru import logger

from resident.content.models import AnyQuestion, DifficultyTier

# Signed mastery delta (fraction) per tier
CORRECT_DELTAS: dict[DifficultyTier, float] = {
    DifficultyTier.BEGINNER: 0.05,
    DifficultyTier.INTERMEDIATE: 0.10,
    DifficultyTier.ADVANCED: 0.15,
}

INCORRECT_DELTAS: dict[DifficultyTier, float] = {
    DifficultyTier.BEGINNER: -0.01,
    DifficultyTier.INTERMEDIATE: -0.02,
    DifficultyTier.ADVANCED: -0.03,
}

CONNECTION_THRESHOLD = 0.65


class MasteryStore(Protocol):
    """Caller-owned per-node mastery storage (fractions in [0, 1])."""

    def get_mastery(self, node_id: str) -> float | None:
        """Current mastery of a node, or None when never recorded."""
        ...

    def set_mastery(self, node_id: str, value: float) -> None:
        ...


class InMemoryMasteryStore:
    """Dictionary-backed mastery store."""

    def __init__(self, initial: dict[str, float] | None = None):
        self.values: dict[str, float] = dict(initial or {})

    def get_mastery(self, node_id: str) -> float | None:
        return self.values.get(node_id)

    def set_mastery(self, node_id: str, value: float) -> None:
        self.values[node_id] = value


@dataclass(frozen=True)
class MasteryUpdate:
    """Outcome of applying one answer to a topic node."""
    node_id: str
    delta: float
    previous: float
    mastery: float
    connection_ready: bool = False


class MasteryIntegrator:
    """
    Applies answer outcomes to a MasteryStore.

    Keeps a short window of recently touched nodes so a knowledge-graph
    collaborator can ask which pairs may be connected.
    """

    def __init__(
        self,
        store: MasteryStore,
        connection_threshold: float = CONNECTION_THRESHOLD,
        recent_window: int = 10,
    ):
        self.store = store
        self.connection_threshold = connection_threshold
        self._recent_nodes: deque[str] = deque(maxlen=recent_window)

    def calculate_mastery_delta(
        self,
        question: AnyQuestion,
        correct: bool,
        risk_multiplier: float = 1.0,
    ) -> float:
        """Signed delta for one answer, scaled by the risk multiplier."""
        table = CORRECT_DELTAS if correct else INCORRECT_DELTAS
        return table[question.tags.difficulty] * risk_multiplier

    def current_mastery(self, node_id: str) -> float:
        value = self.store.get_mastery(node_id)
        return 0.0 if value is None else value

    def record_answer(
        self,
        question: AnyQuestion,
        correct: bool,
        risk_multiplier: float = 1.0,
    ) -> MasteryUpdate:
        """
        Apply an answer to the question's topic node.

        Args:
            question: Answered question (its tags name the topic node)
            correct: Whether the answer was correct
            risk_multiplier: Stake multiplier, above 1 for boasts

        Returns:
            MasteryUpdate with the clamped new mastery
        """
        node_id = question.tags.knowledge_node
        delta = self.calculate_mastery_delta(question, correct, risk_multiplier)
        previous = self.current_mastery(node_id)
        mastery = min(1.0, max(0.0, previous + delta))
        self.store.set_mastery(node_id, mastery)
        self._touch(node_id)

        ready = correct and mastery >= self.connection_threshold
        if ready:
            logger.info(f"Topic node {node_id} reached {mastery:.0%} mastery and can form connections")
        return MasteryUpdate(
            node_id=node_id,
            delta=delta,
            previous=previous,
            mastery=mastery,
            connection_ready=ready,
        )

    def _touch(self, node_id: str) -> None:
        if node_id in self._recent_nodes:
            self._recent_nodes.remove(node_id)
        self._recent_nodes.append(node_id)

    @property
    def recent_nodes(self) -> list[str]:
        """Recently touched nodes, oldest first."""
        return list(self._recent_nodes)

    def should_form_connection(self, node_id: str) -> bool:
        return self.current_mastery(node_id) >= self.connection_threshold

    def connection_candidates(self, node_ids: Iterable[str] | None = None) -> list[tuple[str, str]]:
        """
        Pairs of nodes that are both at or above the connection threshold.

        Defaults to the recently touched nodes. Connections are not stored.
        """
        nodes = list(dict.fromkeys(node_ids)) if node_ids is not None else self.recent_nodes
        eligible = [node for node in nodes if self.should_form_connection(node)]
        return list(combinations(eligible, 2))

    def potential_gain(self, question: AnyQuestion) -> float:
        """Largest delta a correct answer can produce at risk multiplier 1."""
        return CORRECT_DELTAS[question.tags.difficulty]
