"""
Content repository: loads, validates and memoizes collections and banks.

Collections are keyed by (domain, tier) and bank sets by domain. A document is
validated in full before it is cached, so a cached value is always well formed.
Validation failures raise ContentLoadError naming the document and are not
retried; the cache never holds a partial result.
"""

from __future__ import annotations

from typing import Iterable

from loguru import logger
from pydantic import ValidationError

from resident.content.models import (
    AnyQuestion,
    BankSet,
    DifficultyTier,
    KnowledgeDomain,
    MatchingBank,
    ProceduralBank,
    QuestionCollection,
)
from resident.content.store import ContentStore
from resident.core.errors import BankReferenceError, ContentLoadError, ContentNotFoundError

BANKS_FILE = "banks.json"


def collection_key(domain: KnowledgeDomain, tier: DifficultyTier) -> str:
    return f"{domain.directory}/{tier.label}.json"


def banks_key(domain: KnowledgeDomain) -> str:
    return f"{domain.directory}/{BANKS_FILE}"


def as_tier(value: DifficultyTier | int | str) -> DifficultyTier:
    """Accept a tier enum, its number or its label."""
    if isinstance(value, str) and not value.isdigit():
        return DifficultyTier.from_label(value)
    return DifficultyTier(int(value))


def describe_validation_error(error: ValidationError, limit: int = 3) -> str:
    """Condense a pydantic error into one line naming the offending fields."""
    parts = []
    for detail in error.errors()[:limit]:
        location = ".".join(str(part) for part in detail["loc"])
        parts.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    remaining = error.error_count() - limit
    if remaining > 0:
        parts.append(f"and {remaining} more")
    return "; ".join(parts)


class ContentRepository:
    """
    Memoizing loader over a ContentStore.

    One instance is constructed per process and shared by the selector and
    the generator. The caches are plain dicts; a threaded host must guard
    calls with its own lock.
    """

    def __init__(self, store: ContentStore):
        self.store = store
        self._collections: dict[tuple[KnowledgeDomain, DifficultyTier], QuestionCollection] = {}
        self._banks: dict[KnowledgeDomain, BankSet] = {}

    async def load_collection(
        self,
        domain: KnowledgeDomain | str,
        tier: DifficultyTier | int | str,
    ) -> QuestionCollection:
        """
        Load the question collection for a domain and tier.

        Args:
            domain: Knowledge domain
            tier: Difficulty tier (1-3 or its label)

        Returns:
            The validated collection, cached after the first call

        Raises:
            ContentNotFoundError: If the document does not exist
            ContentLoadError: If the document fails validation
        """
        domain = KnowledgeDomain(domain)
        tier = as_tier(tier)
        cached = self._collections.get((domain, tier))
        if cached is not None:
            return cached

        key = collection_key(domain, tier)
        document = await self.store.read_document(key)
        try:
            collection = QuestionCollection.model_validate(document)
        except ValidationError as e:
            raise ContentLoadError(key, describe_validation_error(e)) from e

        self._collections[(domain, tier)] = collection
        logger.debug(f"Loaded {len(collection.questions)} questions from {key}")
        return collection

    async def load_banks(self, domain: KnowledgeDomain | str) -> BankSet:
        """Load and cache the matching and procedural banks of a domain."""
        domain = KnowledgeDomain(domain)
        cached = self._banks.get(domain)
        if cached is not None:
            return cached

        key = banks_key(domain)
        document = await self.store.read_document(key)
        try:
            banks = BankSet.model_validate(document)
        except ValidationError as e:
            raise ContentLoadError(key, describe_validation_error(e)) from e

        self._banks[domain] = banks
        logger.debug(
            f"Loaded {len(banks.matching_banks)} matching and "
            f"{len(banks.procedural_banks)} procedural banks from {key}"
        )
        return banks

    async def get_matching_bank(self, domain: KnowledgeDomain | str, bank_id: str) -> MatchingBank:
        domain = KnowledgeDomain(domain)
        banks = await self.load_banks(domain)
        for bank in banks.matching_banks:
            if bank.bank_id == bank_id:
                return bank
        raise BankReferenceError(f"Matching bank {bank_id!r} not found in {domain.value}")

    async def get_procedural_bank(self, domain: KnowledgeDomain | str, bank_id: str) -> ProceduralBank:
        domain = KnowledgeDomain(domain)
        banks = await self.load_banks(domain)
        for bank in banks.procedural_banks:
            if bank.bank_id == bank_id:
                return bank
        raise BankReferenceError(f"Procedural bank {bank_id!r} not found in {domain.value}")

    async def all_domain_questions(self, domain: KnowledgeDomain | str) -> list[AnyQuestion]:
        """
        Every question of a domain across all tiers, beginner first.

        Missing tier documents are skipped with a warning; invalid ones raise.
        """
        domain = KnowledgeDomain(domain)
        questions: list[AnyQuestion] = []
        for tier in DifficultyTier:
            try:
                collection = await self.load_collection(domain, tier)
            except ContentNotFoundError as e:
                logger.warning(f"Skipping {e.key}: {e.reason}")
                continue
            questions.extend(collection.questions)
        return questions

    async def questions_for_topic_node(
        self,
        node_id: str,
        domains: Iterable[KnowledgeDomain | str] | None = None,
    ) -> list[AnyQuestion]:
        """
        Questions tagged to a topic node.

        Only collections whose metadata lists the node are searched. Any
        collection that cannot be loaded is skipped.
        """
        questions: list[AnyQuestion] = []
        for domain in domains or list(KnowledgeDomain):
            for tier in DifficultyTier:
                try:
                    collection = await self.load_collection(domain, tier)
                except ContentLoadError as e:
                    logger.debug(f"Topic node search skipped {e.key}: {e.reason}")
                    continue
                if not collection.covers_node(node_id):
                    continue
                questions.extend(q for q in collection.questions if q.knowledge_node == node_id)
        return questions

    def clear_cache(self) -> None:
        """Drop every cached collection and bank set."""
        self._collections.clear()
        self._banks.clear()
