"""
Query learning: remember generated queries and reuse them by intent.

Writes are best-effort. Learning must never block question answering, so
every store failure goes through `_best_effort`, which logs it and hands back
a default (empty list, None, False). Reads degrade to "no results"; writes are
logged as errors and dropped.
"""

from __future__ import annotations

import datetime as dt
import enum
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

from dax_context.db.models import LearnedQuery, TrainingExample, new_id
from dax_context.errors import DaxContextError
from dax_context.knowledge.keywords import KeywordExtractor, normalize
from dax_context.knowledge.vocabulary import QuestionIntent, Vocabulary
from dax_context.retrieval.intent import classify_intent
from dax_context.retrieval.similarity import similarity

from .config import LearningConfig
from .extraction import extract_measures_and_columns, suggest_measures
from .store import QueryLearningStore, StoreResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FeedbackOutcome(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass
class ScoredQuery:
    """Learned query with its similarity to the current question."""

    record: LearnedQuery
    similarity: float


@dataclass
class ScoredExample:
    """Training example with its concept/keyword relevance score."""

    record: TrainingExample
    score: int
    concept_matches: int


@dataclass
class QueryContext:
    """Learning-store material gathered for one question."""

    intent: QuestionIntent = QuestionIntent.OUTROS
    similar_queries: List[ScoredQuery] = field(default_factory=list)
    training_examples: List[ScoredExample] = field(default_factory=list)
    suggested_measures: List[str] = field(default_factory=list)


def query_hash(query_text: str) -> str:
    """Stable content hash used to dedupe learned queries."""
    return hashlib.md5(query_text.encode("utf-8")).hexdigest()


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class QueryLearningService:
    """Records, reinforces and retrieves learned queries and training examples."""

    def __init__(
        self,
        store: QueryLearningStore,
        config: Optional[LearningConfig] = None,
        extractor: Optional[KeywordExtractor] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ):
        self.store = store
        self.config = config or LearningConfig()
        self.extractor = extractor or KeywordExtractor()
        self.clock = clock or _utcnow

    @property
    def vocabulary(self) -> Vocabulary:
        return self.extractor.vocabulary

    def _best_effort(
        self,
        result: StoreResult[T],
        default: T,
        action: str,
        *,
        write: bool = False,
    ) -> T:
        if result.ok:
            return result.value
        if write:
            logger.error("Learning store %s failed: %s", action, result.error)
        else:
            logger.warning("Learning store %s failed, continuing without it: %s", action, result.error)
        return default

    async def record_query(
        self,
        dataset_id: Optional[str],
        question: str,
        query_text: Optional[str],
        was_successful: bool,
        *,
        company_group_id: Optional[str] = None,
        source: str = "chat",
        error_message: Optional[str] = None,
    ) -> Optional[str]:
        """
        Save a generated query, or reinforce it if the dataset already has it.

        Returns the learned query id, or None when nothing was persisted
        (no query text, no dataset, or a store failure).
        """
        if not query_text or not dataset_id:
            return None

        intent = classify_intent(question, self.vocabulary)
        digest = query_hash(query_text)
        now = self.clock()

        existing = self._best_effort(
            await self.store.find_learned_by_hash(dataset_id, digest), None, "hash lookup"
        )
        if existing is not None:
            return await self._reinforce(existing.id, was_successful, now)

        refs = extract_measures_and_columns(query_text, self.vocabulary)
        record = LearnedQuery(
            id=new_id(),
            dataset_id=dataset_id,
            company_group_id=company_group_id,
            question_text=(question or "")[: self.config.max_question_chars],
            intent=intent.value,
            query_text=query_text,
            query_hash=digest,
            measures_used=refs.measures,
            columns_used=refs.columns,
            times_reused=0,
            success=was_successful,
            error_message=error_message[: self.config.max_error_chars] if error_message else None,
            source=source,
            last_used_at=None,
            created_at=now,
        )
        result = await self.store.insert_learned(record)
        if result.duplicate:
            # Another writer stored the same query between lookup and insert.
            winner = self._best_effort(
                await self.store.find_learned_by_hash(dataset_id, digest), None, "hash lookup"
            )
            if winner is None:
                return None
            return await self._reinforce(winner.id, was_successful, now)

        saved = self._best_effort(result, None, "insert", write=True)
        if saved is None:
            return None
        logger.info(
            "Saved new learned query %s (intent=%s, success=%s)",
            saved.id, intent.value, was_successful,
        )
        return saved.id

    async def _reinforce(self, query_id: str, success: bool, now: dt.datetime) -> Optional[str]:
        updated = self._best_effort(
            await self.store.increment_reuse(query_id, success=success, used_at=now),
            None,
            "reuse increment",
            write=True,
        )
        if updated is None:
            return None
        logger.info("Learned query %s reused, times_reused=%s", updated.id, updated.times_reused)
        return updated.id

    async def find_similar(
        self,
        dataset_id: Optional[str],
        question: str,
        limit: int = 5,
    ) -> List[ScoredQuery]:
        """Successful queries of the same intent, at or above the similarity threshold."""
        if not dataset_id or limit <= 0:
            return []
        intent = classify_intent(question, self.vocabulary)
        candidates = self._best_effort(
            await self.store.list_learned(
                dataset_id,
                intent=intent.value,
                success=True,
                limit=limit * self.config.candidate_multiplier,
            ),
            [],
            "similar query lookup",
        )
        scored = [ScoredQuery(record=c, similarity=similarity(question, c.question_text)) for c in candidates]
        scored = [s for s in scored if s.similarity >= self.config.similarity_threshold]
        scored.sort(key=lambda s: s.similarity, reverse=True)
        if scored:
            logger.debug("Found %s similar queries for intent %s", len(scored[:limit]), intent.value)
        return scored[:limit]

    def score_training_example(self, question: str, example: TrainingExample) -> ScoredExample:
        """
        Score = concept_weight * shared concepts
              + keyword_weight * question keywords present in the example question
              + tag_weight * question keywords found in a tag or in the category.
        """
        cfg = self.config
        keywords = self.extractor.extract_keywords(question)
        concepts = self.extractor.identify_concepts(question)
        example_keywords = self.extractor.extract_keywords(example.question_text)
        example_concepts = self.extractor.identify_concepts(example.question_text)

        concept_matches = len(concepts & example_concepts)
        score = cfg.concept_weight * concept_matches
        score += cfg.keyword_weight * len(keywords & example_keywords)

        tags = [normalize(t) for t in example.tags or []]
        score += cfg.tag_weight * sum(1 for kw in keywords if any(kw in t for t in tags))
        category = normalize(example.category or "")
        if category:
            score += cfg.tag_weight * sum(1 for kw in keywords if kw in category)

        return ScoredExample(record=example, score=score, concept_matches=concept_matches)

    async def find_training_examples(
        self,
        dataset_id: Optional[str],
        question: str,
        limit: int = 3,
    ) -> List[ScoredExample]:
        """Validated examples ranked by shared concepts first, then total score."""
        if not dataset_id or limit <= 0:
            return []
        examples = self._best_effort(
            await self.store.list_training_examples(
                dataset_id, validated_only=True, limit=self.config.training_pool_size
            ),
            [],
            "training example lookup",
        )
        scored = [self.score_training_example(question, ex) for ex in examples]
        scored = [s for s in scored if s.score > 0]
        scored.sort(key=lambda s: (s.concept_matches, s.score), reverse=True)
        if scored:
            logger.debug(
                "Found %s training examples (concepts: %s)",
                len(scored[:limit]),
                ", ".join(sorted(self.extractor.identify_concepts(question))),
            )
        return scored[:limit]

    async def register_feedback(
        self,
        query_id: str,
        outcome: str,
        comment: Optional[str] = None,
    ) -> bool:
        """
        Apply user feedback to a learned query.

        positive: mark successful and count one more reuse.
        negative: mark unsuccessful and keep the comment as the error note.
        Returns False when the query does not exist or the store failed.
        """
        try:
            verdict = FeedbackOutcome(outcome)
        except ValueError as e:
            raise DaxContextError(f"Unknown feedback outcome: {outcome!r}") from e

        existing = self._best_effort(await self.store.get_learned(query_id), None, "feedback lookup")
        if existing is None:
            logger.warning("Feedback for unknown learned query %s", query_id)
            return False

        now = self.clock()
        if verdict is FeedbackOutcome.POSITIVE:
            updated = self._best_effort(
                await self.store.increment_reuse(query_id, success=True, used_at=now),
                None,
                "positive feedback",
                write=True,
            )
            ok = updated is not None
        else:
            changes = {"success": False, "last_used_at": now}
            if comment:
                changes["error_message"] = comment[: self.config.max_error_chars]
            ok = bool(
                self._best_effort(
                    await self.store.update_learned(query_id, changes),
                    False,
                    "negative feedback",
                    write=True,
                )
            )
        if ok:
            logger.info("Feedback %s recorded for learned query %s", verdict.value, query_id)
        return ok

    async def top_queries(self, dataset_id: Optional[str], limit: int = 10) -> List[LearnedQuery]:
        """Most reused successful queries of a dataset."""
        if not dataset_id:
            return []
        return self._best_effort(
            await self.store.list_learned(dataset_id, success=True, limit=limit),
            [],
            "top query lookup",
        )

    async def mark_training_example_used(self, example_id: str) -> bool:
        return bool(
            self._best_effort(
                await self.store.touch_training_example(example_id, self.clock()),
                False,
                "training example touch",
                write=True,
            )
        )

    async def get_query_context(
        self,
        dataset_id: Optional[str],
        question: str,
        limit: int = 5,
    ) -> QueryContext:
        """Similar queries, training examples and suggested measures for a question."""
        intent = classify_intent(question, self.vocabulary)
        if not dataset_id:
            return QueryContext(intent=intent)

        similar = await self.find_similar(dataset_id, question, limit)
        examples = await self.find_training_examples(
            dataset_id, question, self.config.training_examples_limit
        )
        suggested = suggest_measures(
            [s.record.query_text for s in similar],
            [e.record.query_text for e in examples],
            history_weight=self.config.history_measure_weight,
            training_weight=self.config.training_measure_weight,
            top_n=self.config.suggested_measures,
            vocabulary=self.vocabulary,
        )
        return QueryContext(
            intent=intent,
            similar_queries=similar,
            training_examples=examples,
            suggested_measures=suggested,
        )
