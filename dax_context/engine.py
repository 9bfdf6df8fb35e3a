"""
Context engine: question in, bounded model context out.

Wires the documentation parser, context optimizer, learning service and
context builder in the order a chat or alert request needs them, and closes
the loop by recording the generated query once the answer is known.
"""

from __future__ import annotations

import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Union

from dax_context.generation.config import GenerationConfig
from dax_context.generation.context_builder import build_context
from dax_context.knowledge.keywords import KeywordExtractor
from dax_context.knowledge.models import ParsedDocumentation
from dax_context.knowledge.parser import parse_documentation
from dax_context.knowledge.vocabulary import QuestionIntent
from dax_context.learning.outcome import FailureReason, identify_failure_reason, is_failure_response
from dax_context.learning.service import QueryContext, QueryLearningService
from dax_context.retrieval.config import OptimizerConfig
from dax_context.retrieval.optimizer import OptimizedContext, optimize

logger = logging.getLogger(__name__)


@dataclass
class AssembledContext:
    """Context text plus the pieces it was built from."""

    text: str
    optimized: OptimizedContext
    query_context: QueryContext

    @property
    def intent(self) -> QuestionIntent:
        return self.query_context.intent


@dataclass
class LearningOutcome:
    query_id: Optional[str]
    success: bool
    failure_reason: Optional[FailureReason] = None


class ContextEngine:
    """Builds model context for a question and learns from the result."""

    def __init__(
        self,
        learning: QueryLearningService,
        optimizer_config: Optional[OptimizerConfig] = None,
        generation_config: Optional[GenerationConfig] = None,
        extractor: Optional[KeywordExtractor] = None,
        cache_size: int = 32,
    ):
        self.learning = learning
        self.optimizer_config = optimizer_config or OptimizerConfig()
        self.generation_config = generation_config or GenerationConfig()
        self.extractor = extractor or learning.extractor
        self.cache_size = max(1, cache_size)
        self._parsed: "OrderedDict[str, ParsedDocumentation]" = OrderedDict()

    def parse_cached(self, raw: str) -> ParsedDocumentation:
        """Parse `raw`, reusing the previous result while the text is unchanged."""
        key = hashlib.md5((raw or "").encode("utf-8")).hexdigest()
        parsed = self._parsed.get(key)
        if parsed is not None:
            self._parsed.move_to_end(key)
            return parsed
        parsed = parse_documentation(raw)
        if parsed.errors:
            logger.warning("Documentation parsed with problems: %s", "; ".join(parsed.errors))
        self._parsed[key] = parsed
        if len(self._parsed) > self.cache_size:
            self._parsed.popitem(last=False)
        return parsed

    async def build(
        self,
        document: Union[str, ParsedDocumentation, None],
        dataset_id: Optional[str],
        question: str,
        limit: int = 5,
    ) -> AssembledContext:
        """Select documentation, fetch learned material and assemble the context."""
        doc = self.parse_cached(document) if isinstance(document, str) else document
        optimized = optimize(doc, question, self.optimizer_config, self.extractor)
        query_context = await self.learning.get_query_context(dataset_id, question, limit)
        for scored in query_context.training_examples:
            await self.learning.mark_training_example_used(scored.record.id)

        text = build_context(
            optimized, query_context, self.generation_config, self.extractor.vocabulary
        )
        logger.debug(
            "Assembled %s chars of context for intent %s",
            len(text), query_context.intent.value,
        )
        return AssembledContext(text=text, optimized=optimized, query_context=query_context)

    async def learn(
        self,
        dataset_id: Optional[str],
        question: str,
        query_text: Optional[str],
        answer: str,
        *,
        has_query_error: bool = False,
        company_group_id: Optional[str] = None,
        source: str = "chat",
    ) -> LearningOutcome:
        """Record the generated query, judging success from the model's answer."""
        failed = has_query_error or is_failure_response(answer)
        reason = identify_failure_reason(answer, has_query_error) if failed else None
        query_id = await self.learning.record_query(
            dataset_id,
            question,
            query_text,
            not failed,
            company_group_id=company_group_id,
            source=source,
            error_message=reason.value if reason else None,
        )
        return LearningOutcome(query_id=query_id, success=not failed, failure_reason=reason)
