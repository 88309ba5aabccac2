"""Goal → workflow matching and next-step suggestions.

Workflows are indexed as documents (name, description, tags, step text) and
ranked with the same hybrid ranker used for API search.

The fused score is relative to the best workflow for the query, so relevance
scales it by goal coverage: the share of the goal's feature terms (generic
scaffolding words like "build" or "app" excluded) found in the workflow text.
A goal sharing only such words with the catalog, or nothing at all, scores 0.
Suggestions below ``min_relevance`` are dropped.
"""

import logging
import re

from privmx_mcp.config import SearchConfig
from privmx_mcp.knowledge.models.document import IndexedDocument
from privmx_mcp.knowledge.search.engines.hybrid_engine import HybridRanker
from privmx_mcp.knowledge.search.engines.lexical_engine import LexicalSearchEngine
from privmx_mcp.knowledge.search.engines.semantic_engine import SemanticIndex
from privmx_mcp.workflows.catalog import default_workflows
from privmx_mcp.workflows.models import (
    NextStepSuggestion,
    WorkflowDefinition,
    WorkflowStep,
    WorkflowSuggestion,
)

logger = logging.getLogger("privmx-mcp.workflows")

# Words that say what to do, not which SDK feature is needed
GENERIC_GOAL_TERMS = frozenset(
    {
        "build", "create", "make", "add", "get", "list", "implement", "develop",
        "write", "use", "need", "want", "app", "apps", "application", "system",
        "feature", "project", "simple", "basic", "new",
    }
)


def _priority(satisfied: int, total: int) -> str:
    ratio = 1.0 if total == 0 else satisfied / total
    if ratio >= 1.0:
        return "high"
    if ratio >= 0.5:
        return "medium"
    return "low"


def _call_pattern(method_name: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(method_name)}\s*\(", re.IGNORECASE)


class WorkflowMatcher:
    """Ranks workflows for a free-text goal.

    Usage:
        >>> matcher = WorkflowMatcher()
        >>> suggestions = await matcher.find_workflows_for_goal("build a chat app")
        >>> suggestions[0].workflow.id
        'secure-messaging'
    """

    def __init__(
        self,
        workflows: list[WorkflowDefinition] | None = None,
        search_config: SearchConfig | None = None,
        min_relevance: float = 0.1,
        semantic: SemanticIndex | None = None,
    ):
        """
        Args:
            workflows: Workflow catalog, defaults to the built-in workflows
            search_config: Lexical algorithm and fusion weights
            min_relevance: Suggestions scoring below this are dropped
            semantic: Optional semantic index over the workflow documents

        Raises:
            WorkflowDefinitionError: If a workflow has unknown or cyclic prerequisites
        """
        config = search_config or SearchConfig()
        self.workflows: list[WorkflowDefinition] = list(workflows if workflows is not None else default_workflows())
        for workflow in self.workflows:
            workflow.validate()
        self._by_id = {workflow.id: workflow for workflow in self.workflows}
        self.min_relevance = min_relevance
        self.semantic = semantic

        self._engine = LexicalSearchEngine(
            document_loader=self.documents,
            algorithm=config.text_algo,
            k1=config.bm25_k1,
            b=config.bm25_b,
        )
        self._engine.build()
        tokenizer = self._engine.indexer.tokenizer
        self._terms = {doc.id: tokenizer.tokenize_to_set(doc.text) for doc in self.documents()}
        self._ranker = HybridRanker(
            self._engine,
            semantic,
            lexical_weight=config.lexical_weight,
            semantic_weight=config.semantic_weight,
            max_results=max(1, len(self.workflows)),
        )

    def documents(self) -> list[IndexedDocument]:
        return [workflow.to_document() for workflow in self.workflows]

    async def initialize_semantic(self) -> None:
        """Embed workflow documents (no-op without a semantic index)."""
        if self.semantic is not None:
            await self.semantic.initialize(self.documents())

    def get_workflow(self, workflow_id: str) -> WorkflowDefinition | None:
        return self._by_id.get(workflow_id)

    def goal_coverage(self, goal: str, workflow_id: str) -> float:
        """Share of the goal's feature terms present in the workflow text.

        Example:
            >>> matcher.goal_coverage("build a chat app", "secure-messaging")
            1.0
            >>> matcher.goal_coverage("list the planets", "inbox-system")
            0.0
        """
        terms = self._engine.indexer.tokenizer.tokenize_to_set(goal) - GENERIC_GOAL_TERMS
        if not terms:
            return 0.0
        return len(terms & self._terms.get(workflow_id, set())) / len(terms)

    async def find_workflows_for_goal(self, goal: str, language: str | None = None) -> list[WorkflowSuggestion]:
        """Rank workflows for ``goal``.

        Returns:
            Suggestions ordered by relevance; [] for an empty goal or when no
            workflow clears the relevance threshold
        """
        if not goal or not goal.strip():
            return []

        results = await self._ranker.search(goal, limit=len(self.workflows))
        suggestions = []
        for result in results:
            workflow = self._by_id.get(result.id)
            if workflow is None or not workflow.supports_language(language):
                continue
            relevance = result.score * self.goal_coverage(goal, workflow.id)
            if relevance < self.min_relevance:
                continue
            suggestions.append(WorkflowSuggestion(workflow=workflow, relevance=relevance))

        # stable: equal relevance keeps the ranker order
        suggestions.sort(key=lambda s: -s.relevance)
        for rank, suggestion in enumerate(suggestions, start=1):
            suggestion.rank = rank
        logger.debug("goal=%r matched %d workflow(s)", goal, len(suggestions))
        return suggestions

    def suggest_next_steps(self, current_code: str, language: str | None = None) -> list[NextStepSuggestion]:
        """Propose API calls that follow what ``current_code`` already does.

        A step counts as present when its method is called in the code
        (case-insensitive ``name(``). Missing steps are proposed when they
        have no prerequisites or at least one prerequisite is present, ranked
        by satisfied prerequisite count, then workflow and step order. Each
        API method is proposed once.
        """
        code = current_code or ""
        candidates: list[tuple[int, int, int, NextStepSuggestion]] = []

        for wf_index, workflow in enumerate(self.workflows):
            if not workflow.supports_language(language):
                continue
            present = {step.id for step in workflow.steps if _call_pattern(step.method_name).search(code)}

            for step_index, step in enumerate(workflow.ordered_steps()):
                if step.id in present:
                    continue
                satisfied = [p for p in step.prerequisites if p in present]
                if step.prerequisites and not satisfied:
                    continue
                missing = [p for p in step.prerequisites if p not in present]
                suggestion = NextStepSuggestion(
                    action=step.name,
                    reason=self._reason(workflow, step, satisfied),
                    api_method=step.api_method,
                    priority=_priority(len(satisfied), len(step.prerequisites)),
                    workflow_id=workflow.id,
                    step_id=step.id,
                    satisfied_prerequisites=len(satisfied),
                    missing_prerequisites=[self._api_method(workflow, p) for p in missing],
                    code_example=step.example,
                )
                candidates.append((-len(satisfied), wf_index, step_index, suggestion))

        candidates.sort(key=lambda c: c[:3])
        seen: set[str] = set()
        suggestions = []
        for *_, suggestion in candidates:
            key = suggestion.api_method.lower()
            if key in seen:
                continue
            seen.add(key)
            suggestions.append(suggestion)
        return suggestions

    @staticmethod
    def _api_method(workflow: WorkflowDefinition, step_id: str) -> str:
        step = workflow.get_step(step_id)
        return step.api_method if step else step_id

    def _reason(self, workflow: WorkflowDefinition, step: WorkflowStep, satisfied: list[str]) -> str:
        if not step.prerequisites:
            return f"{step.description}: required before any other step of '{workflow.name}'"
        done = ", ".join(self._api_method(workflow, p) for p in satisfied)
        return f"{step.description}: follows {done} already in your code"
