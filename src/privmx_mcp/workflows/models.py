"""Workflow data models.

A workflow is a named, ordered sequence of API steps that accomplishes a
goal. Step prerequisites reference other steps of the same workflow by id
and must form a DAG; ``WorkflowDefinition.validate()`` enforces both.
"""

from dataclasses import dataclass, field
from typing import Any

from privmx_mcp.errors import WorkflowDefinitionError
from privmx_mcp.knowledge.models.document import DocumentType, IndexedDocument
from privmx_mcp.knowledge.search.engines.base_engine import is_language_compatible


@dataclass
class WorkflowStep:
    """One API step of a workflow.

    Attributes:
        id: Step id, unique within the workflow ("create-thread")
        name: Human readable name ("Create Secure Thread")
        description: What the step does
        api_method: ``Class.method`` the step calls ("ThreadApi.createThread")
        parameters: Parameter name → type hints
        prerequisites: Ids of steps that must run first
        example: Optional one-line code example
    """

    id: str
    name: str
    description: str
    api_method: str
    parameters: dict[str, str] = field(default_factory=dict)
    prerequisites: list[str] = field(default_factory=list)
    example: str = ""

    @property
    def method_name(self) -> str:
        """Method part of ``api_method`` ("createThread")."""
        return self.api_method.rsplit(".", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "api_method": self.api_method,
            "parameters": dict(self.parameters),
            "prerequisites": list(self.prerequisites),
        }


@dataclass
class WorkflowDefinition:
    """A named multi-step recipe.

    Usage:
        >>> workflow = WorkflowDefinition(id="wf", name="Demo", description="...", steps=[...])
        >>> workflow.validate()
        >>> [s.id for s in workflow.ordered_steps()]
        ['setup-endpoint', 'establish-connection']
    """

    id: str
    name: str
    description: str
    steps: list[WorkflowStep] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    difficulty: str = "intermediate"
    estimated_time: str = ""

    def validate(self) -> None:
        """Check that prerequisites reference known steps and form a DAG.

        Raises:
            WorkflowDefinitionError: On duplicate step ids, unknown
                prerequisites or a prerequisite cycle
        """
        ids = [step.id for step in self.steps]
        if len(set(ids)) != len(ids):
            raise WorkflowDefinitionError(f"Workflow '{self.id}' has duplicate step ids")

        known = set(ids)
        for step in self.steps:
            unknown = [p for p in step.prerequisites if p not in known]
            if unknown:
                raise WorkflowDefinitionError(
                    f"Workflow '{self.id}' step '{step.id}' has unknown prerequisites: {unknown}"
                )
        # raises on cycles
        self.ordered_steps()

    def ordered_steps(self) -> list[WorkflowStep]:
        """Steps in dependency order, declared order among independent steps.

        Raises:
            WorkflowDefinitionError: If the prerequisites contain a cycle
        """
        known = self.step_ids()
        remaining = list(self.steps)
        done: set[str] = set()
        ordered: list[WorkflowStep] = []
        while remaining:
            ready = next(
                (s for s in remaining if all(p in done or p not in known for p in s.prerequisites)),
                None,
            )
            if ready is None:
                cycle = [s.id for s in remaining]
                raise WorkflowDefinitionError(f"Workflow '{self.id}' has a prerequisite cycle among {cycle}")
            ordered.append(ready)
            done.add(ready.id)
            remaining.remove(ready)
        return ordered

    def step_ids(self) -> set[str]:
        return {step.id for step in self.steps}

    def get_step(self, step_id: str) -> WorkflowStep | None:
        return next((step for step in self.steps if step.id == step_id), None)

    def supports_language(self, language: str | None) -> bool:
        if not language or not self.languages:
            return True
        return any(is_language_compatible(language, supported) for supported in self.languages)

    def to_document(self) -> IndexedDocument:
        """Matching corpus entry: name, description, tags and step text."""
        step_text = " ".join(f"{s.name}. {s.description}." for s in self.steps)
        return IndexedDocument(
            id=self.id,
            name=self.name,
            doc_type=DocumentType.WORKFLOW,
            description=f"{self.description}. {step_text}".strip(),
            keywords=[*self.tags, *(s.api_method for s in self.steps)],
            metadata={"difficulty": self.difficulty, "languages": list(self.languages)},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "languages": list(self.languages),
            "difficulty": self.difficulty,
            "estimated_time": self.estimated_time,
            "steps": [step.to_dict() for step in self.ordered_steps()],
        }


@dataclass
class WorkflowSuggestion:
    """A workflow matched to a goal, with its relevance in [0, 1]."""

    workflow: WorkflowDefinition
    relevance: float
    rank: int = 0

    @property
    def steps(self) -> list[WorkflowStep]:
        return self.workflow.ordered_steps()

    def to_dict(self) -> dict[str, Any]:
        payload = self.workflow.to_dict()
        payload["relevance"] = round(self.relevance, 4)
        payload["rank"] = self.rank
        return payload


@dataclass
class NextStepSuggestion:
    """A follow-on API call proposed for the caller's current code."""

    action: str
    reason: str
    api_method: str
    priority: str
    workflow_id: str
    step_id: str
    satisfied_prerequisites: int = 0
    missing_prerequisites: list[str] = field(default_factory=list)
    code_example: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "reason": self.reason,
            "api_method": self.api_method,
            "priority": self.priority,
            "workflow_id": self.workflow_id,
            "step_id": self.step_id,
            "satisfied_prerequisites": self.satisfied_prerequisites,
            "missing_prerequisites": list(self.missing_prerequisites),
            "code_example": self.code_example,
        }
