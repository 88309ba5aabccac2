"""Interactive session engine.

A small state machine per session that walks a caller from a goal to
generated code:

    step 1  template_selection
    step 2  code_generation
    step 3  validation
    step 4+ completion (status becomes ``completed``)

``total_steps`` is a planning estimate reported to callers; the progression
above never depends on it. Operations on one session id are serialised by a
per-session lock; different ids are independent.
"""

import logging
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from privmx_mcp.codegen import CodeGeneratorRegistry, create_default_registry
from privmx_mcp.config import SessionConfig
from privmx_mcp.errors import InvalidSessionStateError, SessionNotFoundError
from privmx_mcp.sessions.models import (
    SESSION_TEMPLATES,
    ActionType,
    NextAction,
    Session,
    SessionProgress,
    SessionStatus,
    SessionTemplate,
)
from privmx_mcp.sessions.store import InMemorySessionStore, SessionStore
from privmx_mcp.workflows.matcher import WorkflowMatcher

logger = logging.getLogger("privmx-mcp.sessions")

# step number → (action, description, result of the previous step)
_STEP_ACTIONS = {
    2: (ActionType.CODE_GENERATION, "Generate initial project structure", "Template selected successfully"),
    3: (ActionType.VALIDATION, "Review generated code", "Code generated successfully"),
}
_COMPLETION_STEP = 4


def _template(template_id: str | None) -> SessionTemplate | None:
    return next((t for t in SESSION_TEMPLATES if t.id == template_id), None)


class InteractiveSessionEngine:
    """Drives guided sessions.

    Usage:
        >>> engine = InteractiveSessionEngine()
        >>> progress = await engine.start("build a chat app", {"language": "typescript"})
        >>> progress.next_action.type.value
        'template_selection'
        >>> engine.continue_session(progress.session_id, {"template": "secure-chat"}).next_action.type.value
        'code_generation'
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        code_generators: CodeGeneratorRegistry | None = None,
        matcher: WorkflowMatcher | None = None,
        config: SessionConfig | None = None,
    ):
        self.store = store or InMemorySessionStore()
        self.code_generators = code_generators or create_default_registry()
        self.matcher = matcher
        self.config = config or SessionConfig()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, goal: str, context: dict[str, Any] | None = None) -> SessionProgress:
        """Create an active session at step 1 and offer templates.

        When a workflow matcher is attached, workflows matching the goal are
        listed alongside the templates and the best one is remembered in the
        session context.
        """
        context = dict(context or {})
        options: list[dict[str, Any]] = [{"id": t.id, "name": t.name} for t in SESSION_TEMPLATES]

        if self.matcher is not None and goal.strip():
            suggestions = await self.matcher.find_workflows_for_goal(goal, context.get("language"))
            for suggestion in suggestions:
                options.append(
                    {
                        "id": suggestion.workflow.id,
                        "name": suggestion.workflow.name,
                        "kind": "workflow",
                        "relevance": round(suggestion.relevance, 4),
                    }
                )
            if suggestions:
                context.setdefault("workflow_id", suggestions[0].workflow.id)

        session = Session(
            id=f"session-{uuid.uuid4().hex[:12]}",
            goal=goal,
            context=context,
            total_steps=self.config.total_steps,
        )
        self.store.put(session)
        logger.info("Started session %s for goal: %r", session.id, goal)

        return SessionProgress(
            session_id=session.id,
            current_step=session.current_step,
            total_steps=session.total_steps,
            next_action=NextAction(
                type=ActionType.TEMPLATE_SELECTION,
                description="Choose a template for your project",
                options=options,
            ),
        )

    def continue_session(self, session_id: str, response: dict[str, Any] | None = None) -> SessionProgress:
        """Advance an active session by one step.

        A completed session answers with the completion action again without
        advancing.

        Raises:
            SessionNotFoundError: Unknown id
            InvalidSessionStateError: Session is paused or cancelled
        """
        with self._session_lock(session_id):
            session = self._require(session_id)

            if session.status is SessionStatus.COMPLETED:
                return self._completion(session)
            if session.status is not SessionStatus.ACTIVE:
                raise InvalidSessionStateError(session_id, session.status.value)

            if session.current_step == 1:
                self._apply_selection(session, response or {})
            session.current_step += 1
            logger.info("Session %s advanced to step %d", session_id, session.current_step)

            if session.current_step >= _COMPLETION_STEP:
                session.status = SessionStatus.COMPLETED
                self.store.put(session)
                return self._completion(session)

            action, description, result = _STEP_ACTIONS[session.current_step]
            self.store.put(session)
            return SessionProgress(
                session_id=session.id,
                current_step=session.current_step,
                total_steps=session.total_steps,
                next_action=NextAction(type=action, description=description, result=result),
            )

    def pause(self, session_id: str) -> bool:
        return self._transition(session_id, SessionStatus.PAUSED, allowed={SessionStatus.ACTIVE, SessionStatus.PAUSED})

    def resume(self, session_id: str) -> bool:
        return self._transition(session_id, SessionStatus.ACTIVE, allowed={SessionStatus.ACTIVE, SessionStatus.PAUSED})

    def cancel(self, session_id: str) -> bool:
        """Cancel unconditionally; False only for unknown ids."""
        return self._transition(session_id, SessionStatus.CANCELLED, allowed=set(SessionStatus))

    def get_status(self, session_id: str) -> dict[str, Any]:
        """
        Raises:
            SessionNotFoundError: Unknown id
        """
        with self._session_lock(session_id):
            return self._require(session_id).status_dict()

    def list_sessions(self) -> list[dict[str, Any]]:
        return [session.summary_dict() for session in self.store.list()]

    # ------------------------------------------------------------------
    # Code generation
    # ------------------------------------------------------------------

    def generate_step_code(self, session_id: str, step_index: int) -> dict[str, Any]:
        """Generate code for one step of a session.

        Step 1 produces project setup code through the code generator for the
        session's language and features. Later steps produce the API calls of
        the session's workflow. Regenerating a step replaces its file records.

        Raises:
            SessionNotFoundError: Unknown id
            CodeGenerationError: From the code generator; the session is unchanged
        """
        with self._session_lock(session_id):
            session = self._require(session_id)
            language = str(session.context.get("language") or self.config.default_language)
            logger.info("Generating code for session %s, step %d", session_id, step_index)

            if step_index == 1:
                features = list(session.context.get("features") or self.config.default_features)
                generated = self.code_generators.generate_setup_code(language, features)
                for file in generated.files:
                    session.record_file(file["path"], file.get("description", ""))
                self.store.put(session)
                return {
                    "code": generated.code,
                    "files": generated.files,
                    "instructions": [*generated.instructions, f"Step {step_index} code generated"],
                }

            return self._workflow_step_code(session, step_index)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None and self.store.get(session_id) is not None:
                lock = self._locks[session_id] = threading.Lock()
        if lock is None:
            # unknown id, the caller reports it
            yield
            return
        with lock:
            yield

    def _require(self, session_id: str) -> Session:
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _transition(self, session_id: str, target: SessionStatus, allowed: set[SessionStatus]) -> bool:
        with self._session_lock(session_id):
            session = self.store.get(session_id)
            if session is None:
                return False
            if session.status not in allowed:
                logger.info("Session %s is %s, refusing %s", session_id, session.status.value, target.value)
                return False
            session.status = target
            self.store.put(session)
            logger.info("Session %s is now %s", session_id, target.value)
            return True

    @staticmethod
    def _completion(session: Session) -> SessionProgress:
        return SessionProgress(
            session_id=session.id,
            current_step=session.current_step,
            total_steps=session.total_steps,
            next_action=NextAction(
                type=ActionType.COMPLETION,
                description="Session completed successfully",
                result="Project setup complete",
            ),
            is_complete=True,
        )

    @staticmethod
    def _apply_selection(session: Session, response: dict[str, Any]) -> None:
        template = _template(response.get("template") or response.get("template_id"))
        if template is not None:
            session.context["template"] = template.id
            session.context.setdefault("features", list(template.features))
            session.context["workflow_id"] = template.workflow_id
        elif response.get("workflow_id"):
            session.context["workflow_id"] = str(response["workflow_id"])
        for key in ("language", "features"):
            if response.get(key):
                session.context[key] = response[key]

    def _workflow_step_code(self, session: Session, step_index: int) -> dict[str, Any]:
        workflow_id = session.context.get("workflow_id")
        workflow = self.matcher.get_workflow(workflow_id) if self.matcher and workflow_id else None
        if workflow is None:
            return {
                "code": f"// Workflow step {step_index}: no workflow selected for this session",
                "files": [],
                "instructions": [f"Step {step_index} has no workflow code", "Select a template first"],
            }

        lines = [f"// {workflow.name}"]
        for step in workflow.ordered_steps():
            lines.append(f"// {step.name}: {step.description}")
            lines.append(step.example or f"// call {step.api_method}")
        return {
            "code": "\n".join(lines) + "\n",
            "files": [],
            "instructions": [f"Step {step_index} code generated", "Review and adapt as needed"],
        }
