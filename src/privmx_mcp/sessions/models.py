"""Session data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)


class ActionType(str, Enum):
    TEMPLATE_SELECTION = "template_selection"
    CODE_GENERATION = "code_generation"
    VALIDATION = "validation"
    COMPLETION = "completion"


@dataclass(frozen=True)
class SessionTemplate:
    """Project template offered at template selection."""

    id: str
    name: str
    workflow_id: str
    features: tuple[str, ...]


# Offered in this order at step 1
SESSION_TEMPLATES = (
    SessionTemplate("secure-chat", "Secure Chat Application", "secure-messaging", ("threads",)),
    SessionTemplate("file-sharing", "File Sharing Platform", "file-storage", ("stores",)),
    SessionTemplate("feedback-inbox", "Anonymous Feedback System", "inbox-system", ("inboxes",)),
)


@dataclass
class GeneratedFile:
    path: str
    description: str
    status: str = "generated"

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "description": self.description, "status": self.status}


@dataclass
class NextAction:
    type: ActionType
    description: str
    options: list[dict[str, Any]] | None = None
    result: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value, "description": self.description}
        if self.options is not None:
            payload["options"] = self.options
        if self.result is not None:
            payload["result"] = self.result
        return payload


@dataclass
class Session:
    """One guided interaction, tracked by id.

    ``current_step`` only ever increases; ``completed`` and ``cancelled``
    accept no further ``continue`` calls.
    """

    id: str
    goal: str
    context: dict[str, Any] = field(default_factory=dict)
    status: SessionStatus = SessionStatus.ACTIVE
    current_step: int = 1
    total_steps: int = 5
    generated_files: list[GeneratedFile] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def progress(self) -> float:
        """Percent of the planned steps reached, capped at 100."""
        if self.total_steps <= 0:
            return 100.0
        return min(100.0, self.current_step / self.total_steps * 100)

    def record_file(self, path: str, description: str, status: str = "generated") -> None:
        """Add a generated file record, replacing an existing one with the same path."""
        for existing in self.generated_files:
            if existing.path == path:
                existing.description = description
                existing.status = status
                return
        self.generated_files.append(GeneratedFile(path=path, description=description, status=status))

    def status_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.id,
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "progress": round(self.progress, 2),
            "status": self.status.value,
            "generated_files": [f.to_dict() for f in self.generated_files],
        }

    def summary_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.id,
            "goal": self.goal,
            "started_at": self.started_at.isoformat(),
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "status": self.status.value,
        }


@dataclass
class SessionProgress:
    """Result of ``start`` and ``continue``."""

    session_id: str
    current_step: int
    total_steps: int
    next_action: NextAction
    is_complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "next_action": self.next_action.to_dict(),
            "is_complete": self.is_complete,
        }
