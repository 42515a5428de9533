from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass
class QuestionPool:
    """Flattened candidate questions for one category."""
    category_id: int
    category_name: str
    subject_name: str
    quiz_ids: List[int]
    questions: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.questions)

    @property
    def primary_quiz_id(self) -> Optional[int]:
        return self.quiz_ids[0] if self.quiz_ids else None


@dataclass
class SubmissionFeedback:
    pool_index: int
    selected: str
    correct: bool
    correct_answer: str
    explanation: Optional[str] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class AdvanceResult:
    done: bool
    next_question: Optional[Dict[str, Any]] = None
    score: Optional[int] = None
    total: Optional[int] = None
    percentage: Optional[int] = None
    result_id: Optional[int] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class SessionHandle:
    """What the presentation layer holds on to between requests."""
    handle: int
    category_id: int
    category_name: str
    resumed: bool
    current_question: Optional[Dict[str, Any]]
    progress: Dict[str, Any]
    state: str
    pending_selection: Optional[str] = None

    def to_dict(self):
        return asdict(self)
