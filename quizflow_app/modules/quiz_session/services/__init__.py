from .catalog_service import CatalogService, QuestionSetResolver
from .draft_store import SessionDraftStore
from .progress_ledger import ProgressLedger
from .repository import QuizRepository
from .result_service import ResultLog, ScoreFinalizer, recover_lost_finalizations
from .session_service import QuizSessionService

__all__ = [
    'CatalogService',
    'QuestionSetResolver',
    'SessionDraftStore',
    'ProgressLedger',
    'QuizRepository',
    'ResultLog',
    'ScoreFinalizer',
    'QuizSessionService',
    'recover_lost_finalizations',
]
