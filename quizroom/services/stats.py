import logging

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.firestore_models import QuizStat
from quizroom.results import Reason, Rejected, Success, store_operation
from quizroom.services.identity import IdentityStore

logger = logging.getLogger(__name__)


class StatsService:
    """Record quiz attempts and read them back for teachers and students."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()
        self.identity = IdentityStore(self.db)

    @store_operation
    def submit_attempt(self, user_id, classroom_id, quiz_id, attempt):
        """Append attempt to the user's stat for the quiz, creating it if needed.

        Written with merge=True, so no separate existence transaction is
        used. Two submissions racing for the same user keep whichever
        write lands last. The quiz must exist and the user must be a
        member of its classroom.
        """
        if dao.get_quiz(self.db, classroom_id, quiz_id) is None:
            return Rejected(Reason.NOT_FOUND, 'Quiz not found.')
        if not dao.member_exists(self.db, classroom_id, user_id):
            return Rejected(Reason.NOT_FOUND, 'You are not enrolled in this classroom.')

        user = self.identity.require_user(user_id)
        existing = dao.get_stat(self.db, classroom_id, quiz_id, user_id)
        attempts = list(existing.attempts) if existing else []
        attempts.append(attempt)

        stat = QuizStat(
            user_id=user_id,
            email=user.email,
            name=user.name,
            last_attempt_date=attempt.attempt_date,
            attempts=attempts,
        )
        dao.stat_ref(self.db, classroom_id, quiz_id, user_id).set(stat.to_dict(), merge=True)
        logger.info('Recorded attempt %d/%d for %s on %s/%s (attempt #%d)',
                    attempt.score, attempt.total_score, user_id, classroom_id, quiz_id, len(attempts))
        return Success(stat)

    @store_operation
    def get_quiz_stats(self, classroom_id, quiz_id, descending=True):
        """Every student's stat for a quiz, ordered by last attempt."""
        return Success(dao.get_stats(self.db, classroom_id, quiz_id, descending))

    @store_operation
    def get_user_stat(self, classroom_id, quiz_id, user_id):
        """The user's stat, or Success(None) before their first attempt."""
        return Success(dao.get_stat(self.db, classroom_id, quiz_id, user_id))
