import logging

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.results import Reason, Rejected, StoreUnavailable, Success, store_operation

logger = logging.getLogger(__name__)


class IdentityStore:
    """Read access to users/{userId} profile records."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    @store_operation
    def get_user(self, user_id):
        user = dao.get_user(self.db, user_id)
        if user is None:
            return Rejected(Reason.NOT_FOUND, 'User not found.')
        return Success(user)

    def require_user(self, user_id):
        """Return the User or raise; a missing profile blocks any dependent write."""
        user = dao.get_user(self.db, user_id)
        if user is None:
            logger.error('No user record for %s', user_id)
            raise StoreUnavailable(f'user {user_id} not found')
        return user
