"""
Name uniqueness checks against the store.

Both checks read the current names and compare normalized forms; they do
not reserve anything. Two creations racing with the same name can both
pass before either writes, and the second one wins a duplicate. Firestore
has no multi-document unique constraint to close that window.

A failed lookup raises. Callers must not create or rename on an
inconclusive check.
"""

import logging

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.naming import normalize_name

logger = logging.getLogger(__name__)


class UniquenessChecker:

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    def classroom_name_is_unique(self, user_id, name, exclude_id=None):
        """True if none of the classrooms user_id created has this name.

        A user's classrooms are not listed under the user record, so the
        creator memberships are found with a collection-group query and
        each parent classroom is read until a clash turns up.
        """
        candidate = normalize_name(name)
        memberships = dao.memberships_query(self.db, user_id, is_creator=True).stream()
        for member_doc in memberships:
            classroom = dao.parent_classroom_ref(member_doc)
            if classroom is None or classroom.id == exclude_id:
                continue
            snapshot = classroom.get()
            if not snapshot.exists:
                continue
            existing = (snapshot.to_dict() or {}).get('classroomName')
            if existing is not None and normalize_name(existing) == candidate:
                logger.info('Classroom name %r already used by %s (%s)', name, user_id, classroom.id)
                return False
        return True

    def quiz_name_is_unique(self, classroom_id, name, exclude_id=None):
        """True if no other quiz in the classroom has this name."""
        candidate = normalize_name(name)
        for doc in dao.quizzes_ref(self.db, classroom_id).stream():
            if doc.id == exclude_id:
                continue
            existing = (doc.to_dict() or {}).get('quizName')
            if existing is not None and normalize_name(existing) == candidate:
                logger.info('Quiz name %r already used in classroom %s', name, classroom_id)
                return False
        return True
