"""
Firestore Data Access Object (DAO) layer.

Path helpers and single-purpose reads/writes over the classroom tree.
Service objects call these with the Firestore client they were given;
nothing here catches store errors, the services decide what a failure
means for their operation.
"""

import logging
from datetime import datetime, timezone

from google.cloud.firestore_v1 import FieldFilter, Query

from quizroom.firestore_models import Classroom, Member, Question, Quiz, QuizStat, User

logger = logging.getLogger(__name__)

USERS = 'users'
CLASSROOMS = 'classrooms'
MEMBERS = 'members'
QUIZZES = 'quizzes'
QUESTIONS = 'quizQuestions'
STATS = 'stats'

# Firestore batches are limited to 500 writes
BATCH_LIMIT = 500


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def utcnow():
    return datetime.now(timezone.utc)


def classroom_ref(db, classroom_id):
    return db.collection(CLASSROOMS).document(classroom_id)


def member_ref(db, classroom_id, user_id):
    return classroom_ref(db, classroom_id).collection(MEMBERS).document(user_id)


def quizzes_ref(db, classroom_id):
    return classroom_ref(db, classroom_id).collection(QUIZZES)


def quiz_ref(db, classroom_id, quiz_id):
    return quizzes_ref(db, classroom_id).document(quiz_id)


def stat_ref(db, classroom_id, quiz_id, user_id):
    return quiz_ref(db, classroom_id, quiz_id).collection(STATS).document(user_id)


def parent_classroom_ref(member_snapshot):
    """classrooms/{id} for a members/{userId} snapshot, or None if detached."""
    return member_snapshot.reference.parent.parent


# ========================================================================
# Users  (collection: users)
# ========================================================================

def get_user(db, uid):
    """Get a user by UID. Returns User or None."""
    doc = db.collection(USERS).document(uid).get()
    if not doc.exists:
        return None
    return User.from_dict(doc.to_dict(), doc.id)


def create_user(db, user):
    """Create a user document with the user's UID as the document ID."""
    db.collection(USERS).document(user.id).set(user.to_dict())


def update_user_name(db, uid, name):
    db.collection(USERS).document(uid).update({'name': name})


# ========================================================================
# Classrooms  (collection: classrooms)
# ========================================================================

def get_classroom(db, classroom_id):
    """Get a classroom by ID. Returns Classroom or None."""
    doc = classroom_ref(db, classroom_id).get()
    if not doc.exists:
        return None
    return Classroom.from_dict(doc.to_dict(), doc.id)


def get_classroom_by_password(db, password):
    """Look up a classroom by its join password. Returns Classroom or None."""
    docs = (
        db.collection(CLASSROOMS)
        .where(filter=FieldFilter('password', '==', password))
        .limit(1)
        .stream()
    )
    for doc in docs:
        return Classroom.from_dict(doc.to_dict(), doc.id)
    return None


# ========================================================================
# Members  (subcollection: classrooms/{id}/members)
# ========================================================================

def member_exists(db, classroom_id, user_id):
    return member_ref(db, classroom_id, user_id).get().exists


def get_member(db, classroom_id, user_id):
    """Get one membership. Returns Member or None."""
    doc = member_ref(db, classroom_id, user_id).get()
    if not doc.exists:
        return None
    return Member.from_dict(doc.to_dict(), doc.id)


def get_creator_id(db, classroom_id):
    """User id of the classroom's creator member, or None."""
    docs = (
        classroom_ref(db, classroom_id).collection(MEMBERS)
        .where(filter=FieldFilter('isCreator', '==', True))
        .limit(1)
        .stream()
    )
    for doc in docs:
        return Member.from_dict(doc.to_dict(), doc.id).user_id
    return None


def get_members(db, classroom_id):
    return [
        Member.from_dict(doc.to_dict(), doc.id)
        for doc in classroom_ref(db, classroom_id).collection(MEMBERS).stream()
    ]


def memberships_query(db, user_id, is_creator=None):
    """Collection-group query over every classroom's members for one user."""
    q = db.collection_group(MEMBERS).where(filter=FieldFilter('userId', '==', user_id))
    if is_creator is not None:
        q = q.where(filter=FieldFilter('isCreator', '==', is_creator))
    return q


# ========================================================================
# Quizzes  (subcollection: classrooms/{id}/quizzes)
# ========================================================================

def get_quizzes(db, classroom_id, order_field=None, descending=False):
    q = quizzes_ref(db, classroom_id)
    if order_field:
        direction = Query.DESCENDING if descending else Query.ASCENDING
        q = q.order_by(order_field, direction=direction)
    return [Quiz.from_dict(doc.to_dict(), doc.id) for doc in q.stream()]


def get_quiz(db, classroom_id, quiz_id):
    """Get a quiz by ID. Returns Quiz or None."""
    doc = quiz_ref(db, classroom_id, quiz_id).get()
    if not doc.exists:
        return None
    return Quiz.from_dict(doc.to_dict(), doc.id)


def get_quiz_ids(db, classroom_id):
    return [doc.id for doc in quizzes_ref(db, classroom_id).stream()]


def get_questions(db, classroom_id, quiz_id):
    docs = quiz_ref(db, classroom_id, quiz_id).collection(QUESTIONS).stream()
    return [Question.from_dict(doc.to_dict(), doc.id) for doc in docs]


# ========================================================================
# Stats  (subcollection: .../quizzes/{id}/stats)
# ========================================================================

def get_stat(db, classroom_id, quiz_id, user_id):
    """Get one user's stat for a quiz. Returns QuizStat or None."""
    doc = stat_ref(db, classroom_id, quiz_id, user_id).get()
    if not doc.exists:
        return None
    return QuizStat.from_dict(doc.to_dict(), doc.id)


def get_stats(db, classroom_id, quiz_id, descending=True):
    direction = Query.DESCENDING if descending else Query.ASCENDING
    docs = (
        quiz_ref(db, classroom_id, quiz_id).collection(STATS)
        .order_by('lastAttemptDate', direction=direction)
        .stream()
    )
    return [QuizStat.from_dict(doc.to_dict(), doc.id) for doc in docs]


# ========================================================================
# Bulk deletes
# ========================================================================

def delete_collection(db, collection):
    """Delete every document of one (sub)collection, BATCH_LIMIT per commit.

    Each batch only touches documents of this collection. Nested
    subcollections are not followed. Returns the number of deleted docs.
    """
    deleted = 0
    batch = db.batch()
    count = 0
    for doc in list(collection.stream()):
        batch.delete(doc.reference)
        count += 1
        if count >= BATCH_LIMIT:
            batch.commit()
            deleted += count
            batch = db.batch()
            count = 0
    if count > 0:
        batch.commit()
        deleted += count
    return deleted
