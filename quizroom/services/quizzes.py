import enum
import logging

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.firestore_models import Question, Quiz, parse_datetime
from quizroom.naming import QUIZ_NAME_MAX, QUIZ_NAME_MIN, clean_name, is_valid_quiz_name
from quizroom.results import Reason, Rejected, StoreUnavailable, Success, store_operation
from quizroom.services import cascade
from quizroom.services.uniqueness import UniquenessChecker

logger = logging.getLogger(__name__)

NAME_RULE = f'Quiz name must be unique and {QUIZ_NAME_MIN}-{QUIZ_NAME_MAX} characters.'
MIN_QUESTIONS = 2
MIN_OPTIONS = 2
MAX_OPTIONS = 5


class QuizOrder(str, enum.Enum):
    CREATED_AT = 'createdAt'
    DEADLINE = 'deadline'


def question_problem(question):
    """Why a cleaned question can't be stored, or None if it can."""
    if not question.question:
        return 'Every question needs a prompt.'
    if not MIN_OPTIONS <= len(question.options) <= MAX_OPTIONS:
        return f'Every question needs {MIN_OPTIONS}-{MAX_OPTIONS} options.'
    if question.answer not in question.options:
        return 'The answer must be one of the options.'
    return None


class QuizService:
    """Create, edit, delete and read quizzes of one classroom."""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()
        self.uniqueness = UniquenessChecker(self.db)

    @store_operation
    def create_quiz(self, classroom_id, raw_name, deadline, questions, now=None):
        """Create the quiz doc, then all of its questions in one batch.

        The batch makes the question set all-or-nothing: a quiz is never
        readable with only some of its questions.
        """
        name = clean_name(raw_name)
        if not is_valid_quiz_name(name):
            return Rejected(Reason.INVALID_NAME, NAME_RULE)

        deadline = parse_datetime(deadline)
        now = now or dao.utcnow()
        if deadline is None or deadline <= now:
            return Rejected(Reason.INVALID_DEADLINE, 'The deadline must be in the future.')

        cleaned = [q.cleaned() for q in questions or []]
        if len(cleaned) < MIN_QUESTIONS:
            return Rejected(Reason.INVALID_QUESTIONS, f'A quiz needs at least {MIN_QUESTIONS} questions.')
        for q in cleaned:
            problem = question_problem(q)
            if problem:
                return Rejected(Reason.INVALID_QUESTIONS, problem)

        if not self.uniqueness.quiz_name_is_unique(classroom_id, name):
            return Rejected(Reason.DUPLICATE_NAME, NAME_RULE)

        ref = dao.quizzes_ref(self.db, classroom_id).document()
        ref.set({
            'quizName': name,
            'createdAt': SERVER_TIMESTAMP,
            'deadline': deadline,
        })
        snapshot = ref.get()
        quiz = Quiz.from_dict(snapshot.to_dict() or {}, snapshot.id)

        batch = self.db.batch()
        for q in cleaned:
            batch.set(ref.collection(dao.QUESTIONS).document(), q.to_dict())
        batch.commit()

        logger.info('Created quiz %r (%s) in %s with %d questions',
                    name, ref.id, classroom_id, len(cleaned))
        return Success(quiz)

    @store_operation
    def update_quiz_name_deadline(self, classroom_id, quiz_id, raw_name, deadline):
        """Rename a quiz and move its deadline.

        The deadline is checked against the stored createdAt.
        """
        name = clean_name(raw_name)
        if not is_valid_quiz_name(name):
            return Rejected(Reason.INVALID_NAME, NAME_RULE)
        deadline = parse_datetime(deadline)
        if deadline is None:
            return Rejected(Reason.INVALID_DEADLINE, 'Pick a deadline.')

        quiz = dao.get_quiz(self.db, classroom_id, quiz_id)
        if quiz is None:
            return Rejected(Reason.NOT_FOUND, 'Quiz not found.')
        if quiz.created_at is None:
            raise StoreUnavailable(f'quiz {quiz_id} has no creation timestamp')
        if deadline <= quiz.created_at:
            return Rejected(Reason.INVALID_DEADLINE, 'The deadline must be after the quiz was created.')
        if not self.uniqueness.quiz_name_is_unique(classroom_id, name, exclude_id=quiz_id):
            return Rejected(Reason.DUPLICATE_NAME, NAME_RULE)

        dao.quiz_ref(self.db, classroom_id, quiz_id).update({
            'quizName': name,
            'deadline': deadline,
        })
        logger.info('Updated quiz %s/%s: %r due %s', classroom_id, quiz_id, name, deadline)
        return Success(name)

    @store_operation
    def delete_quiz(self, classroom_id, quiz_id):
        cascade.delete_quiz_tree(self.db, classroom_id, quiz_id)
        return Success(None)

    @store_operation
    def get_all_quizzes(self, classroom_id, order=QuizOrder.CREATED_AT, descending=True):
        order = QuizOrder(order)
        return Success(dao.get_quizzes(self.db, classroom_id, order.value, descending))

    @store_operation
    def get_all_questions(self, classroom_id, quiz_id):
        return Success(dao.get_questions(self.db, classroom_id, quiz_id))


def questions_from_payload(items):
    """Build Question objects from request JSON."""
    return [
        Question(
            question=str(item.get('question', '')),
            options=[str(o) for o in item.get('options') or []],
            answer=str(item.get('answer', '')),
        )
        for item in items or []
    ]
