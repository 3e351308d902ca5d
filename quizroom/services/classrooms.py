import logging
import uuid

from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.firestore_models import Classroom, Member
from quizroom.naming import CLASSROOM_NAME_MAX, CLASSROOM_NAME_MIN, clean_name, is_valid_classroom_name
from quizroom.results import Reason, Rejected, StoreUnavailable, Success, store_operation
from quizroom.services import cascade
from quizroom.services.fanout import DEFAULT_MAX_WORKERS, FanoutReport, Task, run_concurrently
from quizroom.services.identity import IdentityStore
from quizroom.services.uniqueness import UniquenessChecker

logger = logging.getLogger(__name__)

NAME_RULE = (f'Classroom name must be unique and '
             f'{CLASSROOM_NAME_MIN}-{CLASSROOM_NAME_MAX} characters.')


def generate_password():
    """New random join password. Not checked against other classrooms."""
    return str(uuid.uuid4()).upper()


class ClassroomService:
    """Create, rename, delete and enroll into classrooms."""

    def __init__(self, db=None, max_workers=DEFAULT_MAX_WORKERS):
        self.db = db if db is not None else get_db()
        self.max_workers = max_workers
        self.identity = IdentityStore(self.db)
        self.uniqueness = UniquenessChecker(self.db)

    @store_operation
    def create_classroom(self, user_id, raw_name):
        """Create a classroom with user_id as its creator member.

        The classroom doc and the creator's member doc are two separate
        writes; the member needs the server-assigned createdAt, which only
        exists after the first write. A failure in between leaves a
        classroom without members.
        """
        name = clean_name(raw_name)
        if not is_valid_classroom_name(name):
            return Rejected(Reason.INVALID_NAME, NAME_RULE)
        if not self.uniqueness.classroom_name_is_unique(user_id, name):
            return Rejected(Reason.DUPLICATE_NAME, NAME_RULE)

        user = self.identity.require_user(user_id)

        ref = self.db.collection(dao.CLASSROOMS).document()
        ref.set({
            'classroomName': name,
            'createdAt': SERVER_TIMESTAMP,
            'createdByName': user.name,
            'password': generate_password(),
        })
        snapshot = ref.get()
        classroom = Classroom.from_dict(snapshot.to_dict() or {}, snapshot.id)
        if classroom.created_at is None:
            raise StoreUnavailable(f'classroom {ref.id} has no creation timestamp')

        creator = Member(
            user_id=user_id,
            email=user.email,
            name=user.name,
            is_creator=True,
            classroom_created_at=classroom.created_at,
        )
        ref.collection(dao.MEMBERS).document(user_id).set(creator.to_dict())
        logger.info('Created classroom %r (%s) for %s', name, ref.id, user_id)
        return Success(classroom)

    @store_operation
    def update_classroom_name(self, classroom_id, user_id, raw_name):
        """Rename a classroom. Only its creator may, and the name must be
        unique among the creator's classrooms."""
        name = clean_name(raw_name)
        if not is_valid_classroom_name(name):
            return Rejected(Reason.INVALID_NAME, NAME_RULE)

        creator_id = dao.get_creator_id(self.db, classroom_id)
        if creator_id is None:
            return Rejected(Reason.NOT_FOUND, 'Classroom not found.')
        if creator_id != user_id:
            return Rejected(Reason.NOT_ALLOWED, 'Only the classroom creator can rename it.')
        if not self.uniqueness.classroom_name_is_unique(creator_id, name, exclude_id=classroom_id):
            return Rejected(Reason.DUPLICATE_NAME, NAME_RULE)

        dao.classroom_ref(self.db, classroom_id).update({'classroomName': name})
        logger.info('Renamed classroom %s to %r', classroom_id, name)
        return Success(name)

    @store_operation
    def regenerate_password(self, classroom_id):
        password = generate_password()
        dao.classroom_ref(self.db, classroom_id).update({'password': password})
        logger.info('Regenerated password for classroom %s', classroom_id)
        return Success(password)

    @store_operation
    def join_classroom(self, user_id, password):
        """Enroll user_id into the classroom whose password matches.

        An unknown password and an existing membership are both rejections;
        the reason tells them apart.
        """
        password = (password or '').strip()
        if not password:
            return Rejected(Reason.INVALID_PASSWORD, 'Enter a classroom password.')

        classroom = dao.get_classroom_by_password(self.db, password)
        if classroom is None:
            logger.info('No classroom matches the password given by %s', user_id)
            return Rejected(Reason.INVALID_PASSWORD, 'No classroom matches that password.')
        if classroom.created_at is None:
            raise StoreUnavailable(f'classroom {classroom.id} has no creation timestamp')

        if dao.member_exists(self.db, classroom.id, user_id):
            return Rejected(Reason.ALREADY_MEMBER, 'You are already enrolled in this classroom.')

        user = self.identity.require_user(user_id)
        member = Member(
            user_id=user_id,
            email=user.email,
            name=user.name,
            is_creator=False,
            classroom_created_at=classroom.created_at,
        )
        dao.member_ref(self.db, classroom.id, user_id).set(member.to_dict())
        logger.info('%s joined classroom %s', user_id, classroom.id)
        return Success(classroom)

    @store_operation
    def remove_member(self, classroom_id, user_id):
        """Delete a membership, then the user's stats under every quiz.

        Only the member delete decides the outcome. Stat cleanup is best
        effort; its per-quiz results come back in the FanoutReport.
        """
        dao.member_ref(self.db, classroom_id, user_id).delete()

        report = FanoutReport()
        try:
            quiz_ids = dao.get_quiz_ids(self.db, classroom_id)
        except GoogleAPIError as e:
            logger.warning('Could not list quizzes of %s for stat cleanup: %s', classroom_id, e)
            report.failed.append((f'quizzes of {classroom_id}', e))
            return Success(report)

        tasks = [
            Task(f'stat {quiz_id}/{user_id}',
                 dao.stat_ref(self.db, classroom_id, quiz_id, user_id).delete,
                 missing_ok=True)
            for quiz_id in quiz_ids
        ]
        report = run_concurrently(tasks, self.max_workers)
        logger.info('Removed %s from classroom %s (%d stats cleaned, %d failed)',
                    user_id, classroom_id, len(report.succeeded), len(report.failed))
        return Success(report)

    @store_operation
    def delete_classroom(self, classroom_id):
        cascade.delete_classroom_tree(self.db, classroom_id)
        return Success(None)

    @store_operation
    def get_all_members(self, classroom_id):
        return Success(dao.get_members(self.db, classroom_id))
