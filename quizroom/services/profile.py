"""
Display-name changes.

A user's name is copied into several documents when they are written:

    users/{uid}.name
    classrooms/*/members/{uid}.name
    classrooms/{id}.createdByName        (classrooms the user created)
    classrooms/*/quizzes/*/stats/{uid}.name

propagate_name_change rewrites all of them. The per-document updates run
concurrently after the user doc is updated. There is no rollback: when
one required update fails the result is a Failure, but the updates that
already landed stay.
"""

import functools
import logging

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.naming import clean_name
from quizroom.results import Failure, Reason, Rejected, Success, store_operation
from quizroom.services.fanout import DEFAULT_MAX_WORKERS, Task, run_concurrently

logger = logging.getLogger(__name__)


class ProfileService:

    def __init__(self, db=None, max_workers=DEFAULT_MAX_WORKERS):
        self.db = db if db is not None else get_db()
        self.max_workers = max_workers

    @store_operation
    def propagate_name_change(self, user_id, new_name):
        name = clean_name(new_name)
        if not name:
            return Rejected(Reason.INVALID_NAME, 'Name cannot be empty.')

        dao.update_user_name(self.db, user_id, name)

        tasks = []
        memberships = list(dao.memberships_query(self.db, user_id).stream())
        for member_doc in memberships:
            classroom = dao.parent_classroom_ref(member_doc)
            if classroom is None:
                logger.warning('Member doc %s has no parent classroom, skipped', member_doc.id)
                continue

            update_name = functools.partial(member_doc.reference.update, {'name': name})
            tasks.append(Task(f'member {classroom.id}/{user_id}', update_name))

            if (member_doc.to_dict() or {}).get('isCreator'):
                update_creator = functools.partial(classroom.update, {'createdByName': name})
                tasks.append(Task(f'classroom {classroom.id}', update_creator))

            # A user who never attempted a quiz has no stat doc there.
            for quiz_doc in classroom.collection(dao.QUIZZES).stream():
                stat = quiz_doc.reference.collection(dao.STATS).document(user_id)
                tasks.append(Task(f'stat {classroom.id}/{quiz_doc.id}',
                                  functools.partial(stat.update, {'name': name}),
                                  missing_ok=True))

        report = run_concurrently(tasks, self.max_workers)
        logger.info('Name change for %s: %d memberships, %d updated, %d skipped, %d failed',
                    user_id, len(memberships), len(report.succeeded),
                    len(report.ignored), len(report.failed))
        if not report.ok:
            return Failure(f'{len(report.failed)} of {len(tasks)} name updates failed: '
                           f'{report.first_error()}')
        return Success(report)
