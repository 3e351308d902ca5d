"""
Paginated list of the classrooms a user teaches or attends.

ClassroomFeed keeps the loaded classrooms plus loading/error flags for
one client session and tells its subscribers whenever any of that
changes. A long-lived feed holds its own pagination cursor; the HTTP
API builds one per request and passes the cursor in as `after`.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1 import Query

from quizroom import firestore_dao as dao
from quizroom.firebase_init import get_db
from quizroom.firestore_models import Classroom, MalformedDocument
from quizroom.results import Failure, Reason, Rejected, Success
from quizroom.services.fanout import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 30


class ClassroomFeed:

    def __init__(self, db=None, page_size=DEFAULT_PAGE_SIZE, max_workers=DEFAULT_MAX_WORKERS):
        self.db = db if db is not None else get_db()
        self.page_size = page_size
        self.max_workers = max_workers
        self.classrooms = []
        self.is_loading = False
        self.is_error = False
        self.has_more = True
        self._cursor = None
        self._listeners = []

    def subscribe(self, callback):
        """Call callback(feed) on every state change. Returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def _notify(self):
        for callback in list(self._listeners):
            callback(self)

    def _set_state(self, **changes):
        for key, value in changes.items():
            setattr(self, key, value)
        self._notify()

    def reset(self):
        self._cursor = None
        self.has_more = True
        self._set_state(classrooms=[])

    @property
    def next_after(self):
        """Classroom id to pass as `after` for the next page, or None."""
        if not self.has_more or self._cursor is None:
            return None
        classroom = dao.parent_classroom_ref(self._cursor)
        return classroom.id if classroom is not None else None

    def fetch(self, user_id, descending=True, as_creator=True, refreshing=False, after=None):
        """Load the next page (or the first page again when refreshing).

        Memberships are found with a collection-group query ordered by the
        classroom's creation time; one extra row is requested to learn
        whether another page exists. `after` is a classroom id from an
        earlier page's next_after and takes the place of the held cursor.
        """
        self._set_state(is_error=False, is_loading=True)

        direction = Query.DESCENDING if descending else Query.ASCENDING
        query = (
            dao.memberships_query(self.db, user_id, is_creator=as_creator)
            .order_by('classroomCreatedAt', direction=direction)
            .limit(self.page_size + 1)
        )

        try:
            if after is not None:
                cursor = dao.member_ref(self.db, after, user_id).get()
                if not cursor.exists:
                    self._set_state(is_loading=False)
                    return Rejected(Reason.NOT_FOUND, 'Unknown page cursor.')
                query = query.start_after(cursor)
            elif self._cursor is not None and not refreshing:
                query = query.start_after(self._cursor)
            docs = list(query.stream())
        except GoogleAPIError as e:
            logger.error('Classroom feed query for %s failed: %s', user_id, e)
            self._set_state(is_error=True, is_loading=False)
            return Failure(str(e))

        self.has_more = len(docs) > self.page_size
        docs = docs[:self.page_size]
        if docs:
            self._cursor = docs[-1]
        elif refreshing:
            self._cursor = None

        refs = [ref for ref in (dao.parent_classroom_ref(d) for d in docs) if ref is not None]
        page = self._load_classrooms(refs)

        classrooms = page if refreshing else self.classrooms + page
        self._set_state(classrooms=classrooms, is_loading=False)
        logger.debug('Classroom feed for %s: %d loaded, more=%s', user_id, len(classrooms), self.has_more)
        return Success(page)

    def _load_classrooms(self, refs):
        """Read classroom docs concurrently, keeping query order and dropping unreadable ones."""
        if not refs:
            return []
        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(refs)))) as executor:
            loaded = list(executor.map(_read_classroom, refs))
        return [c for c in loaded if c is not None]


def _read_classroom(ref):
    try:
        snapshot = ref.get()
        if not snapshot.exists:
            return None
        return Classroom.from_dict(snapshot.to_dict(), snapshot.id)
    except (GoogleAPIError, MalformedDocument) as e:
        logger.warning('Skipping classroom %s: %s', ref.id, e)
        return None
