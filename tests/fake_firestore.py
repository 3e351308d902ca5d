"""
In-memory stand-in for google.cloud.firestore.Client, for tests.

Covers the parts of the client the services use: nested collections,
collection-group queries, FieldFilter equality/in filters, order_by,
limit, start_after, set (with merge), update (NotFound when missing),
delete, batches and SERVER_TIMESTAMP. Every operation is appended to
`client.log` as (op, path), and `client.fail(op, pattern)` makes matching
operations raise, to exercise partial failures.
"""

import copy
import fnmatch
import itertools
import threading
import uuid
from datetime import datetime, timedelta, timezone

from google.api_core.exceptions import NotFound, ServiceUnavailable
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

_MISSING = object()


class FakeFirestore:

    def __init__(self):
        self.docs = {}
        self.log = []
        self._failures = []
        self._lock = threading.RLock()
        self._last_ts = None

    # -- client API -------------------------------------------------------

    def collection(self, name):
        return FakeCollection(self, (name,))

    def collection_group(self, name):
        return FakeQuery(self, group=name)

    def batch(self):
        return FakeBatch(self)

    # -- test helpers -----------------------------------------------------

    def fail(self, op, pattern, exc=None, times=None):
        """Make `op` on paths matching the glob `pattern` raise `exc`."""
        self._failures.append({
            'op': op,
            'pattern': pattern,
            'exc': exc or ServiceUnavailable('injected failure'),
            'left': times,
        })

    def clear_failures(self):
        self._failures = []

    def data(self, path):
        """Stored fields for 'a/b/c/d', or None."""
        found = self.docs.get(tuple(path.split('/')))
        return copy.deepcopy(found) if found is not None else None

    def paths(self, prefix=''):
        return sorted('/'.join(p) for p in self.docs if '/'.join(p).startswith(prefix))

    def ops(self, op):
        return [path for logged_op, path in self.log if logged_op == op]

    # -- internals --------------------------------------------------------

    def _check(self, op, path):
        path_str = '/'.join(path)
        with self._lock:
            self.log.append((op, path_str))
            for failure in self._failures:
                if failure['op'] == op and fnmatch.fnmatchcase(path_str, failure['pattern']):
                    if failure['left'] is not None:
                        if failure['left'] <= 0:
                            continue
                        failure['left'] -= 1
                    raise failure['exc']

    def _server_time(self):
        now = datetime.now(timezone.utc)
        if self._last_ts is not None and now <= self._last_ts:
            now = self._last_ts + timedelta(microseconds=1)
        self._last_ts = now
        return now

    def _resolve(self, data):
        return {
            k: (self._server_time() if v is SERVER_TIMESTAMP else copy.deepcopy(v))
            for k, v in data.items()
        }

    def _write(self, kind, path, data=None, merge=False):
        if kind == 'set':
            resolved = self._resolve(data)
            if merge and path in self.docs:
                self.docs[path].update(resolved)
            else:
                self.docs[path] = resolved
        elif kind == 'update':
            if path not in self.docs:
                raise NotFound(f'No document to update: {"/".join(path)}')
            self.docs[path].update(self._resolve(data))
        elif kind == 'delete':
            self.docs.pop(path, None)


class FakeSnapshot:

    def __init__(self, client, path, data):
        self._client = client
        self._path = path
        self._data = data

    @property
    def id(self):
        return self._path[-1]

    @property
    def reference(self):
        return FakeDocument(self._client, self._path)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None

    def get(self, field):
        return (self._data or {}).get(field)


class FakeDocument:

    def __init__(self, client, path):
        self._client = client
        self._path = tuple(path)

    @property
    def id(self):
        return self._path[-1]

    @property
    def path(self):
        return '/'.join(self._path)

    @property
    def parent(self):
        return FakeCollection(self._client, self._path[:-1])

    def collection(self, name):
        return FakeCollection(self._client, self._path + (name,))

    def get(self):
        self._client._check('get', self._path)
        with self._client._lock:
            data = self._client.docs.get(self._path)
            return FakeSnapshot(self._client, self._path, copy.deepcopy(data))

    def set(self, data, merge=False):
        self._client._check('set', self._path)
        with self._client._lock:
            self._client._write('set', self._path, data, merge)

    def update(self, data):
        self._client._check('update', self._path)
        with self._client._lock:
            self._client._write('update', self._path, data)

    def delete(self):
        self._client._check('delete', self._path)
        with self._client._lock:
            self._client._write('delete', self._path)

    def __eq__(self, other):
        return isinstance(other, FakeDocument) and other._path == self._path

    def __hash__(self):
        return hash(self._path)


class FakeQuery:

    def __init__(self, client, collection=None, group=None, filters=(), orders=(), limit=None, after=None):
        self._client = client
        self._collection = collection
        self._group = group
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit
        self._after = after

    def _copy(self, **changes):
        fields = dict(
            collection=self._collection, group=self._group, filters=self._filters,
            orders=self._orders, limit=self._limit, after=self._after,
        )
        fields.update(changes)
        return FakeQuery(self._client, **fields)

    def where(self, field_path=None, op_string=None, value=None, filter=None):
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path, direction='ASCENDING'):
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count):
        return self._copy(limit=count)

    def start_after(self, snapshot):
        return self._copy(after=snapshot)

    def _matches(self, path, data):
        if self._group is not None:
            if len(path) < 2 or path[-2] != self._group:
                return False
        elif len(path) != len(self._collection) + 1 or path[:-1] != self._collection:
            return False
        for field_path, op, value in self._filters:
            actual = data.get(field_path, _MISSING)
            if op == '==' and actual != value:
                return False
            if op == 'in' and actual not in value:
                return False
        for field_path, _ in self._orders:
            if field_path not in data:
                return False
        return True

    def _sorted(self, rows):
        rows = sorted(rows, key=lambda r: r[0])
        for field_path, direction in reversed(self._orders):
            rows.sort(key=lambda r: r[1][field_path], reverse=(direction == 'DESCENDING'))
        return rows

    def stream(self):
        scope = self._collection if self._collection is not None else ('*', self._group)
        self._client._check('stream', scope)
        with self._client._lock:
            rows = [(p, copy.deepcopy(d)) for p, d in self._client.docs.items() if self._matches(p, d)]
        rows = self._sorted(rows)
        if self._after is not None:
            paths = [p for p, _ in rows]
            after_path = self._after.reference._path
            if after_path in paths:
                rows = rows[paths.index(after_path) + 1:]
        if self._limit is not None:
            rows = rows[:self._limit]
        return iter([FakeSnapshot(self._client, p, d) for p, d in rows])

    def get(self):
        return list(self.stream())


class FakeCollection(FakeQuery):

    _ids = itertools.count(1)

    def __init__(self, client, path):
        super().__init__(client, collection=tuple(path))
        self._path = tuple(path)

    @property
    def id(self):
        return self._path[-1]

    @property
    def parent(self):
        if len(self._path) == 1:
            return None
        return FakeDocument(self._client, self._path[:-1])

    def document(self, document_id=None):
        if document_id is None:
            document_id = f'{uuid.uuid4().hex[:12]}{next(self._ids):04d}'
        return FakeDocument(self._client, self._path + (document_id,))

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return self._client._server_time(), ref


class FakeBatch:
    """All writes land together on commit, or none do."""

    def __init__(self, client):
        self._client = client
        self._writes = []

    def set(self, ref, data, merge=False):
        self._writes.append(('set', ref._path, data, merge))

    def update(self, ref, data):
        self._writes.append(('update', ref._path, data, False))

    def delete(self, ref):
        self._writes.append(('delete', ref._path, None, False))

    def commit(self):
        client = self._client
        for kind, path, _, _ in self._writes:
            client._check('commit', path)
        with client._lock:
            for kind, path, _, _ in self._writes:
                if kind == 'update' and path not in client.docs:
                    raise NotFound(f'No document to update: {"/".join(path)}')
            for kind, path, data, merge in self._writes:
                client._write(kind, path, data, merge)
        self._writes = []
