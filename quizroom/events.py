import logging

from flask_socketio import emit, join_room, leave_room

from quizroom import socketio
from quizroom.decorators import verify_token

logger = logging.getLogger(__name__)


def _user_room(user_id):
    return f'user_{user_id}'


@socketio.on('watch_classrooms')
def handle_watch_classrooms(data):
    uid = verify_token((data or {}).get('token'))
    if not uid:
        emit('error', {'message': 'Sign in required'})
        return
    join_room(_user_room(uid))
    emit('watching_classrooms', {'user_id': uid})


@socketio.on('unwatch_classrooms')
def handle_unwatch_classrooms(data):
    uid = verify_token((data or {}).get('token'))
    if uid:
        leave_room(_user_room(uid))


def notify_classrooms_changed(user_ids, classroom_id, change):
    """Tell each user's open clients that their classroom list changed."""
    payload = {'classroom_id': classroom_id, 'change': change}
    for uid in set(user_ids):
        socketio.emit('classrooms_changed', payload, to=_user_room(uid))
    logger.debug('classrooms_changed %s for %d users', payload, len(set(user_ids)))
