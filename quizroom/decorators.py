import logging
from functools import wraps

from firebase_admin import exceptions as firebase_exceptions
from google.api_core.exceptions import GoogleAPIError
from flask import g, jsonify, request

from quizroom import firestore_dao as dao, get_services
from quizroom.firebase_init import get_auth
from quizroom.firestore_models import MalformedDocument
from quizroom.responses import RETRY_MESSAGE

logger = logging.getLogger(__name__)


def verify_token(id_token):
    """Return the uid for a Firebase ID token, or None if it doesn't verify."""
    if not id_token:
        return None
    try:
        decoded = get_auth().verify_id_token(id_token, check_revoked=True)
    except (ValueError, firebase_exceptions.FirebaseError) as e:
        logger.info('Rejected ID token: %s', e)
        return None
    return decoded.get('uid')


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    return header[len('Bearer '):].strip()


def auth_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        uid = verify_token(_bearer_token())
        if not uid:
            return jsonify({'error': 'unauthorized', 'message': 'Sign in required.'}), 401
        g.current_user_id = uid
        return f(*args, **kwargs)
    return decorated


def current_user_id():
    return g.get('current_user_id')


CREATOR = 'creator'
MEMBER = 'member'


def classroom_role_required(*roles):
    """Allow the view only to callers holding one of `roles` in the URL's classroom.

    Goes under auth_required. The caller's role is left in g.classroom_role.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            classroom_id = kwargs['classroom_id']
            try:
                member = dao.get_member(get_services().db, classroom_id, current_user_id())
            except (GoogleAPIError, MalformedDocument) as e:
                logger.error('Membership lookup for %s failed: %s', classroom_id, e)
                return jsonify({'error': 'unavailable', 'message': RETRY_MESSAGE}), 503
            role = None
            if member is not None:
                role = CREATOR if member.is_creator else MEMBER
            if role not in roles:
                return jsonify({'error': 'forbidden', 'message': 'Access denied'}), 403
            g.classroom_role = role
            return f(*args, **kwargs)
        return decorated
    return decorator
