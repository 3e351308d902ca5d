"""Turn service results into JSON responses."""

import dataclasses
from datetime import datetime

from flask import jsonify

from quizroom.results import Failure, Reason, Rejected
from quizroom.services.fanout import FanoutReport

REJECTION_STATUS = {
    Reason.NOT_FOUND: 404,
    Reason.NOT_ALLOWED: 403,
    Reason.DUPLICATE_NAME: 409,
    Reason.ALREADY_MEMBER: 409,
}

RETRY_MESSAGE = 'Something went wrong. Please try again later.'


def to_json(value):
    if isinstance(value, FanoutReport):
        return {
            'succeeded': list(value.succeeded),
            'ignored': list(value.ignored),
            'failed': [label for label, _ in value.failed],
        }
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
        if 'id' not in data and hasattr(value, 'id'):
            data['id'] = value.id
        return data
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    return value


def result_response(result, status=200):
    if isinstance(result, Rejected):
        body = {'error': result.reason.value, 'message': result.message}
        return jsonify(body), REJECTION_STATUS.get(result.reason, 400)
    if isinstance(result, Failure):
        return jsonify({'error': 'unavailable', 'message': RETRY_MESSAGE}), 503
    return jsonify({'data': to_json(result.value)}), status


def form_errors(form):
    return jsonify({'error': 'invalid_request', 'fields': form.errors}), 400
