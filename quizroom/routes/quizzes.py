from flask import Blueprint, jsonify, request

from quizroom import get_services
from quizroom.decorators import CREATOR, MEMBER, auth_required, classroom_role_required, current_user_id
from quizroom.firestore_models import Attempt, parse_datetime
from quizroom.firestore_dao import utcnow
from quizroom.forms import AttemptForm, QuizForm
from quizroom.responses import form_errors, result_response
from quizroom.services.quizzes import QuizOrder, questions_from_payload

bp = Blueprint('quizzes', __name__, url_prefix='/api/classrooms/<classroom_id>/quizzes')


@bp.route('', methods=['GET'])
@auth_required
@classroom_role_required(CREATOR, MEMBER)
def list_quizzes(classroom_id):
    order = QuizOrder.DEADLINE if request.args.get('order') == 'deadline' else QuizOrder.CREATED_AT
    descending = request.args.get('descending', 'true').lower() in ('1', 'true', 'yes')
    return result_response(get_services().quizzes.get_all_quizzes(classroom_id, order, descending))


@bp.route('', methods=['POST'])
@auth_required
@classroom_role_required(CREATOR)
def create(classroom_id):
    form = QuizForm()
    if not form.validate():
        return form_errors(form)
    payload = request.get_json(silent=True) or {}
    questions = payload.get('questions')
    if not isinstance(questions, list) or not all(isinstance(q, dict) for q in questions):
        return jsonify({'error': 'invalid_request', 'fields': {'questions': ['Send a list of questions']}}), 400

    result = get_services().quizzes.create_quiz(
        classroom_id,
        form.quiz_name.data,
        parse_datetime(form.deadline.data),
        questions_from_payload(questions),
    )
    return result_response(result, 201)


@bp.route('/<quiz_id>', methods=['PATCH'])
@auth_required
@classroom_role_required(CREATOR)
def update(classroom_id, quiz_id):
    form = QuizForm()
    if not form.validate():
        return form_errors(form)
    result = get_services().quizzes.update_quiz_name_deadline(
        classroom_id,
        quiz_id,
        form.quiz_name.data,
        parse_datetime(form.deadline.data),
    )
    return result_response(result)


@bp.route('/<quiz_id>', methods=['DELETE'])
@auth_required
@classroom_role_required(CREATOR)
def delete(classroom_id, quiz_id):
    return result_response(get_services().quizzes.delete_quiz(classroom_id, quiz_id))


@bp.route('/<quiz_id>/questions', methods=['GET'])
@auth_required
@classroom_role_required(CREATOR, MEMBER)
def questions(classroom_id, quiz_id):
    return result_response(get_services().quizzes.get_all_questions(classroom_id, quiz_id))


@bp.route('/<quiz_id>/attempts', methods=['POST'])
@auth_required
@classroom_role_required(CREATOR, MEMBER)
def submit_attempt(classroom_id, quiz_id):
    form = AttemptForm()
    if not form.validate():
        return form_errors(form)
    attempt = Attempt(
        attempt_date=parse_datetime(form.attempt_date.data) or utcnow(),
        score=form.score.data,
        total_score=form.total_score.data,
    )
    result = get_services().stats.submit_attempt(current_user_id(), classroom_id, quiz_id, attempt)
    return result_response(result, 201)


@bp.route('/<quiz_id>/stats', methods=['GET'])
@auth_required
@classroom_role_required(CREATOR)
def stats(classroom_id, quiz_id):
    descending = request.args.get('descending', 'true').lower() in ('1', 'true', 'yes')
    return result_response(get_services().stats.get_quiz_stats(classroom_id, quiz_id, descending))


@bp.route('/<quiz_id>/stats/me', methods=['GET'])
@auth_required
@classroom_role_required(CREATOR, MEMBER)
def my_stat(classroom_id, quiz_id):
    return result_response(get_services().stats.get_user_stat(classroom_id, quiz_id, current_user_id()))
