from flask import Blueprint, g, jsonify, request

from quizroom import get_services
from quizroom.decorators import CREATOR, MEMBER, auth_required, classroom_role_required, current_user_id
from quizroom.events import notify_classrooms_changed
from quizroom.forms import ClassroomNameForm, EnrollForm
from quizroom.responses import form_errors, result_response, to_json
from quizroom.services.feed import ClassroomFeed

bp = Blueprint('classrooms', __name__, url_prefix='/api/classrooms')


def _flag(name, default):
    value = request.args.get(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes')


def _member_ids(classroom_id):
    result = get_services().classrooms.get_all_members(classroom_id)
    if not result.ok:
        return []
    return [m.user_id for m in result.value]


@bp.route('', methods=['GET'])
@auth_required
def list_classrooms():
    services = get_services()
    uid = current_user_id()
    feed = ClassroomFeed(services.db, page_size=services.page_size, max_workers=services.max_workers)
    result = feed.fetch(
        uid,
        descending=_flag('descending', True),
        as_creator=_flag('as_creator', True),
        after=request.args.get('after') or None,
    )
    if not result.ok:
        return result_response(result)
    return jsonify({
        'data': to_json(result.value),
        'has_more': feed.has_more,
        'next_after': feed.next_after,
    })


@bp.route('', methods=['POST'])
@auth_required
def create():
    form = ClassroomNameForm()
    if not form.validate():
        return form_errors(form)
    uid = current_user_id()
    result = get_services().classrooms.create_classroom(uid, form.classroom_name.data)
    if result.ok:
        notify_classrooms_changed([uid], result.value.id, 'created')
    return result_response(result, 201)


@bp.route('/<classroom_id>', methods=['PATCH'])
@auth_required
@classroom_role_required(CREATOR)
def rename(classroom_id):
    form = ClassroomNameForm()
    if not form.validate():
        return form_errors(form)
    result = get_services().classrooms.update_classroom_name(
        classroom_id, current_user_id(), form.classroom_name.data)
    if result.ok:
        notify_classrooms_changed(_member_ids(classroom_id), classroom_id, 'renamed')
    return result_response(result)


@bp.route('/<classroom_id>', methods=['DELETE'])
@auth_required
@classroom_role_required(CREATOR)
def delete(classroom_id):
    members = _member_ids(classroom_id)
    result = get_services().classrooms.delete_classroom(classroom_id)
    if result.ok:
        notify_classrooms_changed(members, classroom_id, 'deleted')
    return result_response(result)


@bp.route('/<classroom_id>/password', methods=['POST'])
@auth_required
@classroom_role_required(CREATOR)
def regenerate_password(classroom_id):
    return result_response(get_services().classrooms.regenerate_password(classroom_id))


@bp.route('/join', methods=['POST'])
@auth_required
def join():
    form = EnrollForm()
    if not form.validate():
        return form_errors(form)
    uid = current_user_id()
    result = get_services().classrooms.join_classroom(uid, form.password.data)
    if result.ok:
        notify_classrooms_changed([uid], result.value.id, 'joined')
    return result_response(result, 201)


@bp.route('/<classroom_id>/members', methods=['GET'])
@auth_required
@classroom_role_required(CREATOR, MEMBER)
def members(classroom_id):
    return result_response(get_services().classrooms.get_all_members(classroom_id))


@bp.route('/<classroom_id>/members/<user_id>', methods=['DELETE'])
@auth_required
@classroom_role_required(CREATOR, MEMBER)
def remove_member(classroom_id, user_id):
    # Students may only leave; the creator removes others but not themselves.
    is_self = user_id == current_user_id()
    if g.classroom_role == CREATOR and is_self:
        return jsonify({'error': 'forbidden', 'message': 'Delete the classroom instead.'}), 403
    if g.classroom_role != CREATOR and not is_self:
        return jsonify({'error': 'forbidden', 'message': 'Access denied'}), 403

    result = get_services().classrooms.remove_member(classroom_id, user_id)
    if result.ok:
        notify_classrooms_changed([user_id], classroom_id, 'removed')
    return result_response(result)
