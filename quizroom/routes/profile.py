from flask import Blueprint

from quizroom import get_services
from quizroom.decorators import auth_required, current_user_id
from quizroom.forms import NameForm
from quizroom.responses import form_errors, result_response

bp = Blueprint('profile', __name__, url_prefix='/api/profile')


@bp.route('', methods=['GET'])
@auth_required
def me():
    return result_response(get_services().identity.get_user(current_user_id()))


@bp.route('/name', methods=['PATCH'])
@auth_required
def change_name():
    form = NameForm()
    if not form.validate():
        return form_errors(form)
    return result_response(get_services().profile.propagate_name_change(current_user_id(), form.name.data))
