import pytest

from quizroom.firestore_models import Attempt
from quizroom.results import Failure, Reason


@pytest.fixture
def enrolled(classrooms, quizzes, stats, classroom, make_user, sample_questions, in_an_hour):
    """s1 attends the classroom and has attempted only the first of two quizzes."""
    make_user('s1', 'Sam Student')
    classrooms.join_classroom('s1', classroom.password)
    attempted = quizzes.create_quiz(classroom.id, 'Quiz One', in_an_hour, sample_questions).value
    skipped = quizzes.create_quiz(classroom.id, 'Quiz Two', in_an_hour, sample_questions).value
    stats.submit_attempt('s1', classroom.id, attempted.id, Attempt(in_an_hour, 1, 2))
    return classroom, attempted, skipped


def test_name_reaches_every_copy(profile, enrolled, db):
    classroom, attempted, skipped = enrolled
    result = profile.propagate_name_change('s1', '  Samantha   Student ')
    assert result.ok

    assert db.data('users/s1')['name'] == 'Samantha Student'
    assert db.data(f'classrooms/{classroom.id}/members/s1')['name'] == 'Samantha Student'
    assert db.data(f'classrooms/{classroom.id}/quizzes/{attempted.id}/stats/s1')['name'] == 'Samantha Student'
    assert db.data(f'classrooms/{classroom.id}')['createdByName'] == 'Tina Teacher'


def test_unattempted_quiz_gets_no_stat(profile, enrolled, db):
    classroom, _, skipped = enrolled
    report = profile.propagate_name_change('s1', 'Samantha').value
    assert db.data(f'classrooms/{classroom.id}/quizzes/{skipped.id}/stats/s1') is None
    assert report.ignored == [f'stat {classroom.id}/{skipped.id}']
    assert report.ok


def test_creator_rename_updates_created_by_name(profile, classrooms, enrolled, db):
    classroom = enrolled[0]
    second = classrooms.create_classroom('t1', 'Second Classroom').value
    assert profile.propagate_name_change('t1', 'Tina T.').ok

    for classroom_id in (classroom.id, second.id):
        assert db.data(f'classrooms/{classroom_id}')['createdByName'] == 'Tina T.'
        assert db.data(f'classrooms/{classroom_id}/members/t1')['name'] == 'Tina T.'


def test_user_in_no_classrooms_only_updates_user_doc(profile, make_user, db):
    make_user('loner')
    result = profile.propagate_name_change('loner', 'Lonely Learner')
    assert result.ok
    assert result.value.succeeded == []
    assert db.data('users/loner')['name'] == 'Lonely Learner'


def test_failed_member_update_is_failure_without_rollback(profile, enrolled, db):
    classroom, attempted, _ = enrolled
    db.fail('update', '*/members/s1')
    result = profile.propagate_name_change('s1', 'Samantha')
    assert isinstance(result, Failure)
    assert 'name updates failed' in result.detail

    assert db.data('users/s1')['name'] == 'Samantha'
    assert db.data(f'classrooms/{classroom.id}/members/s1')['name'] == 'Sam Student'
    assert db.data(f'classrooms/{classroom.id}/quizzes/{attempted.id}/stats/s1')['name'] == 'Samantha'


def test_failed_stat_update_other_than_missing_is_failure(profile, enrolled, db):
    db.fail('update', '*/stats/s1')
    assert isinstance(profile.propagate_name_change('s1', 'Samantha'), Failure)


def test_membership_query_failure_is_failure(profile, enrolled, db):
    db.fail('stream', '*/members')
    assert isinstance(profile.propagate_name_change('s1', 'Samantha'), Failure)


@pytest.mark.parametrize('name', ['', '   ', None])
def test_empty_name_is_rejected(profile, enrolled, name, db):
    result = profile.propagate_name_change('s1', name)
    assert result.reason is Reason.INVALID_NAME
    assert db.data('users/s1')['name'] == 'Sam Student'
