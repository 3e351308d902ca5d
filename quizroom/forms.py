from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, ValidationError

from quizroom.firestore_models import parse_datetime


class ApiForm(FlaskForm):
    """JSON payload form. The API authenticates with bearer tokens, not cookies."""

    class Meta:
        csrf = False


def _timestamp(form, field):
    if field.data and parse_datetime(field.data) is None:
        raise ValidationError('Use an ISO 8601 timestamp')


class ClassroomNameForm(ApiForm):
    classroom_name = StringField('Classroom name', validators=[DataRequired(message='Enter a classroom name')])


class EnrollForm(ApiForm):
    password = StringField('Password', validators=[DataRequired(message='Enter the classroom password')])


class QuizForm(ApiForm):
    quiz_name = StringField('Quiz name', validators=[DataRequired(message='Enter a quiz name')])
    deadline = StringField('Deadline', validators=[DataRequired(message='Pick a deadline'), _timestamp])


class AttemptForm(ApiForm):
    # A score of 0 is valid, so presence is checked by NumberRange (None fails it).
    score = IntegerField('Score', validators=[NumberRange(min=0, message='Score must be 0 or more')])
    total_score = IntegerField('Total score', validators=[NumberRange(min=1, message='Total must be at least 1')])
    attempt_date = StringField('Attempt date', validators=[Optional(), _timestamp])

    def validate_score(self, score):
        if None not in (score.data, self.total_score.data) and score.data > self.total_score.data:
            raise ValidationError('Score cannot exceed the total')


class NameForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(message='Enter a name'), Length(max=80)])
