import re
import pytz
from dateutil import parser as date_parser
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, IntegerField, FloatField, DateTimeField
from wtforms.validators import AnyOf, Length, NumberRange, Optional
from techtrainer.errors.exceptions import ValidationError
from techtrainer.models import WorkoutStatus, WorkoutType, Difficulty

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')

WORKOUT_TYPES = [t.value for t in WorkoutType]
DIFFICULTIES = [d.value for d in Difficulty]
STATUSES = [s.value for s in WorkoutStatus]
# completed is alleen bereikbaar via de complete-actie
UPDATABLE_STATUSES = [WorkoutStatus.SCHEDULED.value, WorkoutStatus.IN_PROGRESS.value,
                      WorkoutStatus.CANCELLED.value]
SORT_FIELDS = ['createdAt', 'updatedAt', 'title', 'status', 'type', 'difficulty',
               'scheduledFor', 'completedAt', 'estimatedDuration', 'duration']


def to_snake(key):
    # 'restTime' -> 'rest_time'
    return _CAMEL_BOUNDARY.sub('_', key).lower()


def to_camel(key):
    head, *tail = key.split('_')
    return head + ''.join(part.title() for part in tail)


class IsoDateTimeField(DateTimeField):
    """
    DateTimeField die ISO 8601-tijdstempels accepteert (ook met 'Z' of offset).

    Notities:
        - Naive tijdstempels worden als UTC gelezen.
        - form.data is altijd een tijdzone-bewuste datetime in UTC.
    """

    def process_formdata(self, valuelist):
        if not valuelist or not valuelist[0]:
            return
        try:
            value = date_parser.isoparse(str(valuelist[0]).strip())
        except (ValueError, OverflowError):
            self.data = None
            raise ValueError(self.gettext('Not a valid datetime value.'))
        if value.tzinfo is None:
            value = pytz.UTC.localize(value)
        self.data = value.astimezone(pytz.UTC)


class WholeNumberField(IntegerField):
    """
    IntegerField die ook JSON-getallen als 3.0 accepteert.

    Notities:
        - Waarden met een fractie (2.5), NaN en oneindig worden afgewezen.
    """

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        try:
            value = float(valuelist[0])
        except ValueError:
            self.data = None
            raise ValueError(self.gettext('Not a valid integer value.'))
        if not value.is_integer():
            self.data = None
            raise ValueError(self.gettext('Not a whole number.'))
        self.data = int(value)


class JsonForm(FlaskForm):
    """
    Basisformulier voor JSON-payloads en query-parameters.

    Notities:
        - CSRF is uitgeschakeld: de API ontvangt JSON, geen HTML-formulieren.
        - Alleen scalaire waarden gaan als formdata mee; lijsten en objecten
          (zoals exercises) valideert de aanroeper per element.
    """

    class Meta:
        csrf = False

    @classmethod
    def from_json(cls, payload):
        formdata = MultiDict()
        for key, value in (payload or {}).items():
            if value is None or isinstance(value, (list, dict)):
                continue
            formdata.add(to_snake(key), value if isinstance(value, str) else str(value))
        return cls(formdata=formdata)

    def raise_for_errors(self, prefix=''):
        """
        Valideer het formulier en gooi een ValidationError bij fouten.

        Returns:
            JsonForm: het formulier zelf, zodat aanroepen geketend kunnen worden.
        """
        if self.validate():
            return self
        errors = {f"{prefix}{to_camel(name)}": messages for name, messages in self.errors.items()}
        field, messages = next(iter(errors.items()))
        raise ValidationError(f"Invalid {field}: {messages[0]}", errors=errors)


class ExerciseEntryForm(JsonForm):
    """
    Formulier voor een oefening binnen een workout (geplande waarden).
    Notities:
        - 0 of ontbrekend betekent 'standaardwaarde' (zie lifecycle.normalize_exercises).
    """
    exercise_id = StringField('Exercise', validators=[Optional(), Length(max=50)])
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    sets = WholeNumberField('Sets', validators=[Optional(), NumberRange(min=0)])
    reps = WholeNumberField('Reps', validators=[Optional(), NumberRange(min=0)])
    duration = WholeNumberField('Duration (s)', validators=[Optional(), NumberRange(min=0)])
    rest_time = WholeNumberField('Rest (s)', validators=[Optional(), NumberRange(min=0)])
    notes = StringField('Notes', validators=[Optional()])


class ExerciseResultForm(JsonForm):
    """
    Formulier voor het resultaat van een oefening bij het voltooien van een workout.
    """
    index = WholeNumberField('Index', validators=[Optional(), NumberRange(min=0)])
    exercise_id = StringField('Exercise', validators=[Optional(), Length(max=50)])
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    sets = WholeNumberField('Sets', validators=[Optional(), NumberRange(min=0)])
    reps = WholeNumberField('Reps', validators=[Optional(), NumberRange(min=0)])
    weight = FloatField('Weight (kg)', validators=[Optional(), NumberRange(min=0)])
    duration = WholeNumberField('Duration (s)', validators=[Optional(), NumberRange(min=0)])
    feedback = StringField('Feedback', validators=[Optional()])


class WorkoutForm(JsonForm):
    title = StringField('Title', validators=[Optional(), Length(max=100)])
    description = StringField('Description', validators=[Optional(), Length(max=500)])
    notes = StringField('Notes', validators=[Optional()])
    type = StringField('Type', validators=[Optional(), AnyOf(WORKOUT_TYPES, message='Must be one of: %(values)s')])
    difficulty = StringField('Difficulty',
                             validators=[Optional(), AnyOf(DIFFICULTIES, message='Must be one of: %(values)s')])
    estimated_duration = WholeNumberField('Estimated duration (min)',
                                      validators=[Optional(), NumberRange(min=1, max=1440)])
    scheduled_for = IsoDateTimeField('Scheduled for', validators=[Optional()])


class WorkoutUpdateForm(WorkoutForm):
    status = StringField('Status',
                         validators=[Optional(), AnyOf(UPDATABLE_STATUSES, message='Must be one of: %(values)s')])
    version = WholeNumberField('Version', validators=[Optional(), NumberRange(min=1)])


class TransitionForm(JsonForm):
    version = WholeNumberField('Version', validators=[Optional(), NumberRange(min=1)])


class CompleteWorkoutForm(TransitionForm):
    duration = WholeNumberField('Duration (min)', validators=[Optional(), NumberRange(min=0)])
    calories_burned = WholeNumberField('Calories', validators=[Optional(), NumberRange(min=0)])
    notes = StringField('Notes', validators=[Optional()])
    rating = WholeNumberField('Rating', validators=[Optional(), NumberRange(min=0, max=5)])


class CloneWorkoutForm(JsonForm):
    title = StringField('Title', validators=[Optional(), Length(max=100)])
    scheduled_for = IsoDateTimeField('Scheduled for', validators=[Optional()])


class PaginationForm(JsonForm):
    page = WholeNumberField('Page', validators=[Optional(), NumberRange(min=1)])
    limit = WholeNumberField('Limit', validators=[Optional(), NumberRange(min=1)])


class WorkoutListForm(PaginationForm):
    status = StringField('Status', validators=[Optional(), AnyOf(STATUSES, message='Must be one of: %(values)s')])
    type = StringField('Type', validators=[Optional(), AnyOf(WORKOUT_TYPES, message='Must be one of: %(values)s')])
    difficulty = StringField('Difficulty',
                             validators=[Optional(), AnyOf(DIFFICULTIES, message='Must be one of: %(values)s')])
    search = StringField('Search', validators=[Optional(), Length(max=100)])
    start_date = IsoDateTimeField('Start date', validators=[Optional()])
    end_date = IsoDateTimeField('End date', validators=[Optional()])
    sort_by = StringField('Sort by', validators=[Optional(), AnyOf(SORT_FIELDS, message='Must be one of: %(values)s')])
    sort_order = StringField('Sort order', validators=[Optional(), AnyOf(['asc', 'desc'])])
