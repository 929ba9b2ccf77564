import sqlalchemy as sa
from flask import request
from flask_login import current_user, login_required
from techtrainer import db, get_settings
from techtrainer.forms import PaginationForm
from techtrainer.models import Progress
from techtrainer.progress import bp
from techtrainer.workouts.utils import api_response


@bp.route('', methods=['GET'])
@login_required
def list_progress():
    """
    Geef de voortgangsregistraties van de gebruiker terug, nieuwste eerst.
    """
    settings = get_settings()
    form = PaginationForm.from_json(request.args).raise_for_errors()
    query = (sa.select(Progress)
             .where(Progress.user_id == current_user.id)
             .order_by(Progress.date.desc(), Progress.id.desc()))
    page = db.paginate(query, page=form.page.data or 1, per_page=form.limit.data or settings.page_size,
                       max_per_page=settings.max_page_size, error_out=False)
    data = {
        'progress': [entry.to_dict() for entry in page.items],
        'pagination': {
            'total': page.total,
            'page': page.page,
            'pages': page.pages,
            'limit': page.per_page,
        },
    }
    return api_response(data, 'Progress retrieved successfully')
