from flask import Blueprint

bp = Blueprint('progress', __name__)

from techtrainer.progress import routes
