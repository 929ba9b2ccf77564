from flask import Blueprint

bp = Blueprint('errors', __name__)

from techtrainer.errors import handlers
