from flask import Blueprint

from tangent.auth import Identity, authenticate, register_user, issue_token
from tangent.request_log import log_route
from tangent.responses import send_response
from tangent.routes import get_payload

auth_bp = Blueprint('auth_api', __name__)


@auth_bp.route('/login', methods=['POST'])
@log_route
def login():
    data = get_payload()
    identity = authenticate(data.get('email'), data.get('password'))
    return send_response({'token': issue_token(identity), 'name': identity.name}, 'User signed in')


@auth_bp.route('/register', methods=['POST'])
@log_route
def register():
    user = register_user(get_payload())
    identity = Identity(user.id, user.name)
    return send_response({'token': issue_token(identity), 'name': user.name}, 'User created successfully.')
