# tangent/auth.py
from collections import namedtuple
from functools import wraps

import jwt
from flask import current_app
from flask_jwt_extended import create_access_token, verify_jwt_in_request, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException

from tangent.errors import Unauthorized
from tangent.extensions import db, bcrypt
from tangent.models import User
from tangent.repositories import save
from tangent.validation import validate

# The acting user, handed to every protected view as the `identity` argument.
Identity = namedtuple('Identity', ['user_id', 'name'])

REGISTER_RULES = {
    'name': ['required', 'string', 'unique:users,name'],
    'email': ['required', 'email', 'unique:users,email'],
    'password': ['required', 'string'],
    'confirm_password': ['required_with:password', 'same:password'],
}


def issue_token(identity):
    return create_access_token(identity=str(identity.user_id), additional_claims={'name': identity.name})


def authenticate(email, password):
    """Check an e-mail/password pair and return the matching Identity."""
    if not isinstance(email, str) or not isinstance(password, str) or not password:
        raise Unauthorized()
    user = User.query.filter_by(email=email).first()
    if user is None or not bcrypt.check_password_hash(user.password, password):
        raise Unauthorized()
    return Identity(user.id, user.name)


def register_user(data):
    validate(data, REGISTER_RULES)
    user = User(
        name=data['name'],
        email=data['email'],
        password=bcrypt.generate_password_hash(data['password']).decode('utf-8'),
    )
    return save(user, data, REGISTER_RULES)


def create_user(name, email, password):
    """Register a user outside of a request, e.g. from the CLI."""
    return register_user({
        'name': name,
        'email': email,
        'password': password,
        'confirm_password': password,
    })


def token_required(fn):
    """Resolve the bearer token to an Identity and pass it to the view."""
    @wraps(fn)
    def decorated(*args, **kwargs):
        try:
            verify_jwt_in_request()
            user_id = int(get_jwt_identity())
        except (JWTExtendedException, jwt.PyJWTError, TypeError, ValueError) as e:
            current_app.logger.warning(f"JWT verification failed: {e}")
            raise Unauthorized('Token is missing or invalid') from e

        user = db.session.get(User, user_id)
        if user is None:
            raise Unauthorized('Token is missing or invalid')

        kwargs['identity'] = Identity(user.id, user.name)
        return fn(*args, **kwargs)
    return decorated
