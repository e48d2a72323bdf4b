# tangent/request_log.py
from functools import wraps

from flask import current_app, request


def log_route(fn):
    """Record method, path and acting user for a routed request.

    Sits inside token_required so the resolved identity is available.
    """
    @wraps(fn)
    def decorated(*args, **kwargs):
        identity = kwargs.get('identity')
        user = identity.user_id if identity is not None else 'anonymous'
        current_app.logger.getChild('requests').info(f"{request.method} {request.path} user={user}")
        return fn(*args, **kwargs)
    return decorated
