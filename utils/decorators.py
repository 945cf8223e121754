from __future__ import annotations
from functools import wraps
from flask import request, g, current_app


def jwt_required():
    """
    Protect a view with the app's AuthGate.
    On success the verified claims are available as g.claims for the rest of
    the request; on failure AuthError propagates to the error handlers and the
    view never runs.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            gate = current_app.extensions["auth_gate"]
            g.claims = gate.authenticate(request.headers.get("Authorization"))
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> str:
    return g.claims["sub"]
