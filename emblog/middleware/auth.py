from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request

from emblog.extensions import db
from emblog.models.user import User

_ALGORITHM = 'HS256'


def create_token(user_id):
    """Sign a bearer token for ``user_id``."""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': user_id,
        'iat': now,
        'exp': now + timedelta(seconds=current_app.config['JWT_EXPIRES_IN']),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'], algorithm=_ALGORITHM)


def _decode_token(token):
    return jwt.decode(token, current_app.config['JWT_SECRET'], algorithms=[_ALGORITHM])


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[7:].strip() or None
    return None


def _set_identity(user):
    g.user = user
    g.user_id = user.id if user else None


def require_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({'message': 'Not authorized, no token'}), 401

        try:
            payload = _decode_token(token)
        except jwt.ExpiredSignatureError:
            return jsonify({'message': 'Token expired'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'message': 'Not authorized, token failed'}), 401

        user_id = payload.get('sub')
        if not user_id:
            return jsonify({'message': 'Invalid token payload'}), 401

        user = db.session.get(User, user_id)
        if not user:
            return jsonify({'message': 'User not found'}), 401
        if user.is_blocked:
            return jsonify({'message': 'Your account has been blocked'}), 403

        _set_identity(user)
        return f(*args, **kwargs)
    return decorated


def optional_auth(f):
    """Like require_auth but falls back to an anonymous request on any failure."""
    @wraps(f)
    def decorated(*args, **kwargs):
        _set_identity(None)

        token = _bearer_token()
        if token:
            try:
                payload = _decode_token(token)
                user_id = payload.get('sub')
                if user_id:
                    user = db.session.get(User, user_id)
                    if user and not user.is_blocked:
                        _set_identity(user)
            except jwt.InvalidTokenError:
                pass  # Proceed without auth

        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    """Reject non-admins. Must be applied below ``require_auth``."""
    @wraps(f)
    def decorated(*args, **kwargs):
        user = getattr(g, 'user', None)
        if user is None or not user.is_admin:
            return jsonify({'message': 'Admin access required'}), 403
        return f(*args, **kwargs)
    return decorated
