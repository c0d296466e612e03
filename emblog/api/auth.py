import logging

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.exc import IntegrityError

from emblog.api import request_data
from emblog.api.serializers import user_to_dict
from emblog.errors import AuthenticationError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from emblog.extensions import db
from emblog.middleware.auth import create_token, require_auth
from emblog.models.user import ROLE_ADMIN, User
from emblog.services.fields import parse_links, require_text
from emblog.services.uploads import discard_image, save_image

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')

MIN_PASSWORD_LENGTH = 6


def _session_response(user, status=200):
    token = create_token(user.id)
    return jsonify({'token': token, 'user': user_to_dict(user, include_private=True)}), status


def _credentials(data):
    email = require_text(data, 'email').lower()
    password = data.get('password')
    if not isinstance(password, str) or not password:
        raise ValidationError('password is required')
    return email, password


@bp.route('/register', methods=['POST'])
def register():
    """Create an account and sign the new user in."""
    data = request_data()
    name = require_text(data, 'name', max_length=50)
    email, password = _credentials(data)
    if '@' not in email:
        raise ValidationError('email is invalid')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'password must be at least {MIN_PASSWORD_LENGTH} characters')

    if User.query.filter_by(email=email).first():
        raise ConflictError('Email already registered')

    user = User(name=name, email=email)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Email already registered')

    logger.info('Registered user %s', user.id)
    return _session_response(user, 201)


@bp.route('/login', methods=['POST'])
def login():
    email, password = _credentials(request_data())

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        raise AuthenticationError('Invalid email or password')
    if user.is_blocked:
        raise ForbiddenError('Your account has been blocked')

    logger.info('User %s logged in', user.id)
    return _session_response(user)


@bp.route('/admin/login', methods=['POST'])
def admin_login():
    email, password = _credentials(request_data())

    user = User.query.filter_by(email=email, role=ROLE_ADMIN).first()
    if not user or not user.check_password(password):
        raise AuthenticationError('Invalid admin credentials')

    logger.info('Admin %s logged in', user.id)
    return _session_response(user)


@bp.route('/me', methods=['GET'])
@require_auth
def me():
    return jsonify({'user': user_to_dict(g.user, include_private=True)})


@bp.route('/profile', methods=['PUT'])
@require_auth
def update_profile():
    """Update name, bio, links and profile picture.

    Accepts JSON or multipart; in multipart requests ``links`` is a JSON
    string and the picture arrives as the ``profilePicture`` file.
    """
    data = request_data()
    user = g.user

    if data.get('name'):
        user.name = require_text(data, 'name', max_length=50)
    if 'bio' in data:
        bio = (data.get('bio') or '').strip()
        if len(bio) > 500:
            raise ValidationError('bio must be at most 500 characters')
        user.bio = bio
    if 'links' in data:
        user.links = parse_links(data['links'], current_app.config['MAX_LINKS'])

    picture = save_image(request.files.get('profilePicture'))
    if picture:
        user.profile_picture = picture

    try:
        db.session.commit()
    except Exception:
        discard_image(picture)
        raise
    return jsonify({'user': user_to_dict(user, include_private=True)})


@bp.route('/profile/<user_id>', methods=['GET'])
def get_public_profile(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return jsonify({'user': user_to_dict(user)})
