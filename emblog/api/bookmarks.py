from flask import Blueprint, g, jsonify
from sqlalchemy.orm import contains_eager

from emblog.api import request_data
from emblog.api.serializers import bookmark_to_dict
from emblog.errors import NotFoundError, ValidationError
from emblog.extensions import db
from emblog.middleware.auth import require_auth
from emblog.models.article import Article
from emblog.models.bookmark import Bookmark
from emblog.services.toggles import is_bookmarked, toggle_bookmark

bp = Blueprint('bookmarks', __name__, url_prefix='/api/bookmarks')


@bp.route('', methods=['GET'])
@require_auth
def list_bookmarks():
    """List the user's bookmarks, newest first.

    The inner join drops any bookmark whose article no longer exists.
    """
    bookmarks = (
        Bookmark.query
        .join(Bookmark.article)
        .options(contains_eager(Bookmark.article))
        .filter(Bookmark.user_id == g.user_id)
        .order_by(Bookmark.created_at.desc())
        .all()
    )
    return jsonify({'bookmarks': [bookmark_to_dict(b) for b in bookmarks]})


@bp.route('/check/<article_id>', methods=['GET'])
@require_auth
def check_bookmark(article_id):
    return jsonify({'isBookmarked': is_bookmarked(g.user_id, article_id)})


@bp.route('/toggle', methods=['POST'])
@require_auth
def toggle():
    data = request_data()
    article_id = data.get('articleId')
    if not article_id:
        raise ValidationError('articleId is required')
    if db.session.get(Article, article_id) is None:
        raise NotFoundError('Article not found')

    return jsonify({'isBookmarked': toggle_bookmark(g.user_id, article_id)})
