import logging
from datetime import datetime, timedelta, timezone

from flask import Blueprint, g, jsonify
from sqlalchemy import func
from sqlalchemy.orm import joinedload, selectinload

from emblog.api.serializers import article_to_dict, comment_to_dict, user_to_dict
from emblog.errors import NotFoundError, ValidationError
from emblog.extensions import db
from emblog.middleware.auth import admin_required, require_auth
from emblog.models.article import STATUS_PUBLISHED, Article
from emblog.models.comment import Comment
from emblog.models.user import ROLE_USER, User
from emblog.services.comments import delete_comment, get_comment_or_404

logger = logging.getLogger(__name__)

bp = Blueprint('admin', __name__, url_prefix='/api/admin')

RECENT_LIMIT = 5
ACTIVITY_DAYS = 7


def _get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return user


@bp.route('/stats', methods=['GET'])
@require_auth
@admin_required
def stats():
    """Dashboard counts, recent activity and published articles per day."""
    total_users = User.query.filter_by(role=ROLE_USER).count()
    total_articles = Article.query.filter_by(status=STATUS_PUBLISHED).count()
    total_comments = Comment.query.count()

    recent_users = (
        User.query.filter_by(role=ROLE_USER)
        .order_by(User.created_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    recent_articles = (
        Article.query.options(joinedload(Article.author), selectinload(Article.keyword_rows))
        .filter_by(status=STATUS_PUBLISHED)
        .order_by(Article.created_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )

    since = datetime.now(timezone.utc) - timedelta(days=ACTIVITY_DAYS)
    day = func.date(Article.created_at).label('day')
    per_day = (
        db.session.query(day, func.count(Article.id))
        .filter(Article.status == STATUS_PUBLISHED, Article.created_at >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )

    return jsonify({
        'totalUsers': total_users,
        'totalArticles': total_articles,
        'totalComments': total_comments,
        'recentUsers': [user_to_dict(u, include_private=True) for u in recent_users],
        'recentArticles': [article_to_dict(a) for a in recent_articles],
        'articlesPerDay': [{'date': str(d), 'count': count} for d, count in per_day],
    })


@bp.route('/users', methods=['GET'])
@require_auth
@admin_required
def list_users():
    users = User.query.filter_by(role=ROLE_USER).order_by(User.created_at.desc()).all()
    return jsonify({'users': [user_to_dict(u, include_private=True) for u in users]})


@bp.route('/users/<user_id>/block', methods=['PUT'])
@require_auth
@admin_required
def toggle_block(user_id):
    user = _get_user_or_404(user_id)
    if user.id == g.user_id:
        raise ValidationError('You cannot block your own account')

    user.is_blocked = not user.is_blocked
    db.session.commit()
    logger.info('Admin %s set blocked=%s for user %s', g.user_id, user.is_blocked, user.id)

    return jsonify({
        'user': user_to_dict(user, include_private=True),
        'message': 'User blocked' if user.is_blocked else 'User unblocked',
    })


@bp.route('/users/<user_id>', methods=['DELETE'])
@require_auth
@admin_required
def delete_user(user_id):
    """Delete a user along with their articles, comments, bookmarks and likes."""
    user = _get_user_or_404(user_id)
    if user.id == g.user_id:
        raise ValidationError('You cannot delete your own account')

    db.session.delete(user)
    db.session.commit()
    logger.info('Admin %s deleted user %s', g.user_id, user_id)

    return jsonify({'message': 'User and their content deleted'})


@bp.route('/articles', methods=['GET'])
@require_auth
@admin_required
def list_articles():
    articles = (
        Article.query.options(joinedload(Article.author), selectinload(Article.keyword_rows))
        .order_by(Article.created_at.desc())
        .all()
    )
    return jsonify({'articles': [article_to_dict(a) for a in articles]})


@bp.route('/articles/<article_id>', methods=['DELETE'])
@require_auth
@admin_required
def delete_article(article_id):
    article = db.session.get(Article, article_id)
    if not article:
        raise NotFoundError('Article not found')

    db.session.delete(article)
    db.session.commit()
    logger.info('Admin %s deleted article %s', g.user_id, article_id)

    return jsonify({'message': 'Article and comments deleted'})


@bp.route('/comments', methods=['GET'])
@require_auth
@admin_required
def list_comments():
    comments = (
        Comment.query.options(joinedload(Comment.author), joinedload(Comment.article))
        .order_by(Comment.created_at.desc())
        .all()
    )
    results = []
    for comment in comments:
        data = comment_to_dict(comment)
        data['article'] = {
            'id': comment.article.id,
            'title': comment.article.title,
            'slug': comment.article.slug,
        }
        results.append(data)
    return jsonify({'comments': results})


@bp.route('/comments/<comment_id>', methods=['DELETE'])
@require_auth
@admin_required
def remove_comment(comment_id):
    comment = get_comment_or_404(comment_id)
    delete_comment(comment)
    logger.info('Admin %s deleted comment %s', g.user_id, comment_id)
    return jsonify({'message': 'Comment deleted'})
