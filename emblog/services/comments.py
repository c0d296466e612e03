"""Comment threads.

Comments are stored flat with a nullable ``parent_id``. Threads are one
level deep: a reply must point at a top-level comment of the same article.
"""

import logging

from sqlalchemy.orm import joinedload

from emblog.errors import ForbiddenError, NotFoundError, ValidationError
from emblog.extensions import db
from emblog.models.article import Article
from emblog.models.comment import MAX_COMMENT_LENGTH, Comment
from emblog.services.fields import require_text

logger = logging.getLogger(__name__)


def build_comment_tree(article_id):
    """Return ``[(comment, replies), ...]`` for an article.

    Top-level comments come newest first; each reply list is oldest first.
    """
    top_level = (
        Comment.query
        .options(joinedload(Comment.author))
        .filter(Comment.article_id == article_id, Comment.parent_id.is_(None))
        .order_by(Comment.created_at.desc())
        .all()
    )
    if not top_level:
        return []

    replies_by_parent = {comment.id: [] for comment in top_level}
    replies = (
        Comment.query
        .options(joinedload(Comment.author))
        .filter(Comment.parent_id.in_(list(replies_by_parent)))
        .order_by(Comment.created_at.asc())
        .all()
    )
    for reply in replies:
        replies_by_parent[reply.parent_id].append(reply)

    return [(comment, replies_by_parent[comment.id]) for comment in top_level]


def get_comment_or_404(comment_id):
    comment = db.session.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError('Comment not found')
    return comment


def ensure_can_modify(comment, user):
    if comment.author_id != user.id and not user.is_admin:
        raise ForbiddenError('Not authorized')


def create_comment(author, data):
    content = require_text(data, 'content', MAX_COMMENT_LENGTH)

    article_id = data.get('articleId')
    if not article_id:
        raise ValidationError('articleId is required')
    if db.session.get(Article, article_id) is None:
        raise NotFoundError('Article not found')

    parent_id = data.get('parentCommentId') or None
    if parent_id is not None:
        parent = db.session.get(Comment, parent_id)
        if parent is None:
            raise NotFoundError('Parent comment not found')
        if parent.article_id != article_id:
            raise ValidationError('parentCommentId belongs to another article')
        if parent.is_reply:
            raise ValidationError('Replies can only be made to top-level comments')

    comment = Comment(
        content=content,
        author_id=author.id,
        article_id=article_id,
        parent_id=parent_id,
    )
    db.session.add(comment)
    db.session.commit()
    return comment


def update_comment(comment, user, data):
    ensure_can_modify(comment, user)
    comment.content = require_text(data, 'content', MAX_COMMENT_LENGTH)
    db.session.commit()
    return comment


def delete_comment(comment):
    """Delete a comment and, through the ``replies`` cascade, its replies."""
    comment_id, reply_count = comment.id, len(comment.replies)
    db.session.delete(comment)
    db.session.commit()
    logger.info('Deleted comment %s with %d replies', comment_id, reply_count)
