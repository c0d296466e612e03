"""Membership toggles for likes and bookmarks.

Both toggles try a conditional delete first and only insert when nothing
was removed. Two racing inserts for the same pair are resolved by the
composite key / unique constraint: the loser's IntegrityError is absorbed
and the pair is reported as present.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from emblog.extensions import db
from emblog.models.article import article_likes
from emblog.models.bookmark import Bookmark

logger = logging.getLogger(__name__)


def like_count(article_id):
    return (
        db.session.query(func.count())
        .select_from(article_likes)
        .filter(article_likes.c.article_id == article_id)
        .scalar()
    )


def has_liked(article_id, user_id):
    if user_id is None:
        return False
    row = db.session.execute(
        db.select(article_likes.c.user_id).where(
            article_likes.c.article_id == article_id,
            article_likes.c.user_id == user_id,
        )
    ).first()
    return row is not None


def toggle_like(article_id, user_id):
    """Invert ``user_id``'s like on the article. Returns ``(likes, is_liked)``."""
    removed = db.session.execute(
        article_likes.delete().where(
            article_likes.c.article_id == article_id,
            article_likes.c.user_id == user_id,
        )
    ).rowcount

    if removed:
        is_liked = False
        db.session.commit()
    else:
        is_liked = True
        try:
            db.session.execute(
                article_likes.insert().values(article_id=article_id, user_id=user_id)
            )
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.debug('Concurrent like for article %s by %s already stored', article_id, user_id)

    return like_count(article_id), is_liked


def is_bookmarked(user_id, article_id):
    return Bookmark.query.filter_by(user_id=user_id, article_id=article_id).first() is not None


def toggle_bookmark(user_id, article_id):
    """Invert the bookmark for the pair. Returns the new membership."""
    removed = Bookmark.query.filter_by(user_id=user_id, article_id=article_id).delete()
    if removed:
        db.session.commit()
        return False

    try:
        db.session.add(Bookmark(user_id=user_id, article_id=article_id))
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.debug('Concurrent bookmark for article %s by %s already stored', article_id, user_id)
    return True
