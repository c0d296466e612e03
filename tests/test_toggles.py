import pytest
from sqlalchemy.exc import IntegrityError

from emblog.extensions import db
from emblog.models.article import article_likes
from emblog.models.bookmark import Bookmark
from emblog.models.user import User
from emblog.services.toggles import like_count, toggle_bookmark, toggle_like
from tests.conftest import make_article


def _user_and_article(client, token):
    article = make_article(client, token)
    user = User.query.filter_by(email='test@example.com').one()
    return user.id, article['id']


def _lose_insert_race(monkeypatch, competing_write):
    """Make the next commit lose to a concurrent writer of the same pair.

    The pending insert is discarded, ``competing_write`` is committed in its
    place, and the commit then fails the way the database reports the
    duplicate key.
    """
    real_commit = db.session.commit
    state = {'raced': False}

    def commit():
        if state['raced']:
            return real_commit()
        state['raced'] = True
        db.session.rollback()
        competing_write()
        real_commit()
        raise IntegrityError('INSERT', {}, Exception('UNIQUE constraint failed'))

    monkeypatch.setattr(db.session, 'commit', commit)
    return state


class TestLikeUniqueness:
    """The article_likes composite primary key backs the like toggle."""

    def test_duplicate_like_row_rejected(self, client, user_token):
        user_id, article_id = _user_and_article(client, user_token)
        db.session.execute(article_likes.insert().values(article_id=article_id, user_id=user_id))
        db.session.commit()

        with pytest.raises(IntegrityError):
            db.session.execute(article_likes.insert().values(article_id=article_id, user_id=user_id))
        db.session.rollback()
        assert like_count(article_id) == 1

    def test_concurrent_like_reported_as_liked(self, client, user_token, monkeypatch):
        user_id, article_id = _user_and_article(client, user_token)

        def other_request_likes():
            db.session.execute(article_likes.insert().values(article_id=article_id, user_id=user_id))

        state = _lose_insert_race(monkeypatch, other_request_likes)
        assert toggle_like(article_id, user_id) == (1, True)
        assert state['raced']
        assert like_count(article_id) == 1


class TestBookmarkRace:
    """A bookmark insert that loses to a concurrent toggle."""

    def test_concurrent_bookmark_reported_as_bookmarked(self, client, user_token, monkeypatch):
        user_id, article_id = _user_and_article(client, user_token)

        def other_request_bookmarks():
            db.session.add(Bookmark(user_id=user_id, article_id=article_id))

        state = _lose_insert_race(monkeypatch, other_request_bookmarks)
        assert toggle_bookmark(user_id, article_id) is True
        assert state['raced']
        assert Bookmark.query.filter_by(user_id=user_id, article_id=article_id).count() == 1

    def test_toggle_after_race_removes_the_stored_pair(self, client, user_token, monkeypatch):
        user_id, article_id = _user_and_article(client, user_token)

        def other_request_bookmarks():
            db.session.add(Bookmark(user_id=user_id, article_id=article_id))

        _lose_insert_race(monkeypatch, other_request_bookmarks)
        toggle_bookmark(user_id, article_id)
        assert toggle_bookmark(user_id, article_id) is False
        assert Bookmark.query.count() == 0
