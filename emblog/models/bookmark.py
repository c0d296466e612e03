import uuid
from datetime import datetime, timezone

from emblog.extensions import db


class Bookmark(db.Model):
    __tablename__ = 'bookmarks'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    article_id = db.Column(db.String(36), db.ForeignKey('articles.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    user = db.relationship('User', back_populates='bookmarks')
    article = db.relationship('Article', back_populates='bookmarks')

    __table_args__ = (
        db.UniqueConstraint('user_id', 'article_id', name='uq_bookmark_user_article'),
        db.Index('ix_bookmarks_user_created', 'user_id', created_at.desc()),
    )
