import uuid
from datetime import datetime, timezone

from emblog.extensions import db

MAX_COMMENT_LENGTH = 2000


class Comment(db.Model):
    __tablename__ = 'comments'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    article_id = db.Column(db.String(36), db.ForeignKey('articles.id', ondelete='CASCADE'), nullable=False)
    author_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    parent_id = db.Column(db.String(36), db.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True)
    content = db.Column(db.String(MAX_COMMENT_LENGTH), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    article = db.relationship('Article', back_populates='comments')
    author = db.relationship('User', back_populates='comments')
    # Deleting a comment takes its replies with it.
    replies = db.relationship(
        'Comment',
        backref=db.backref('parent', remote_side=[id]),
        cascade='all, delete-orphan',
        order_by='Comment.created_at',
    )

    __table_args__ = (
        db.Index('ix_comments_article_parent', 'article_id', 'parent_id'),
        db.Index('ix_comments_parent', 'parent_id'),
    )

    @property
    def is_reply(self):
        return self.parent_id is not None
