import uuid
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import event, inspect

from emblog.extensions import db
from emblog.services.fields import normalize_keywords
from emblog.services.slugs import unique_slug
from emblog.services.word_count import count_words, make_excerpt, reading_time_minutes

STATUS_DRAFT = 'draft'
STATUS_PUBLISHED = 'published'
STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED)

# Composite primary key keeps a user in an article's likes at most once.
article_likes = db.Table(
    'article_likes',
    db.Column('article_id', db.String(36), db.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
    db.Column('user_id', db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    db.Column('created_at', db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)),
)


class ArticleKeyword(db.Model):
    __tablename__ = 'article_keywords'

    article_id = db.Column(db.String(36), db.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True)
    keyword = db.Column(db.String(50), primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.Index('ix_article_keywords_keyword', 'keyword'),
    )


class Article(db.Model):
    __tablename__ = 'articles'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    author_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(300), nullable=False, unique=True)
    content = db.Column(db.Text, nullable=False)
    excerpt = db.Column(db.String(500), nullable=False, default='')
    # False once the author supplies their own excerpt
    excerpt_derived = db.Column(db.Boolean, nullable=False, default=True)
    cover_image = db.Column(db.String(500), nullable=False, default='')
    status = db.Column(db.String(10), nullable=False, default=STATUS_DRAFT)
    reading_time = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    author = db.relationship('User', back_populates='articles')
    keyword_rows = db.relationship(
        'ArticleKeyword',
        order_by='ArticleKeyword.position',
        cascade='all, delete-orphan',
    )
    likes = db.relationship('User', secondary=article_likes, backref='liked_articles')
    comments = db.relationship('Comment', back_populates='article', cascade='all, delete-orphan')
    bookmarks = db.relationship('Bookmark', back_populates='article', cascade='all, delete-orphan')

    __table_args__ = (
        db.Index('ix_articles_status_created', 'status', created_at.desc()),
        db.Index('ix_articles_author_status', 'author_id', 'status'),
    )

    @property
    def keywords(self):
        return [row.keyword for row in self.keyword_rows]

    @keywords.setter
    def keywords(self, values):
        existing = {row.keyword: row for row in self.keyword_rows}
        rows = []
        for position, keyword in enumerate(normalize_keywords(values)):
            row = existing.get(keyword) or ArticleKeyword(keyword=keyword)
            row.position = position
            rows.append(row)
        self.keyword_rows = rows

    def apply_derived_fields(self):
        """Recompute slug, reading time and excerpt from their source fields.

        Only fields whose source changed since the last flush are touched,
        so re-saving an unchanged article leaves every derived value as is.
        """
        state = inspect(self)
        if state.attrs.title.history.has_changes() or not self.slug:
            self.slug = unique_slug(self.title)

        content_changed = state.attrs.content.history.has_changes()
        if content_changed:
            wpm = current_app.config.get('WORDS_PER_MINUTE', 200)
            self.reading_time = reading_time_minutes(count_words(self.content), wpm)

        if not self.excerpt or (content_changed and self.excerpt_derived is not False):
            length = current_app.config.get('EXCERPT_LENGTH', 160)
            self.excerpt = make_excerpt(self.content, length)
            self.excerpt_derived = True


@event.listens_for(Article, 'before_insert')
@event.listens_for(Article, 'before_update')
def _derive_article_fields(mapper, connection, target):
    target.apply_derived_fields()
