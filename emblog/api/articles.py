import logging

from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import or_
from sqlalchemy.orm import joinedload, selectinload

from emblog.api import request_data
from emblog.api.serializers import article_to_dict
from emblog.errors import ForbiddenError, NotFoundError, ValidationError
from emblog.extensions import db
from emblog.middleware.auth import optional_auth, require_auth
from emblog.models.article import STATUS_DRAFT, STATUS_PUBLISHED, STATUSES, Article, ArticleKeyword
from emblog.models.user import User
from emblog.services.fields import parse_keywords, parse_positive_int, require_text
from emblog.services.keywords import keyword_stats
from emblog.services.toggles import has_liked, toggle_like
from emblog.services.uploads import discard_image, save_image

logger = logging.getLogger(__name__)

bp = Blueprint('articles', __name__, url_prefix='/api/articles')

MAX_TITLE_LENGTH = 200
MAX_EXCERPT_LENGTH = 500


def _article_query():
    return Article.query.options(
        joinedload(Article.author),
        selectinload(Article.keyword_rows),
        selectinload(Article.likes),
    )


def _published_query():
    return _article_query().filter(Article.status == STATUS_PUBLISHED)


def _escape_like(value):
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


def _get_article_or_404(article_id):
    article = _article_query().filter(Article.id == article_id).first()
    if not article:
        raise NotFoundError('Article not found')
    return article


def _ensure_owner(article, user):
    if article.author_id != user.id and not user.is_admin:
        raise ForbiddenError('Not authorized')


def _apply_fields(article, data, creating):
    """Copy client-editable fields onto ``article``.

    Slug, excerpt (unless the author wrote one) and reading time are derived at flush time
    from the title and content set here.
    """
    if creating or 'title' in data:
        title = require_text(data, 'title', MAX_TITLE_LENGTH)
        if title != article.title:
            article.title = title
    if creating or 'content' in data:
        content = require_text(data, 'content')
        if content != article.content:
            article.content = content

    if 'excerpt' in data:
        excerpt = (data.get('excerpt') or '').strip()
        if len(excerpt) > MAX_EXCERPT_LENGTH:
            raise ValidationError(f'excerpt must be at most {MAX_EXCERPT_LENGTH} characters')
        article.excerpt = excerpt
        article.excerpt_derived = not excerpt

    status = data.get('status')
    if status:
        if status not in STATUSES:
            raise ValidationError('status must be draft or published')
        article.status = status
    elif creating:
        article.status = STATUS_DRAFT

    if 'keywords' in data:
        article.keywords = parse_keywords(data['keywords'], current_app.config['MAX_KEYWORDS'])


def _commit_with_cover(article):
    """Store any uploaded cover image, then commit.

    The image is written only after every field has validated, and removed
    again if the commit fails.
    """
    cover = save_image(request.files.get('coverImage'))
    if cover:
        article.cover_image = cover
    try:
        db.session.commit()
    except Exception:
        discard_image(cover)
        raise


@bp.route('', methods=['GET'])
def list_articles():
    """List published articles, newest first.

    Query params:
        page: 1-based page number (default: 1)
        limit: page size (default: 10, capped at MAX_PAGE_SIZE)
        keyword: only articles tagged with this keyword
    """
    page = parse_positive_int(request.args.get('page'), 1)
    limit = parse_positive_int(
        request.args.get('limit'),
        current_app.config['DEFAULT_PAGE_SIZE'],
        current_app.config['MAX_PAGE_SIZE'],
    )
    keyword = (request.args.get('keyword') or '').strip().lower()

    query = _published_query()
    if keyword:
        query = query.filter(Article.keyword_rows.any(ArticleKeyword.keyword == keyword))

    pagination = query.order_by(Article.created_at.desc()).paginate(
        page=page, per_page=limit, error_out=False
    )
    return jsonify({
        'articles': [article_to_dict(a) for a in pagination.items],
        'totalPages': pagination.pages,
        'currentPage': page,
        'total': pagination.total,
    })


@bp.route('/keywords', methods=['GET'])
def list_keywords():
    return jsonify(keyword_stats(limit=current_app.config['TOP_KEYWORDS']))


@bp.route('/search', methods=['GET'])
def search_articles():
    """Case-insensitive substring search over title, content and keywords."""
    q = (request.args.get('q') or '').strip()
    if not q:
        return jsonify({'articles': []})

    pattern = f'%{_escape_like(q)}%'
    articles = (
        _published_query()
        .filter(or_(
            Article.title.ilike(pattern, escape='\\'),
            Article.content.ilike(pattern, escape='\\'),
            Article.keyword_rows.any(ArticleKeyword.keyword.ilike(pattern, escape='\\')),
        ))
        .order_by(Article.created_at.desc())
        .limit(current_app.config['SEARCH_LIMIT'])
        .all()
    )
    return jsonify({'articles': [article_to_dict(a) for a in articles]})


@bp.route('/user/<user_id>', methods=['GET'])
def list_user_articles(user_id):
    """An author's published articles plus their keyword counts."""
    if db.session.get(User, user_id) is None:
        raise NotFoundError('User not found')

    query = _published_query().filter(Article.author_id == user_id)
    keyword = (request.args.get('keyword') or '').strip().lower()
    if keyword:
        query = query.filter(Article.keyword_rows.any(ArticleKeyword.keyword == keyword))

    articles = query.order_by(Article.created_at.desc()).all()
    return jsonify({
        'articles': [article_to_dict(a) for a in articles],
        'keywordStats': keyword_stats(author_id=user_id),
    })


@bp.route('/slug/<slug>', methods=['GET'])
@optional_auth
def get_article_by_slug(slug):
    article = _article_query().filter(Article.slug == slug).first()
    if not article:
        raise NotFoundError('Article not found')

    return jsonify({
        'article': article_to_dict(article, include_content=True, include_author_bio=True),
        'isLiked': has_liked(article.id, g.user_id),
    })


@bp.route('/my/drafts', methods=['GET'])
@require_auth
def my_drafts():
    articles = (
        _article_query()
        .filter(Article.author_id == g.user_id, Article.status == STATUS_DRAFT)
        .order_by(Article.updated_at.desc())
        .all()
    )
    return jsonify({'articles': [article_to_dict(a) for a in articles]})


@bp.route('/my/articles', methods=['GET'])
@require_auth
def my_articles():
    articles = (
        _article_query()
        .filter(Article.author_id == g.user_id)
        .order_by(Article.created_at.desc())
        .all()
    )
    return jsonify({'articles': [article_to_dict(a) for a in articles]})


@bp.route('/<article_id>', methods=['GET'])
@require_auth
def get_article(article_id):
    """Full article for the editor. Owner or admin only."""
    article = _get_article_or_404(article_id)
    _ensure_owner(article, g.user)
    return jsonify({'article': article_to_dict(article, include_content=True)})


@bp.route('', methods=['POST'])
@require_auth
def create_article():
    data = request_data()
    article = Article(author_id=g.user_id)
    _apply_fields(article, data, creating=True)

    db.session.add(article)
    _commit_with_cover(article)
    logger.info('User %s created article %s (%s)', g.user_id, article.id, article.status)

    return jsonify({'article': article_to_dict(article, include_content=True)}), 201


@bp.route('/<article_id>', methods=['PUT'])
@require_auth
def update_article(article_id):
    article = _get_article_or_404(article_id)
    _ensure_owner(article, g.user)

    _apply_fields(article, request_data(), creating=False)
    _commit_with_cover(article)

    return jsonify({'article': article_to_dict(article, include_content=True)})


@bp.route('/<article_id>', methods=['DELETE'])
@require_auth
def delete_article(article_id):
    """Delete an article together with its comments, bookmarks and likes."""
    article = _get_article_or_404(article_id)
    _ensure_owner(article, g.user)

    db.session.delete(article)
    db.session.commit()
    logger.info('User %s deleted article %s', g.user_id, article_id)

    return jsonify({'message': 'Article deleted'})


@bp.route('/<article_id>/like', methods=['POST'])
@require_auth
def like_article(article_id):
    if db.session.get(Article, article_id) is None:
        raise NotFoundError('Article not found')

    likes, is_liked = toggle_like(article_id, g.user_id)
    return jsonify({'likes': likes, 'isLiked': is_liked})
