from sqlalchemy import func

from emblog.extensions import db
from emblog.models.article import STATUS_PUBLISHED, Article, ArticleKeyword


def keyword_stats(author_id=None, limit=None):
    """Count keywords across published articles, most frequent first.

    Ties are ordered by keyword so repeated calls return the same list.
    Pass ``author_id`` to restrict the count to one author's articles.
    """
    count = func.count(ArticleKeyword.article_id).label('total')
    query = (
        db.session.query(ArticleKeyword.keyword, count)
        .join(Article, Article.id == ArticleKeyword.article_id)
        .filter(Article.status == STATUS_PUBLISHED)
    )
    if author_id is not None:
        query = query.filter(Article.author_id == author_id)

    query = query.group_by(ArticleKeyword.keyword).order_by(
        count.desc(), ArticleKeyword.keyword.asc()
    )
    if limit:
        query = query.limit(limit)

    return [{'keyword': keyword, 'count': total} for keyword, total in query.all()]
