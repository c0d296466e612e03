from emblog.models.user import User
from emblog.models.article import Article, ArticleKeyword, article_likes
from emblog.models.comment import Comment
from emblog.models.bookmark import Bookmark

__all__ = ['User', 'Article', 'ArticleKeyword', 'article_likes', 'Comment', 'Bookmark']
