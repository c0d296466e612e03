"""Shared JSON projections for users, articles, comments and bookmarks."""


def _iso(value):
    return value.isoformat() if value else None


def author_to_dict(user, include_bio=False):
    if user is None:
        return None
    data = {
        'id': user.id,
        'name': user.name,
        'profile_picture': user.profile_picture,
    }
    if include_bio:
        data['bio'] = user.bio
    return data


def user_to_dict(user, include_private=False):
    """Serialize a User. The password hash is never included."""
    data = {
        'id': user.id,
        'name': user.name,
        'bio': user.bio,
        'profile_picture': user.profile_picture,
        'role': user.role,
        'links': user.links or [],
        'created_at': _iso(user.created_at),
    }
    if include_private:
        data['email'] = user.email
        data['is_blocked'] = user.is_blocked
    return data


def article_to_dict(article, include_content=False, include_author_bio=False):
    """Serialize an Article; listings leave out the HTML body."""
    data = {
        'id': article.id,
        'title': article.title,
        'slug': article.slug,
        'excerpt': article.excerpt,
        'cover_image': article.cover_image,
        'author': author_to_dict(article.author, include_bio=include_author_bio),
        'keywords': article.keywords,
        'status': article.status,
        'likes': len(article.likes),
        'reading_time': article.reading_time,
        'created_at': _iso(article.created_at),
        'updated_at': _iso(article.updated_at),
    }
    if include_content:
        data['content'] = article.content
    return data


def comment_to_dict(comment, replies=None):
    data = {
        'id': comment.id,
        'content': comment.content,
        'author': author_to_dict(comment.author),
        'article_id': comment.article_id,
        'parent_id': comment.parent_id,
        'created_at': _iso(comment.created_at),
        'updated_at': _iso(comment.updated_at),
    }
    if replies is not None:
        data['replies'] = [comment_to_dict(reply) for reply in replies]
    return data


def bookmark_to_dict(bookmark):
    return {
        'id': bookmark.id,
        'article': article_to_dict(bookmark.article),
        'created_at': _iso(bookmark.created_at),
    }
