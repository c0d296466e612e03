from flask import Blueprint, g, jsonify

from emblog.api import request_data
from emblog.api.serializers import comment_to_dict
from emblog.middleware.auth import require_auth
from emblog.services.comments import (
    build_comment_tree,
    create_comment,
    delete_comment,
    ensure_can_modify,
    get_comment_or_404,
    update_comment,
)

bp = Blueprint('comments', __name__, url_prefix='/api/comments')


@bp.route('/article/<article_id>', methods=['GET'])
def list_article_comments(article_id):
    """Top-level comments newest first, each with its replies oldest first."""
    tree = build_comment_tree(article_id)
    return jsonify({
        'comments': [comment_to_dict(comment, replies) for comment, replies in tree]
    })


@bp.route('', methods=['POST'])
@require_auth
def add_comment():
    comment = create_comment(g.user, request_data())
    return jsonify({'comment': comment_to_dict(comment)}), 201


@bp.route('/<comment_id>', methods=['PUT'])
@require_auth
def edit_comment(comment_id):
    comment = get_comment_or_404(comment_id)
    update_comment(comment, g.user, request_data())
    return jsonify({'comment': comment_to_dict(comment)})


@bp.route('/<comment_id>', methods=['DELETE'])
@require_auth
def remove_comment(comment_id):
    """Delete a comment. Deleting a top-level comment removes its replies too."""
    comment = get_comment_or_404(comment_id)
    ensure_can_modify(comment, g.user)
    delete_comment(comment)
    return jsonify({'message': 'Comment deleted'})
