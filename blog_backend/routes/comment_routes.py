from flask import Blueprint, jsonify, current_app

from blog_backend.auth import token_required, current_auth
from blog_backend import policy
from blog_backend.errors import NotFoundError
from blog_backend.repositories import CommentRepository, UserRepository
from blog_backend.routes.post_routes import get_post_or_404, isoformat
from blog_backend.validation import get_json_body, validate_comment

comment_bp = Blueprint('comments_api', __name__)


def _serialize_comment(comment):
    return {
        'id': comment.id,
        'content': comment.content,
        'postId': comment.post_id,
        'authorId': comment.author_id,
        'createdAt': isoformat(comment.created_at),
        'updatedAt': isoformat(comment.updated_at),
    }


def get_comment_or_404(comment_id):
    comment = CommentRepository.find_by_id(comment_id)
    if not comment:
        raise NotFoundError('Comment not found')
    return comment


@comment_bp.route('', methods=['GET'])
@token_required
def list_own_comments():
    comments = CommentRepository.find_all(author_id=current_auth().user.id)
    return jsonify({'comments': [
        {
            'id': comment.id,
            'content': comment.content,
            'postId': comment.post_id,
            'createdAt': isoformat(comment.created_at),
        }
        for comment in comments
    ]}), 200


@comment_bp.route('/post/<int:post_id>', methods=['GET'])
@token_required
def list_post_comments(post_id):
    post = get_post_or_404(post_id)
    policy.ensure_can_view_post(current_auth().user, post)

    comments = CommentRepository.find_all(post_id=post.id)
    author_names = UserRepository.names_by_ids(comment.author_id for comment in comments)
    return jsonify({'comments': [
        {
            'id': comment.id,
            'content': comment.content,
            'authorName': author_names.get(comment.author_id),
            'createdAt': isoformat(comment.created_at),
        }
        for comment in comments
    ]}), 200


@comment_bp.route('/<int:comment_id>', methods=['GET'])
@token_required
def get_comment(comment_id):
    comment = get_comment_or_404(comment_id)
    policy.ensure_can_view_comment(current_auth().user, comment)
    return jsonify({'comment': _serialize_comment(comment)}), 200


# The path id here is the id of the post being commented on.
@comment_bp.route('/<int:post_id>', methods=['POST'])
@token_required
@validate_comment
def create_comment(post_id):
    user = current_auth().user
    post = get_post_or_404(post_id)
    policy.ensure_can_comment_on(user, post)

    comment = CommentRepository.create(
        content=get_json_body()['content'],
        post_id=post.id,
        author_id=user.id,
    )
    current_app.logger.info(f"Comment {comment.id} created on post {post.id} by user {user.id}")
    return jsonify({'message': 'Comment created successfully', 'comment': _serialize_comment(comment)}), 201


@comment_bp.route('/<int:comment_id>', methods=['PUT'])
@token_required
@validate_comment
def update_comment(comment_id):
    comment = get_comment_or_404(comment_id)
    policy.ensure_can_update_comment(current_auth().user, comment)

    CommentRepository.update_fields(comment, content=get_json_body()['content'])
    return jsonify({'message': 'Comment updated successfully'}), 200


@comment_bp.route('/<int:comment_id>', methods=['DELETE'])
@token_required
def delete_comment(comment_id):
    comment = get_comment_or_404(comment_id)
    policy.ensure_can_delete_comment(current_auth().user, comment)

    CommentRepository.destroy(comment)
    return jsonify({'message': 'Comment deleted successfully'}), 200
