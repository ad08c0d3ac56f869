from flask import Blueprint, jsonify, current_app

from blog_backend.auth import token_required, current_auth
from blog_backend import policy
from blog_backend.errors import BadRequestError, NotFoundError
from blog_backend.repositories import PostRepository, UserRepository
from blog_backend.validation import (
    get_json_body, validate_create_post, validate_update_post, validate_publish_post,
)

post_bp = Blueprint('posts_api', __name__)


def isoformat(value):
    return value.isoformat() if value else None


def _serialize_posts(posts, include_visibility=False):
    author_names = UserRepository.names_by_ids(post.author_id for post in posts)
    posts_data = []
    for post in posts:
        entry = {
            'id': post.id,
            'title': post.title,
            'content': post.content,
            'authorName': author_names.get(post.author_id),
            'createdAt': isoformat(post.created_at),
        }
        if include_visibility:
            entry['visibility'] = not post.is_hidden
        posts_data.append(entry)
    return posts_data


def get_post_or_404(post_id):
    post = PostRepository.find_by_id(post_id)
    if not post:
        raise NotFoundError('Post not found')
    return post


# Role-scoped listing: own posts for bloggers, every post for admins
@post_bp.route('', methods=['GET'])
@token_required
def list_posts():
    filters = policy.post_listing_filters(current_auth().user)
    posts = [] if filters is None else PostRepository.find_all(**filters)
    return jsonify({'posts': _serialize_posts(posts, include_visibility=True)}), 200


@post_bp.route('', methods=['POST'])
@token_required
@validate_create_post
def create_post():
    user = current_auth().user
    data = get_json_body()
    title = data['title']

    # Titles are unique across all authors on creation.
    if PostRepository.find_by_title(title):
        raise BadRequestError('TITLE_ALREADY_EXISTS')

    post = PostRepository.create(
        title=title,
        content=data['content'],
        is_hidden=not data.get('publish', False),
        author_id=user.id,
    )
    current_app.logger.info(f"Post {post.id} created by user {user.id}")
    return jsonify({'message': 'Post created successfully', 'postId': post.id}), 201


@post_bp.route('/all', methods=['GET'])
@token_required
def list_public_posts():
    posts = PostRepository.find_all(**policy.public_post_filters())
    return jsonify({'posts': _serialize_posts(posts)}), 200


@post_bp.route('/<int:post_id>', methods=['GET'])
@token_required
def get_post(post_id):
    post = get_post_or_404(post_id)
    policy.ensure_can_view_post(current_auth().user, post)

    return jsonify({'post': {
        'id': post.id,
        'title': post.title,
        'content': post.content,
        'authorName': post.author.name if post.author else 'Unknown',
        'createdAt': isoformat(post.created_at),
    }}), 200


@post_bp.route('/<int:post_id>', methods=['PUT'])
@token_required
@validate_update_post
def update_post(post_id):
    user = current_auth().user
    data = get_json_body()

    post = get_post_or_404(post_id)
    policy.ensure_can_update_post(user, post)

    update_fields = {}
    title = data.get('title')
    if title:
        # On update, titles only have to be unique among the author's own posts.
        if PostRepository.find_by_title_for_author(title, post.author_id, exclude_id=post.id):
            raise BadRequestError('TITLE_ALREADY_EXISTS')
        update_fields['title'] = title
    if data.get('content'):
        update_fields['content'] = data['content']

    if not update_fields:
        raise BadRequestError('Nothing to update')

    PostRepository.update_fields(post, **update_fields)
    return jsonify({'message': 'Post updated successfully'}), 200


@post_bp.route('/<int:post_id>', methods=['DELETE'])
@token_required
def delete_post(post_id):
    user = current_auth().user
    post = get_post_or_404(post_id)
    policy.ensure_can_delete_post(user, post)

    PostRepository.destroy(post)
    current_app.logger.info(f"Post {post_id} deleted by user {user.id}")
    return jsonify({'message': 'Post deleted successfully'}), 200


@post_bp.route('/<int:post_id>/publish', methods=['PATCH'])
@token_required
@validate_publish_post
def publish_post(post_id):
    user = current_auth().user
    post = get_post_or_404(post_id)
    policy.ensure_can_publish_post(user, post)

    visible = get_json_body()['visible']
    PostRepository.update_fields(post, is_hidden=not visible)
    return jsonify({'message': 'Post status updated successfully'}), 200
