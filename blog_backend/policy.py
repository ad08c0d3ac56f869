"""
Authorization rules: who may see, change or remove which users, posts and comments.

Roles never get compared directly in handlers; every role-dependent decision
goes through ROLE_CAPABILITIES so the table below is the single place that
says what an admin may do that a blogger may not.

Functions in this module do no I/O. The ``ensure_*`` helpers raise
ForbiddenError with a code that identifies the rule that was violated.
"""
import enum

from blog_backend.errors import ForbiddenError
from blog_backend.models import UserType


class Capability(enum.Enum):
    LIST_OWN_POSTS = 'list_own_posts'
    LIST_ALL_POSTS = 'list_all_posts'
    VIEW_HIDDEN_POSTS = 'view_hidden_posts'
    EDIT_ANY_POST = 'edit_any_post'
    DELETE_PUBLIC_POSTS = 'delete_public_posts'
    MODERATE_COMMENTS = 'moderate_comments'
    MANAGE_USERS = 'manage_users'
    VIEW_ALL_USERS = 'view_all_users'


ROLE_CAPABILITIES = {
    UserType.BLOGGER: frozenset({
        Capability.LIST_OWN_POSTS,
    }),
    UserType.ADMIN: frozenset({
        Capability.LIST_ALL_POSTS,
        Capability.VIEW_HIDDEN_POSTS,
        Capability.EDIT_ANY_POST,
        Capability.DELETE_PUBLIC_POSTS,
        Capability.MODERATE_COMMENTS,
        Capability.MANAGE_USERS,
        Capability.VIEW_ALL_USERS,
    }),
}

# Only these user types can be removed through the admin endpoint.
DELETABLE_USER_TYPES = frozenset({UserType.BLOGGER})


def has_capability(user, capability):
    return capability in ROLE_CAPABILITIES.get(user.type, frozenset())


def is_author(user, resource):
    return resource.author_id == user.id


# --- visibility ---

def post_listing_filters(user):
    """Filters for the requester's post listing, or None when they may list nothing."""
    if has_capability(user, Capability.LIST_ALL_POSTS):
        return {}
    if has_capability(user, Capability.LIST_OWN_POSTS):
        return {'author_id': user.id}
    return None


def public_post_filters():
    return {'is_hidden': False}


def can_view_post(user, post):
    return (not post.is_hidden
            or is_author(user, post)
            or has_capability(user, Capability.VIEW_HIDDEN_POSTS))


def can_view_comment(user, comment):
    return is_author(user, comment) or can_view_post(user, comment.post)


def user_listing_scope(user):
    """Returns (include_ids, exclude_admins) for the user listing."""
    if has_capability(user, Capability.VIEW_ALL_USERS):
        return True, False
    return False, True


# --- posts ---

def ensure_can_view_post(user, post):
    if not can_view_post(user, post):
        raise ForbiddenError('POST_NOT_VISIBLE')


def ensure_can_update_post(user, post):
    if not (is_author(user, post) or has_capability(user, Capability.EDIT_ANY_POST)):
        raise ForbiddenError('CANNOT_MODIFY_POST')


def ensure_can_delete_post(user, post):
    if is_author(user, post):
        return
    if not has_capability(user, Capability.DELETE_PUBLIC_POSTS):
        raise ForbiddenError('CANNOT_DELETE_POST')
    if post.is_hidden:
        raise ForbiddenError('ADMINS_CAN_ONLY_DELETE_PUBLIC_POSTS')


def ensure_can_publish_post(user, post):
    if not is_author(user, post):
        raise ForbiddenError('CANNOT_MODIFY_POST_VISIBILITY')


# --- comments ---

def ensure_can_comment_on(user, post):
    ensure_can_view_post(user, post)


def ensure_can_view_comment(user, comment):
    if not can_view_comment(user, comment):
        raise ForbiddenError('COMMENT_NOT_VISIBLE')


def ensure_can_update_comment(user, comment):
    if not (is_author(user, comment) or has_capability(user, Capability.MODERATE_COMMENTS)):
        raise ForbiddenError('CANNOT_MODIFY_COMMENT')


def ensure_can_delete_comment(user, comment):
    if not (is_author(user, comment) or has_capability(user, Capability.MODERATE_COMMENTS)):
        raise ForbiddenError('CANNOT_DELETE_COMMENT')


# --- users ---

def ensure_can_manage_users(user):
    if not has_capability(user, Capability.MANAGE_USERS):
        raise ForbiddenError('ADMIN_PRIVILEGES_REQUIRED')


def ensure_can_delete_user(user, target):
    ensure_can_manage_users(user)
    if target.type not in DELETABLE_USER_TYPES:
        raise ForbiddenError('Cannot delete user of this type')
