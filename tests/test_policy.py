from types import SimpleNamespace

import pytest

from blog_backend import policy
from blog_backend.errors import ForbiddenError
from blog_backend.models import UserType

BLOGGER = SimpleNamespace(id=1, type=UserType.BLOGGER)
OTHER_BLOGGER = SimpleNamespace(id=2, type=UserType.BLOGGER)
ADMIN = SimpleNamespace(id=3, type=UserType.ADMIN)


def make_post(author, is_hidden):
    return SimpleNamespace(id=10, author_id=author.id, is_hidden=is_hidden)


def make_comment(author, post):
    return SimpleNamespace(id=20, author_id=author.id, post=post)


def assert_denied(code, check, *args):
    with pytest.raises(ForbiddenError) as excinfo:
        check(*args)
    assert excinfo.value.message == code


def test_every_user_type_has_a_capability_set():
    assert set(policy.ROLE_CAPABILITIES) == set(UserType)


def test_post_listing_is_scoped_by_role():
    assert policy.post_listing_filters(BLOGGER) == {'author_id': BLOGGER.id}
    assert policy.post_listing_filters(ADMIN) == {}


def test_post_listing_is_empty_for_unknown_roles():
    guest = SimpleNamespace(id=9, type=None)
    assert policy.post_listing_filters(guest) is None


def test_public_listing_excludes_hidden_posts():
    assert policy.public_post_filters() == {'is_hidden': False}


@pytest.mark.parametrize('user, is_hidden, visible', [
    (OTHER_BLOGGER, False, True),
    (OTHER_BLOGGER, True, False),
    (BLOGGER, True, True),
    (ADMIN, True, True),
])
def test_post_visibility(user, is_hidden, visible):
    post = make_post(BLOGGER, is_hidden)
    assert policy.can_view_post(user, post) is visible


def test_hidden_post_is_not_visible_to_other_bloggers():
    assert_denied('POST_NOT_VISIBLE', policy.ensure_can_view_post, OTHER_BLOGGER, make_post(BLOGGER, True))
    assert_denied('POST_NOT_VISIBLE', policy.ensure_can_comment_on, OTHER_BLOGGER, make_post(BLOGGER, True))


def test_update_post_requires_author_or_admin():
    post = make_post(BLOGGER, False)
    policy.ensure_can_update_post(BLOGGER, post)
    policy.ensure_can_update_post(ADMIN, post)
    assert_denied('CANNOT_MODIFY_POST', policy.ensure_can_update_post, OTHER_BLOGGER, post)


def test_author_can_always_delete_post():
    policy.ensure_can_delete_post(BLOGGER, make_post(BLOGGER, True))
    policy.ensure_can_delete_post(BLOGGER, make_post(BLOGGER, False))


def test_admin_can_delete_only_public_posts():
    policy.ensure_can_delete_post(ADMIN, make_post(BLOGGER, False))
    assert_denied('ADMINS_CAN_ONLY_DELETE_PUBLIC_POSTS',
                  policy.ensure_can_delete_post, ADMIN, make_post(BLOGGER, True))


def test_admin_author_can_delete_own_hidden_post():
    policy.ensure_can_delete_post(ADMIN, make_post(ADMIN, True))


def test_other_blogger_cannot_delete_post():
    assert_denied('CANNOT_DELETE_POST', policy.ensure_can_delete_post, OTHER_BLOGGER, make_post(BLOGGER, False))


def test_only_author_can_publish():
    post = make_post(BLOGGER, True)
    policy.ensure_can_publish_post(BLOGGER, post)
    assert_denied('CANNOT_MODIFY_POST_VISIBILITY', policy.ensure_can_publish_post, ADMIN, post)
    assert_denied('CANNOT_MODIFY_POST_VISIBILITY', policy.ensure_can_publish_post, OTHER_BLOGGER, post)


def test_comment_moderation():
    comment = make_comment(BLOGGER, make_post(OTHER_BLOGGER, False))
    policy.ensure_can_update_comment(BLOGGER, comment)
    policy.ensure_can_delete_comment(ADMIN, comment)
    assert_denied('CANNOT_MODIFY_COMMENT', policy.ensure_can_update_comment, OTHER_BLOGGER, comment)
    assert_denied('CANNOT_DELETE_COMMENT', policy.ensure_can_delete_comment, OTHER_BLOGGER, comment)


def test_comment_on_hidden_post_stays_visible_to_its_author():
    comment = make_comment(OTHER_BLOGGER, make_post(BLOGGER, True))
    assert policy.can_view_comment(OTHER_BLOGGER, comment)
    third = SimpleNamespace(id=4, type=UserType.BLOGGER)
    assert_denied('COMMENT_NOT_VISIBLE', policy.ensure_can_view_comment, third, comment)


def test_user_listing_scope():
    assert policy.user_listing_scope(ADMIN) == (True, False)
    assert policy.user_listing_scope(BLOGGER) == (False, True)


def test_only_bloggers_can_be_deleted_by_admins():
    policy.ensure_can_delete_user(ADMIN, OTHER_BLOGGER)
    assert_denied('Cannot delete user of this type', policy.ensure_can_delete_user, ADMIN, ADMIN)
    assert_denied('ADMIN_PRIVILEGES_REQUIRED', policy.ensure_can_delete_user, BLOGGER, OTHER_BLOGGER)
