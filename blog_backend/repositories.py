from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from blog_backend.extensions import db
from blog_backend.models import User, Post, Comment


class Repository:
    """Single-entity CRUD over one model. Every write commits on its own."""

    model = None

    @classmethod
    def find_by_id(cls, entity_id):
        return db.session.get(cls.model, entity_id)

    @classmethod
    def find_all(cls, *criteria, **filters):
        query = cls.model.query.filter_by(**filters)
        if criteria:
            query = query.filter(*criteria)
        return query.order_by(cls.model.id).all()

    @classmethod
    def find_one(cls, *criteria, **filters):
        query = cls.model.query.filter_by(**filters)
        if criteria:
            query = query.filter(*criteria)
        return query.first()

    @classmethod
    def create(cls, **fields):
        entity = cls.model(**fields)
        db.session.add(entity)
        _commit(f"creating {cls.model.__name__}")
        return entity

    @classmethod
    def update_fields(cls, entity, **fields):
        for name, value in fields.items():
            setattr(entity, name, value)
        _commit(f"updating {cls.model.__name__} {entity.id}")
        return entity

    @classmethod
    def destroy(cls, entity):
        entity_id = entity.id
        db.session.delete(entity)
        _commit(f"deleting {cls.model.__name__} {entity_id}")


class UserRepository(Repository):
    model = User

    @staticmethod
    def find_by_name_or_email(name=None, email=None):
        conditions = []
        if name:
            conditions.append(User.name == name)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return None
        return User.query.filter(db.or_(*conditions)).first()

    @staticmethod
    def names_by_ids(user_ids):
        user_ids = set(user_ids)
        if not user_ids:
            return {}
        rows = db.session.query(User.id, User.name).filter(User.id.in_(user_ids)).all()
        return {user_id: name for user_id, name in rows}


class PostRepository(Repository):
    model = Post

    @staticmethod
    def find_by_title(title):
        return Post.query.filter_by(title=title).first()

    @staticmethod
    def find_by_title_for_author(title, author_id, exclude_id=None):
        query = Post.query.filter_by(title=title, author_id=author_id)
        if exclude_id is not None:
            query = query.filter(Post.id != exclude_id)
        return query.first()


class CommentRepository(Repository):
    model = Comment


def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Database error while {action}: {e}", exc_info=True)
        raise
