from flask import Blueprint, request, jsonify, current_app

from blog_backend.auth import token_required, admin_required, current_auth
from blog_backend.errors import BadRequestError, UnauthorizedError, NotFoundError, NotAcceptableError
from blog_backend.models import User, UserType
from blog_backend.policy import user_listing_scope, ensure_can_delete_user
from blog_backend.repositories import UserRepository
from blog_backend.security import hash_password, verify_password, get_token_service, REFRESH_TOKEN_LIFETIME
from blog_backend.validation import (
    get_json_body, validate_register, validate_create_user, validate_login,
)

user_bp = Blueprint('users_api', __name__)

REFRESH_COOKIE_NAME = 'jwt'


def create_user(user_type, name, email, password):
    """Creates a user after checking that neither name nor email is taken."""
    existing_user = UserRepository.find_by_name_or_email(name=name, email=email)
    if existing_user:
        if existing_user.name == name:
            raise BadRequestError('NAME_ALREADY_USED')
        if existing_user.email == email:
            raise BadRequestError('EMAIL_ALREADY_USED')

    user = UserRepository.create(
        type=user_type,
        name=name,
        email=email,
        password_hash=hash_password(password),
    )
    current_app.logger.info(f"User {user.id} ({user.type.name}) created")
    return user


@user_bp.route('', methods=['GET'])
@token_required
def list_users():
    include_ids, exclude_admins = user_listing_scope(current_auth().user)

    criteria = [User.type != UserType.ADMIN] if exclude_admins else []
    users = UserRepository.find_all(*criteria)

    users_data = []
    for user in users:
        entry = {'name': user.name, 'email': user.email}
        if include_ids:
            entry['id'] = user.id
        users_data.append(entry)
    return jsonify(users_data), 200


@user_bp.route('', methods=['POST'])
@token_required
@admin_required
@validate_create_user
def create_user_directly():
    data = get_json_body()
    user_type = UserType.parse(data['type']) if 'type' in data else UserType.BLOGGER
    create_user(user_type, data['name'], data['email'], data['password'])
    return '', 204


@user_bp.route('/login', methods=['POST'])
@validate_login
def login_user():
    data = get_json_body()
    email = data.get('email')
    name = data.get('name')

    if not email and not name:
        raise UnauthorizedError('EMAIL_OR_NAME_REQUIRED')

    user = UserRepository.find_by_name_or_email(name=name, email=email)
    if not user or not verify_password(data['password'], user.password_hash):
        current_app.logger.warning(f"Failed login attempt for {email or name}")
        raise UnauthorizedError('EMAIL_OR_PASSWORD_INCORRECT')

    token_service = get_token_service()
    response = jsonify({'token': token_service.issue_access_token(user.id)})
    response.set_cookie(
        REFRESH_COOKIE_NAME,
        token_service.issue_refresh_token(user.id),
        max_age=int(REFRESH_TOKEN_LIFETIME.total_seconds()),
        httponly=True,
        secure=True,
        samesite='None',
    )
    return response, 200


@user_bp.route('/register', methods=['POST'])
@validate_register
def register_user():
    data = get_json_body()
    create_user(UserType.BLOGGER, data['name'], data['email'], data['password'])
    return jsonify({'message': 'User successfully created.'}), 201


@user_bp.route('/refresh/<int:user_id>', methods=['POST'])
def refresh_access_token(user_id):
    user = UserRepository.find_by_id(user_id)
    if not user:
        raise NotFoundError('User not found')

    refresh_token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not refresh_token:
        raise UnauthorizedError('Token not found')

    access_token = get_token_service().refresh_access_token(user.id, refresh_token)
    if access_token is None:
        current_app.logger.warning(f"Rejected refresh token for user {user.id}")
        raise NotAcceptableError('Unauthorized')

    return jsonify({'accessToken': access_token}), 200


@user_bp.route('/admins', methods=['POST'])
@token_required
@admin_required
@validate_register
def create_admin():
    data = get_json_body()
    create_user(UserType.ADMIN, data['name'], data['email'], data['password'])
    return jsonify({'message': 'Admin successfully created.'}), 201


@user_bp.route('/admins/<int:user_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_user(user_id):
    user = UserRepository.find_by_id(user_id)
    if not user:
        raise NotFoundError('User not found')

    ensure_can_delete_user(current_auth().user, user)

    UserRepository.destroy(user)
    current_app.logger.info(f"User {user_id} deleted by admin {current_auth().user.id}")
    return '', 204
