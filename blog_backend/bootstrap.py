# blog_backend/bootstrap.py
import os

from flask import current_app

from blog_backend.models import UserType
from blog_backend.repositories import UserRepository
from blog_backend.security import hash_password


def create_initial_admin():
    """
    Creates the first admin account from ADMIN_NAME / ADMIN_EMAIL / ADMIN_PASSWORD.

    Admins can otherwise only be created by other admins, so a fresh database
    needs this once. Returns the new user, or None when the name or email is
    already taken. Must run inside an application context.
    """
    admin_name = os.environ.get('ADMIN_NAME', 'admin')
    admin_email = os.environ.get('ADMIN_EMAIL')
    admin_password = os.environ.get('ADMIN_PASSWORD')

    if not admin_email or not admin_password:
        raise ValueError("ADMIN_EMAIL and ADMIN_PASSWORD environment variables must be set.")

    existing_user = UserRepository.find_by_name_or_email(name=admin_name, email=admin_email)
    if existing_user:
        current_app.logger.info(f"Admin bootstrap skipped: '{existing_user.name}' already exists")
        return None

    admin = UserRepository.create(
        type=UserType.ADMIN,
        name=admin_name,
        email=admin_email,
        password_hash=hash_password(admin_password),
    )
    current_app.logger.info(f"Admin account '{admin.name}' created")
    return admin
