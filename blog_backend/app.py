import os
import logging
from logging.handlers import RotatingFileHandler

import click
from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from blog_backend.errors import register_error_handlers
from blog_backend.security import TokenService

logger = logging.getLogger(__name__)

if load_dotenv():
    logger.info(".env file loaded")

API_PREFIX = '/api/v1'


def _database_url():
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        # SQLAlchemy should talk to MySQL through PyMySQL.
        if database_url.startswith('mysql://'):
            database_url = database_url.replace('mysql://', 'mysql+pymysql://', 1)
        return database_url

    db_user = os.environ.get("DB_USERNAME", "root")
    db_password = os.environ.get("DB_PASSWORD", "example")
    db_host = os.environ.get("DB_HOST", "localhost")
    db_port = os.environ.get("DB_PORT", "3306")
    db_name = os.environ.get("DB_NAME", "blog_backend")
    return f"mysql+pymysql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _configure_logging(app):
    if not os.path.exists('logs'):
        os.mkdir('logs')
    file_handler = RotatingFileHandler('logs/blog_backend.log', maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)
    app.logger.setLevel(logging.INFO)


def create_app(test_config=None):
    app = Flask(__name__)

    # --- base configuration ---
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev')
    app.config['ACCESS_TOKEN_SECRET'] = os.environ.get('ACCESS_TOKEN_SECRET')
    app.config['REFRESH_TOKEN_SECRET'] = os.environ.get('REFRESH_TOKEN_SECRET')
    app.config['BCRYPT_LOG_ROUNDS'] = int(os.environ.get('BCRYPT_LOG_ROUNDS', 10))
    # SHA-256 pre-hash so passwords over bcrypt's 72-byte limit hash instead of raising.
    app.config['BCRYPT_HANDLE_LONG_PASSWORDS'] = True
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    if test_config:
        app.config.from_mapping(test_config)

    if 'SQLALCHEMY_DATABASE_URI' not in app.config:
        app.config['SQLALCHEMY_DATABASE_URI'] = _database_url()

    if not app.testing:
        _configure_logging(app)
    app.logger.info('Blog backend startup')

    # Fails startup when either signing secret is missing.
    app.extensions['token_service'] = TokenService.from_config(app.config)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # --- Flask extensions ---
    from blog_backend.extensions import db, migrate, bcrypt, cors
    from blog_backend import models  # noqa: F401  (registers the tables on db.metadata)
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    cors.init_app(app, supports_credentials=True, resources={r"/api/*": {"origins": "*"}})

    # --- API blueprints ---
    from blog_backend.routes.user_routes import user_bp
    from blog_backend.routes.post_routes import post_bp
    from blog_backend.routes.comment_routes import comment_bp

    app.register_blueprint(user_bp, url_prefix=f'{API_PREFIX}/users')
    app.register_blueprint(post_bp, url_prefix=f'{API_PREFIX}/posts')
    app.register_blueprint(comment_bp, url_prefix=f'{API_PREFIX}/comments')

    register_error_handlers(app)

    # The schema is created (if missing) on every startup.
    with app.app_context():
        db.create_all()

    # --- CLI commands ---
    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("create-admin")
    def create_admin_command():
        from blog_backend.bootstrap import create_initial_admin
        admin = create_initial_admin()
        if admin is None:
            click.echo("An account with that name or email already exists; nothing to do.")
        else:
            click.echo(f"Admin account '{admin.name}' created (id {admin.id}).")

    return app


# Run as a module (python -m blog_backend.app) or via flask --app blog_backend.app run.
if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 8081))
    app.run(host='0.0.0.0', port=port, debug=True)
