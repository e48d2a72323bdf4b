import os
import datetime
import logging
from logging.handlers import RotatingFileHandler

import click
from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.middleware.proxy_fix import ProxyFix

load_dotenv()


def _database_url():
    url = os.environ.get('DATABASE_URL', 'sqlite:///tangent.db')
    if url.startswith('mysql://'):
        url = url.replace('mysql://', 'mysql+pymysql://', 1)
    return url


def _configure_logging(app):
    log_dir = app.config['LOG_DIR']
    if not os.path.exists(log_dir):
        os.mkdir(log_dir)
    file_handler = RotatingFileHandler(os.path.join(log_dir, 'tangent.log'), maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
    file_handler.setLevel(logging.INFO)
    app.logger.addHandler(file_handler)


def create_app(test_config=None):
    app = Flask(__name__)

    # --- Settings ---
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev')
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET_KEY')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = datetime.timedelta(
        hours=int(os.environ.get('JWT_ACCESS_TOKEN_EXPIRES_HOURS', 24)))
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_url()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['LOG_DIR'] = os.environ.get('LOG_DIR', 'logs')
    app.config['CORS_ORIGINS'] = os.environ.get('CORS_ORIGINS', '*')
    # Keep the API's key order in responses.
    app.json.sort_keys = False

    if test_config:
        app.config.from_mapping(test_config)

    # --- Logging ---
    if not app.testing:
        _configure_logging(app)
    app.logger.setLevel(logging.INFO)

    if not app.config['JWT_SECRET_KEY']:
        app.logger.warning('JWT_SECRET_KEY is not set; using the development key.')
        app.config['JWT_SECRET_KEY'] = 'local-dev-jwt-secret-key-for-testing-only'

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)
    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # --- Extensions ---
    from tangent.extensions import db, migrate, jwt, bcrypt
    from tangent import models  # noqa: F401  registers tables on db.metadata
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)

    # --- API blueprints ---
    from tangent.routes.auth_routes import auth_bp
    from tangent.routes.resource_routes import category_bp, post_bp, comment_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(category_bp, url_prefix='/api')
    app.register_blueprint(post_bp, url_prefix='/api')
    app.register_blueprint(comment_bp, url_prefix='/api')

    from tangent.errors import register_error_handlers
    register_error_handlers(app)

    # --- CLI commands ---
    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command("create-user")
    @click.argument('name')
    @click.argument('email')
    @click.argument('password')
    def create_user_command(name, email, password):
        from tangent.auth import create_user
        from tangent.errors import ValidationError
        try:
            user = create_user(name, email, password)
        except ValidationError as e:
            for field, messages in e.errors.items():
                for message in messages:
                    click.echo(f"{field}: {message}", err=True)
            raise SystemExit(1)
        click.echo(f"Created user {user.name} (id {user.id}).")

    app.logger.info('Tangent API startup')
    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_DEBUG') == '1')
