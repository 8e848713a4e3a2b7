import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from samity.extensions import db, login_manager
from samity.services.errors import SamityError
from config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = False

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # User loader for Flask-Login
    from samity.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'status': 'error', 'message': 'Login required'}), 401

    # Register blueprints
    from samity.routes.auth import auth_bp
    from samity.routes.members import members_bp
    from samity.routes.transactions import transactions_bp
    from samity.routes.loans import loans_bp
    from samity.routes.bulletin import bulletin_bp
    from samity.routes.settings import settings_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(loans_bp)
    app.register_blueprint(bulletin_bp)
    app.register_blueprint(settings_bp)

    register_error_handlers(app)

    with app.app_context():
        db.create_all()

        from samity.services.settings_service import ensure_settings
        ensure_settings()

        if app.config.get('SEED_DEMO_DATA'):
            from samity.services.seed import seed_demo_data
            seed_demo_data()

        app.logger.info("Database ready: %s", app.config['SQLALCHEMY_DATABASE_URI'])

    return app


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger('samity').setLevel(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(format='%(asctime)s %(levelname)s [%(name)s] %(message)s')


def register_error_handlers(app):

    @app.errorhandler(SamityError)
    def handle_service_error(error):
        if error.status_code >= 500:
            app.logger.error("Service failure: %s", error)
        else:
            app.logger.info("%s: %s", type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({
            'status': 'error',
            'error': error.name,
            'message': error.description,
        }), error.code
