import os
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager

__version__ = '1.2.0'

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()

def create_app(config_name=None, config_overrides=None):
    """Application factory pattern for Flask app creation"""

    # Create and configure the app
    app = Flask(__name__)

    # Load configuration
    from pos.core.config import config_by_name
    config_obj = config_by_name[config_name or os.getenv('FLASK_ENV', 'development')]
    app.config.from_object(config_obj)
    if config_overrides:
        app.config.update(config_overrides)
    config_obj.init_app(app)

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)

    # Configure login manager
    from pos.auth.user import User, AnonymousUser
    login_manager.anonymous_user = AnonymousUser
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # The job queue belongs to the commerce plugin and is optional
    if app.config.get('POS_JOB_QUEUE_ENABLED'):
        from pos.jobs.queue import JobQueue
        JobQueue(app)

    # Register blueprints
    from pos.core.views import main_bp
    app.register_blueprint(main_bp)
    from pos.auth.routes import auth_api
    app.register_blueprint(auth_api)

    # Regenerate routing rules when the installer asks for it
    from pos.core.rewrites import register_rewrite_flush
    register_rewrite_flush(app)

    # Register CLI commands
    from pos.plugins.commands import register_commands
    register_commands(app)

    # Register error handlers
    from pos.core.error_handlers import register_handlers
    register_handlers(app)

    # Insert default roles and register the built-in plugin once tables exist
    with app.app_context():
        try:
            from sqlalchemy import inspect
            from pos.auth.user import Role
            from pos.plugins.plugin_manager import PluginManager

            table_names = inspect(db.engine).get_table_names()
            if 'roles' in table_names:
                Role.insert_default_roles()
            if 'plugins' in table_names:
                PluginManager().register_builtin_plugins()
            else:
                app.logger.info("Plugins table not yet created - skipping plugin registration")
        except Exception as e:
            app.logger.error(f"Error initializing default data: {str(e)}")

    return app
