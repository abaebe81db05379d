from flask import Flask, jsonify
from bookshare.config import Config
from bookshare.errors import register_error_handlers, register_jwt_handlers
from bookshare.extensions import db, migrate, jwt, mail


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) db first (models need an initialised db before create_all)
    db.init_app(app)
    migrate.init_app(app, db)

    # 2) other extensions
    jwt.init_app(app)
    mail.init_app(app)

    register_error_handlers(app)
    register_jwt_handlers(jwt)

    from bookshare import models  # noqa: F401  (register tables)
    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # 3) API blueprints
    from bookshare.controllers.auth_controller import auth_bp
    from bookshare.controllers.book_controller import book_bp
    from bookshare.controllers.request_controller import request_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(request_bp, url_prefix="/requests")

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "lendingMode": app.config.get("LENDING_MODE")})

    # Loan reminders
    from bookshare.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
