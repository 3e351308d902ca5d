from dataclasses import dataclass

from flask import Flask, current_app
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO()


@dataclass
class Services:
    """Service objects shared by every request of one app."""
    identity: object
    classrooms: object
    quizzes: object
    stats: object
    profile: object
    db: object
    page_size: int
    max_workers: int


def build_services(db, max_workers, page_size):
    from quizroom.services.classrooms import ClassroomService
    from quizroom.services.identity import IdentityStore
    from quizroom.services.profile import ProfileService
    from quizroom.services.quizzes import QuizService
    from quizroom.services.stats import StatsService

    return Services(
        identity=IdentityStore(db),
        classrooms=ClassroomService(db, max_workers=max_workers),
        quizzes=QuizService(db),
        stats=StatsService(db),
        profile=ProfileService(db, max_workers=max_workers),
        db=db,
        page_size=page_size,
        max_workers=max_workers,
    )


def get_services():
    return current_app.extensions['quizroom']


def create_app(config_class=Config, db=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.testing:
        from quizroom.logging_config import setup_logging
        setup_logging(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize Firebase unless a client was handed in
    from quizroom.firebase_init import init_firebase, get_db, set_db
    if db is None:
        init_firebase(app.config)
        db = get_db()
    else:
        set_db(db)

    app.extensions['quizroom'] = build_services(
        db,
        max_workers=app.config.get('FANOUT_MAX_WORKERS', 8),
        page_size=app.config.get('CLASSROOM_PAGE_SIZE', 30),
    )

    # CORS origins
    allowed_origins = []
    cors_origins = app.config.get('CORS_ALLOWED_ORIGINS', '')
    if cors_origins:
        for origin in cors_origins.split(','):
            origin = origin.strip()
            if origin:
                allowed_origins.append(origin)

    socketio.init_app(
        app,
        cors_allowed_origins=allowed_origins if allowed_origins else None,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE', 'threading')
    )

    # Register blueprints
    from quizroom.routes import classrooms, quizzes, profile
    app.register_blueprint(classrooms.bp)
    app.register_blueprint(quizzes.bp)
    app.register_blueprint(profile.bp)

    from quizroom import events  # noqa: F401

    return app
