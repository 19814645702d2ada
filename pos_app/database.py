"""Database configuration and initialization."""
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = scoped_session(sessionmaker(autocommit=False, autoflush=False))


def init_db(app):
    """Initialize database connection."""
    global engine

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine_options = {
        'echo': app.config.get('SQLALCHEMY_ECHO', False),
        'pool_pre_ping': True,  # Enable connection health checks
    }
    if not database_uri.startswith('sqlite'):
        engine_options.update(
            pool_size=app.config.get('DB_POOL_SIZE', 10),
            max_overflow=app.config.get('DB_MAX_OVERFLOW', 20),
            pool_timeout=app.config.get('DB_POOL_TIMEOUT', 10),
        )
    else:
        engine_options['connect_args'] = {
            'check_same_thread': False,
            'timeout': app.config.get('DB_POOL_TIMEOUT', 10),
        }

    if engine is not None:
        engine.dispose()
    engine = create_engine(database_uri, **engine_options)

    if engine.dialect.name == 'sqlite':
        _configure_sqlite(engine)

    db_session.remove()
    db_session.configure(bind=engine)

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def _configure_sqlite(sqlite_engine):
    """Enforce foreign keys and take the write lock when a transaction starts (unless begun as a reader)."""

    @event.listens_for(sqlite_engine, 'connect')
    def do_connect(dbapi_connection, connection_record):
        # pysqlite emits its own deferred BEGIN otherwise
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    @event.listens_for(sqlite_engine, 'begin')
    def do_begin(conn):
        mode = conn.get_execution_options().get('sqlite_begin', 'IMMEDIATE')
        conn.exec_driver_sql(f'BEGIN {mode}')


def begin_read_only(session):
    """
    Start the session's transaction as a reader.

    On SQLite this is a deferred BEGIN, so list and report queries do not
    queue behind the write lock held by a checkout. Other backends ignore
    the option. No-op when a transaction is already open.
    """
    if not session.in_transaction():
        session.connection(execution_options={'sqlite_begin': 'DEFERRED'})


def create_schema():
    """Create all tables that do not exist yet."""
    # Import models so they register on Base.metadata
    from pos_app import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_schema():
    """Drop all tables (used by tests)."""
    from pos_app import models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def ping():
    """Execute a trivial query against the store."""
    session = get_session()
    return session.execute(text("SELECT 1")).scalar()


def get_session():
    """Get database session."""
    return db_session


# Alias for easier imports
db = db_session


def translate_db_error(error, message=None):
    """Map a SQLAlchemy error onto the application's storage taxonomy."""
    from sqlalchemy.exc import IntegrityError, OperationalError, InterfaceError, TimeoutError as PoolTimeoutError
    from pos_app.exceptions import StorageUnavailable, ConstraintViolation

    if isinstance(error, IntegrityError):
        return ConstraintViolation(message or 'Constraint violation', cause=error.orig or error)
    if isinstance(error, (OperationalError, InterfaceError, PoolTimeoutError)):
        return StorageUnavailable(message or 'Storage unavailable', cause=error)
    return error
