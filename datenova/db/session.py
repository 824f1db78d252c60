from sqlalchemy import event
from sqlmodel import SQLModel, create_engine, Session
from datenova.core.config import settings

# Module-level singletons: one tunnel and one engine per process
_tunnel = None
_engine = None

MYSQL_PORT = 3306


def _enable_sqlite_foreign_keys(engine) -> None:
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(db_url: str, **kwargs):
    is_sqlite = db_url.startswith("sqlite")
    # SQLite connections are shared with the threadpool running sync endpoints
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(db_url, connect_args=connect_args, **kwargs)
    if is_sqlite:
        _enable_sqlite_foreign_keys(engine)
    return engine


def _open_tunnel():
    """Start (once) the SSH tunnel to the remote MySQL host."""
    global _tunnel
    if _tunnel is None:
        from sshtunnel import SSHTunnelForwarder

        _tunnel = SSHTunnelForwarder(
            (settings.SSH_HOST, 22),
            ssh_username=settings.SSH_USER,
            ssh_password=settings.SSH_PASSWORD,
            remote_bind_address=(settings.DB_HOST, MYSQL_PORT),
            set_keepalive=60,
        )
        _tunnel.start()
    return _tunnel


def database_url() -> str:
    """
    Resolve the connection URL.

    Order: SSH-tunnelled MySQL when USE_SSH is set, then DATABASE_URL, then a
    local SQLite file.
    """
    if settings.USE_SSH:
        port = _open_tunnel().local_bind_port
        return (
            f"mysql+pymysql://{settings.DB_USER}:{settings.DB_PASSWORD}"
            f"@127.0.0.1:{port}/{settings.DB_NAME}"
        )
    return settings.DATABASE_URL or "sqlite:///./datenova.db"


def get_engine():
    global _engine
    if _engine is None:
        url = database_url()
        options = {"pool_pre_ping": True} if url.startswith("mysql") else {}
        _engine = build_engine(url, **options)
    return _engine


engine = get_engine()


def init_db(target_engine=None) -> None:
    # Importing the models registers every table on SQLModel.metadata
    import datenova.models  # noqa: F401

    SQLModel.metadata.create_all(target_engine or engine)


def get_db():
    with Session(engine) as session:
        yield session
