import os
import urllib.parse
import logging
from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine, text, inspect
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from employee_server.errors import log_db_error

load_dotenv()

# Database configuration (env defaults)
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "auth_db")
DB_PORT = int(os.getenv("DB_PORT", 3306))
DB_DRIVER = os.getenv("DB_DRIVER", "mysql+pymysql")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

password_enc = urllib.parse.quote_plus(DB_PASSWORD)
SQLALCHEMY_DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"{DB_DRIVER}://{DB_USER}:{password_enc}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# The engine connects lazily, so importing this module never touches the network.
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    echo=False,
    pool_size=DB_POOL_SIZE,
    max_overflow=DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

Base = declarative_base()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ping(db: Session) -> None:
    """Round-trip a trivial query over a pooled connection. Raises on failure."""
    db.execute(text("SELECT 1"))


def check_connection(bind=None) -> None:
    """
    Borrow one connection from the pool and run SELECT 1 on it.

    Any error is fatal: it is logged with full driver detail and the process
    exits, so the server never starts against an unreachable database.
    """
    bind = bind if bind is not None else engine
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        log_db_error(logger, "Database connection error", e)
        raise SystemExit(1)
    logger.info("Connected to database %s", bind.url.render_as_string(hide_password=True))


# ---------------------------------------------------------------------------
# init_db: make sure the employees table (and its profile_image column) exist
# ---------------------------------------------------------------------------

def init_db(bind=None) -> None:
    """
    Bring the employees table into shape. Safe to run on every startup.

    - table missing: CREATE TABLE with the full column set
    - table present without profile_image: ALTER TABLE ... ADD COLUMN

    The users table belongs to the login server and is never created here.
    """
    # imported here so Base.metadata knows the schema without a circular import
    from employee_server.models.employee_model import Employee

    bind = bind if bind is not None else engine
    try:
        inspector = inspect(bind)
        if not inspector.has_table(Employee.__tablename__):
            logger.info("Creating employees table...")
            with bind.begin() as conn:
                Employee.__table__.create(bind=conn)
            logger.info("Employees table created successfully.")
            return

        columns = {c["name"] for c in inspector.get_columns(Employee.__tablename__)}
        if "profile_image" not in columns:
            logger.info("Adding profile_image column to employees table...")
            with bind.begin() as conn:
                conn.execute(text("ALTER TABLE employees ADD COLUMN profile_image VARCHAR(255)"))
            logger.info("profile_image column added successfully.")
    except Exception as e:
        log_db_error(logger, "Error initializing database", e)
        raise SystemExit(1)
