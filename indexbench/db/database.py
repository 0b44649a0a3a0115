from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from indexbench.config import settings
from alembic import command
from alembic.config import Config
import logging
import os
import time

logger = logging.getLogger(__name__)


def make_engine(database_url: str, **overrides):
    """Create an engine with the pool and timeout settings for the given backend"""
    url = make_url(database_url)
    options = {
        "echo": settings.sql_echo,
        "pool_pre_ping": True,
    }
    if url.get_backend_name() == "postgresql":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            connect_args={
                "connect_timeout": settings.db_connect_timeout,
            },
        )
    options.update(overrides)
    return create_engine(database_url, **options)


Base = declarative_base()


def session_factory(bind):
    """Sessions that only write when told to commit"""
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


def _display_url(database_url: str) -> str:
    # Never log credentials
    return make_url(database_url).render_as_string(hide_password=True)


def wait_for_database(database_url: str = None, max_retries: int = 30, retry_delay: float = 2) -> bool:
    """Wait for database to be available with retry logic"""
    database_url = database_url or settings.database_url
    logger.info(f"Waiting for database connection to {_display_url(database_url)}...")

    for attempt in range(1, max_retries + 1):
        test_engine = make_engine(database_url)
        try:
            with test_engine.connect() as conn:
                result = conn.execute(text("SELECT 1"))
                result.fetchone()
            logger.info("Database connection successful")
            return True
        except Exception as e:
            if attempt < max_retries:
                logger.warning(f"Database connection attempt {attempt}/{max_retries} failed: {e}. Retrying in {retry_delay}s...")
                time.sleep(retry_delay)
            else:
                logger.error(f"Database connection failed after {max_retries} attempts: {e}")
                raise
        finally:
            test_engine.dispose()
    return False


# indexbench/db/database.py -> <project root>
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def find_alembic_ini() -> str:
    """Locate alembic.ini in the working directory or the project root"""
    current_dir = os.getcwd()

    alembic_ini_path = "alembic.ini"
    if not os.path.exists(alembic_ini_path):
        alembic_ini_path = os.path.join(PROJECT_ROOT, "alembic.ini")

    if not os.path.exists(alembic_ini_path):
        raise FileNotFoundError(
            f"Could not find alembic.ini. Current directory: {current_dir}, "
            f"Tried: alembic.ini and {alembic_ini_path}"
        )
    return alembic_ini_path


def _alembic_config(database_url: str) -> Config:
    alembic_ini_path = find_alembic_ini()
    logger.info(f"Using Alembic config: {os.path.abspath(alembic_ini_path)}")

    alembic_cfg = Config(alembic_ini_path)
    # ConfigParser treats % as interpolation
    alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def run_migrations(database_url: str) -> None:
    """Upgrade the schema to the latest Alembic revision"""
    alembic_cfg = _alembic_config(database_url)

    logger.info("Starting Alembic migration to head...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed successfully")


def stamp_head(database_url: str) -> None:
    """Record the latest revision without running migrations"""
    command.stamp(_alembic_config(database_url), "head")
    logger.info("Stamped database schema at Alembic head")


def create_schema(bind) -> None:
    """Create all mapped tables and indexes that do not exist yet"""
    # Register the mappings on Base.metadata
    import indexbench.models  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database schema created from model metadata")


def init_db(database_url: str = None, use_migrations: bool = None, max_retries: int = 30, retry_delay: float = 2) -> None:
    """Wait for the database, then bring the schema up to date"""
    database_url = database_url or settings.database_url
    if use_migrations is None:
        use_migrations = settings.run_migrations

    wait_for_database(database_url, max_retries=max_retries, retry_delay=retry_delay)

    try:
        if use_migrations:
            logger.info("Running database migrations...")
            run_migrations(database_url)
        else:
            schema_engine = make_engine(database_url)
            try:
                create_schema(schema_engine)
            finally:
                schema_engine.dispose()
            # A later migration run must not recreate these tables
            stamp_head(database_url)
    except Exception as e:
        logger.error(f"Error initializing database schema: {e}", exc_info=True)
        raise
