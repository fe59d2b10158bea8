from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from .config import Settings
from .database import create_db_engine, create_session_factory
from .security import TokenService


@dataclass(frozen=True)
class AppContext:
    """Everything a request needs that outlives the request."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    tokens: TokenService


def build_context(settings: Settings) -> AppContext:
    engine = create_db_engine(settings.database_url)
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        tokens=TokenService(
            settings.secret_key,
            algorithm=settings.algorithm,
            expire_minutes=settings.access_token_expire_minutes,
        ),
    )
