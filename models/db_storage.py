from os import getenv

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from models.base_model import Base
from models.user import User
from models.refresh_token import RefreshToken
from models.todo import Todo

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///task-tracker.db"

# Map model names for easy querying
classes = {
    "User": User,
    "RefreshToken": RefreshToken,
    "Todo": Todo,
}


class DBStorage:
    __engine = None
    __session = None

    def __init__(self, database_url=None):
        """Initialize engine from an explicit URL or DATABASE_URL"""
        self.__url = None
        self._create_engine(database_url or getenv("DATABASE_URL", DEFAULT_DATABASE_URL))

    def _create_engine(self, url):
        if self.__engine is not None:
            self.__engine.dispose()
        kwargs = {}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise each checkout sees an empty database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        self.__engine = create_engine(url, echo=getenv("SQL_ECHO", "0") == "1", **kwargs)
        self.__url = url
        # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
        if self.__engine.url.get_backend_name() == "sqlite":
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    def reload(self, database_url=None):
        """Create tables and start session; switches engine when a new URL is given"""
        if self.__session is not None:
            self.__session.remove()
        if database_url and database_url != self.__url:
            self._create_engine(database_url)
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def drop_all(self):
        """Drop every table (test teardown)"""
        Base.metadata.drop_all(self.__engine)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session"""
        try:
            self.__session.commit()
        except SQLAlchemyError:
            self.__session.rollback()
            raise

    def delete(self, obj=None):
        """Delete object if exists (hard delete)"""
        if obj:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        if cls in classes.values():
            return self.__session.get(cls, id)
        return None

    def count(self, cls=None):
        """Count objects"""
        if cls:
            return self.__session.query(cls).count()
        total = 0
        for model in classes.values():
            total += self.__session.query(model).count()
        return total

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    # expose the SQLAlchemy session for advanced querying (joins, filters, etc.)
    def get_session(self):
        return self.__session
