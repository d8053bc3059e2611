from oauth_sqlstore.db.base import Base
from oauth_sqlstore.db.rows import TableRows
from oauth_sqlstore.db.session import async_session_maker, create_engine, drop_db, engine, init_db

__all__ = ["Base", "TableRows", "async_session_maker", "create_engine", "drop_db", "engine", "init_db"]
