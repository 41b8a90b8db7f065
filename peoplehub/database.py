from sqlmodel import SQLModel, create_engine

from peoplehub.config import get_settings

DATABASE_URL = get_settings().database_url

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args)

def init_db(bind=None):
    # Table classes must be imported before create_all sees them
    import peoplehub.models  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)
