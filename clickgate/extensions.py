from sqlalchemy.orm import declarative_base, scoped_session, sessionmaker

Base = declarative_base()

def init_db_session(engine):
    """Return a scoped DB session registry bound to engine."""
    return scoped_session(sessionmaker(bind=engine))
