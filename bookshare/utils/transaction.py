from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from bookshare.errors import ConflictError


@contextmanager
def atomic(session):
    """Commit everything done in the block, or nothing.

    Any exception rolls the session back and is re-raised. Integrity
    violations mean a concurrent writer won the race and surface as
    ConflictError.
    """
    try:
        yield session
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise ConflictError("The resource was modified concurrently, please retry") from e
    except Exception:
        session.rollback()
        raise
