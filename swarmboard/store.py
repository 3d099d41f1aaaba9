"""Visit/message store on top of the local SQLite file.

Every function expects to run inside a Flask app context. SQLAlchemy
failures are rolled back and re-raised as StoreError; callers turn that
into a 500.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import wraps

from flask import current_app
from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from .errors import StoreError, ValidationError
from .models import (
    AUTHOR_MAX_CHARS,
    DEFAULT_AUTHOR,
    MESSAGE_MAX_CHARS,
    ContainerStat,
    Message,
    Visit,
    _now,
    db,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
RECENT_MESSAGES = 10


def _store_op(func_):
    @wraps(func_)
    def wrapped(*args, **kwargs):
        try:
            return func_(*args, **kwargs)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Store operation %s failed: %s", func_.__name__, e)
            raise StoreError(f"Database unavailable: {e.__class__.__name__}") from e
    return wrapped


def init_store(app):
    """Create the database file and tables if they do not exist yet."""
    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(uri[len("sqlite:///"):]) or ".", exist_ok=True)
    with app.app_context():
        db.create_all()
    logger.info("Store ready at %s", uri)


def close_store(app):
    with app.app_context():
        db.session.remove()
        db.engine.dispose()
    logger.info("Store closed")


@_store_op
def record_visit(hostname, container_id, ip_address=None, user_agent=None):
    now = _now()
    db.session.add(Visit(
        hostname=hostname,
        container_id=container_id,
        timestamp=now,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512],
    ))
    stmt = sqlite_insert(ContainerStat).values(hostname=hostname, request_count=1, last_seen=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=["hostname"],
        set_={"request_count": ContainerStat.request_count + 1, "last_seen": now},
    )
    db.session.execute(stmt)
    db.session.commit()


def _clean_message(text, author):
    text = (text or "").strip()
    author = (author or "").strip() or DEFAULT_AUTHOR
    if not text:
        raise ValidationError("Message cannot be empty")
    if len(text) > MESSAGE_MAX_CHARS:
        raise ValidationError(f"Message cannot exceed {MESSAGE_MAX_CHARS} characters")
    if len(author) > AUTHOR_MAX_CHARS:
        raise ValidationError(f"Author cannot exceed {AUTHOR_MAX_CHARS} characters")
    return text, author


@_store_op
def add_message(text, author=None, hostname=None, container_id=None):
    text, author = _clean_message(text, author)
    msg = Message(message=text, author=author, hostname=hostname, container_id=container_id)
    db.session.add(msg)
    db.session.commit()
    return msg.to_dict()


def clamp_limit(limit):
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


@_store_op
def list_messages(limit=DEFAULT_LIMIT):
    rows = (
        Message.query
        .order_by(Message.timestamp.desc(), Message.id.desc())
        .limit(clamp_limit(limit))
        .all()
    )
    return [m.to_dict() for m in rows]


@_store_op
def delete_message(message_id):
    deleted = Message.query.filter_by(id=message_id).delete()
    db.session.commit()
    return deleted > 0


@_store_op
def count_messages():
    return db.session.query(func.count(Message.id)).scalar()


# ---------- Stats ----------

def _total_visits():
    return db.session.query(func.count(Visit.id)).scalar() or 0


def _visits_by_container():
    visits = func.count(Visit.id)
    rows = (
        db.session.query(Visit.hostname, visits)
        .group_by(Visit.hostname)
        .order_by(visits.desc())
        .all()
    )
    return [{"hostname": hostname, "visits": count} for hostname, count in rows]


def _recent_messages():
    return list_messages(RECENT_MESSAGES)


def _container_stats():
    rows = ContainerStat.query.order_by(ContainerStat.request_count.desc()).all()
    return [s.to_dict() for s in rows]


_STATS_QUERIES = {
    "total_visits": _total_visits,
    "visits_by_container": _visits_by_container,
    "recent_messages": _recent_messages,
    "container_stats": _container_stats,
}


def get_stats():
    """Run the four aggregate queries side by side and merge the results."""
    app = current_app._get_current_object()

    def run(query):
        # each worker gets its own app context, hence its own session
        with app.app_context():
            try:
                return query()
            except SQLAlchemyError as e:
                raise StoreError(f"Database unavailable: {e.__class__.__name__}") from e

    with ThreadPoolExecutor(max_workers=len(_STATS_QUERIES)) as pool:
        futures = {key: pool.submit(run, query) for key, query in _STATS_QUERIES.items()}
        return {key: future.result() for key, future in futures.items()}
