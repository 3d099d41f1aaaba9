# models.py
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

MESSAGE_MAX_CHARS = 500
AUTHOR_MAX_CHARS = 30
DEFAULT_AUTHOR = "Anonymous"


def _now():
    return datetime.now(timezone.utc)


def iso(ts):
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.isoformat()


class Visit(db.Model):
    __tablename__ = "visits"
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    hostname = db.Column(db.String(255), index=True, nullable=False)
    container_id = db.Column(db.String(64))
    timestamp = db.Column(db.DateTime, default=_now, nullable=False)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(512))


class Message(db.Model):
    __tablename__ = "messages"
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    message = db.Column(db.String(MESSAGE_MAX_CHARS), nullable=False)
    author = db.Column(db.String(AUTHOR_MAX_CHARS), default=DEFAULT_AUTHOR, nullable=False)
    hostname = db.Column(db.String(255))
    container_id = db.Column(db.String(64))
    timestamp = db.Column(db.DateTime, default=_now, index=True, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "message": self.message,
            "author": self.author,
            "hostname": self.hostname,
            "container_id": self.container_id,
            "timestamp": iso(self.timestamp),
        }


class ContainerStat(db.Model):
    __tablename__ = "container_stats"
    id = db.Column(db.Integer, primary_key=True)
    hostname = db.Column(db.String(255), unique=True, nullable=False)
    request_count = db.Column(db.Integer, default=0, nullable=False)
    last_seen = db.Column(db.DateTime, default=_now, nullable=False)

    def to_dict(self):
        return {
            "hostname": self.hostname,
            "request_count": self.request_count,
            "last_seen": iso(self.last_seen),
        }
