"""Last-login persistence.

A single-row table (id = 1) upserted on every visit and read back to
greet the next visitor.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from folioshell.domain.models import LoginRecord

logger = logging.getLogger(__name__)

Base = declarative_base()

LAST_LOGIN_ID = 1


class LastLogin(Base):
    __tablename__ = "console_lastlogin"

    id = Column(Integer, primary_key=True)
    request_date = Column(DateTime(timezone=True), nullable=False)
    user_agent = Column(String(255))
    ip = Column(String(64))
    location = Column(String(255))


class LoginStore:
    """SQLAlchemy-backed store for the most recent login."""

    def __init__(self, url: str, **engine_kwargs) -> None:
        self._engine = create_engine(url, **engine_kwargs)
        self._session = sessionmaker(bind=self._engine, expire_on_commit=False)

    def init(self) -> None:
        """Create the table if it does not exist."""
        try:
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as e:
            raise LoginStoreError(f"Cannot initialize login table: {e}") from e

    def save(
        self,
        user_agent: str | None,
        ip: str | None,
        location: str | None,
        when: datetime | None = None,
    ) -> None:
        record = LastLogin(
            id=LAST_LOGIN_ID,
            request_date=when or datetime.now(timezone.utc),
            user_agent=user_agent,
            ip=ip or None,
            location=location or None,
        )
        try:
            with self._session.begin() as session:
                session.merge(record)
        except SQLAlchemyError as e:
            raise LoginStoreError(str(e)) from e
        logger.debug("Saved login from %s", ip or "unknown")

    def last(self) -> LoginRecord | None:
        try:
            with self._session() as session:
                row = session.get(LastLogin, LAST_LOGIN_ID)
                return LoginRecord.model_validate(row) if row is not None else None
        except SQLAlchemyError as e:
            raise LoginStoreError(str(e)) from e

    def close(self) -> None:
        self._engine.dispose()


class LoginStoreError(Exception):
    """Raised when the login table cannot be read or written."""
