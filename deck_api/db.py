"""
Database abstraction for Postgres and an in-memory test implementation.
"""

from __future__ import annotations

import itertools
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    String,
    create_engine,
    delete,
    event,
    select,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from deck_api.errors import BackendError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class DbClient(Protocol):
    """Interface for the deck and asset tables."""

    def list_decks(self) -> list["DeckRecord"]:
        ...

    def create_deck(self, title: str) -> "DeckRecord":
        ...

    def update_deck(self, deck_id: str, title: str) -> Optional["DeckRecord"]:
        ...

    def delete_deck(self, deck_id: str) -> None:
        ...

    def list_assets(self, deck_id: str) -> list["AssetRecord"]:
        ...

    def insert_assets(self, assets: list["NewAsset"]) -> list["AssetRecord"]:
        ...

    def get_asset_storage_path(self, asset_id: str) -> Optional[str]:
        ...

    def delete_asset(self, asset_id: str) -> None:
        ...


@dataclass
class DeckRecord:
    id: str
    title: str
    created_at: datetime


@dataclass
class NewAsset:
    """Asset metadata to insert; the backend assigns the id."""

    deck_id: str
    title: Optional[str]
    storage_path: str
    public_url: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class AssetRecord:
    id: str
    deck_id: str
    title: Optional[str]
    storage_path: str
    public_url: str
    created_at: datetime


class InMemoryDbClient:
    """Simple in-memory database for development and tests.

    Mirrors the constraints the real schema declares: assets must reference an
    existing deck and are removed together with it.
    """

    def __init__(self):
        self.decks: Dict[str, DeckRecord] = {}
        self.assets: Dict[str, AssetRecord] = {}
        # Insertion order breaks created_at ties.
        self._seq = itertools.count()
        self._order: Dict[str, int] = {}

    def _remember(self, record_id: str) -> None:
        self._order[record_id] = next(self._seq)

    def list_decks(self) -> list[DeckRecord]:
        return sorted(
            self.decks.values(),
            key=lambda d: (d.created_at, self._order[d.id]),
            reverse=True,
        )

    def create_deck(self, title: str) -> DeckRecord:
        record = DeckRecord(id=_new_id(), title=title, created_at=_utcnow())
        self.decks[record.id] = record
        self._remember(record.id)
        return record

    def update_deck(self, deck_id: str, title: str) -> Optional[DeckRecord]:
        deck = self.decks.get(deck_id)
        if not deck:
            return None
        deck.title = title
        return deck

    def delete_deck(self, deck_id: str) -> None:
        if self.decks.pop(deck_id, None) is None:
            return
        for asset_id in [
            a.id for a in self.assets.values() if a.deck_id == deck_id
        ]:
            del self.assets[asset_id]

    def list_assets(self, deck_id: str) -> list[AssetRecord]:
        return sorted(
            (a for a in self.assets.values() if a.deck_id == deck_id),
            key=lambda a: (a.created_at, self._order[a.id]),
        )

    def insert_assets(self, assets: list[NewAsset]) -> list[AssetRecord]:
        # All-or-nothing, like a single multi-row INSERT.
        for asset in assets:
            if asset.deck_id not in self.decks:
                raise BackendError(
                    f'insert on table "assets" violates foreign key constraint: '
                    f"deck {asset.deck_id!r} does not exist"
                )
        inserted = []
        for asset in assets:
            record = AssetRecord(
                id=_new_id(),
                deck_id=asset.deck_id,
                title=asset.title,
                storage_path=asset.storage_path,
                public_url=asset.public_url,
                created_at=asset.created_at,
            )
            self.assets[record.id] = record
            self._remember(record.id)
            inserted.append(record)
        return inserted

    def get_asset_storage_path(self, asset_id: str) -> Optional[str]:
        asset = self.assets.get(asset_id)
        return asset.storage_path if asset else None

    def delete_asset(self, asset_id: str) -> None:
        self.assets.pop(asset_id, None)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES/ON DELETE CASCADE unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class PostgresDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    Every SQLAlchemy failure is re-raised as BackendError carrying the driver's message.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for PostgresDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self.Session() as session:
                yield session
        except SQLAlchemyError as exc:
            raise BackendError.from_exception(exc) from exc

    def _to_deck_record(self, row: "DeckRow") -> DeckRecord:
        return DeckRecord(id=row.id, title=row.title, created_at=row.created_at)

    def _to_asset_record(self, row: "AssetRow") -> AssetRecord:
        return AssetRecord(
            id=row.id,
            deck_id=row.deck_id,
            title=row.title,
            storage_path=row.storage_path,
            public_url=row.public_url,
            created_at=row.created_at,
        )

    def list_decks(self) -> list[DeckRecord]:
        with self._session() as session:
            stmt = select(DeckRow).order_by(DeckRow.created_at.desc())
            rows = session.execute(stmt).scalars().all()
            return [self._to_deck_record(row) for row in rows]

    def create_deck(self, title: str) -> DeckRecord:
        with self._session() as session:
            row = DeckRow(id=_new_id(), title=title, created_at=_utcnow())
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_deck_record(row)

    def update_deck(self, deck_id: str, title: str) -> Optional[DeckRecord]:
        with self._session() as session:
            row = session.get(DeckRow, deck_id)
            if not row:
                return None
            row.title = title
            session.commit()
            session.refresh(row)
            return self._to_deck_record(row)

    def delete_deck(self, deck_id: str) -> None:
        # A core DELETE so the database's ON DELETE CASCADE removes the assets.
        with self._session() as session:
            session.execute(delete(DeckRow).where(DeckRow.id == deck_id))
            session.commit()

    def list_assets(self, deck_id: str) -> list[AssetRecord]:
        with self._session() as session:
            stmt = (
                select(AssetRow)
                .where(AssetRow.deck_id == deck_id)
                .order_by(AssetRow.created_at.asc())
            )
            rows = session.execute(stmt).scalars().all()
            return [self._to_asset_record(row) for row in rows]

    def insert_assets(self, assets: list[NewAsset]) -> list[AssetRecord]:
        with self._session() as session:
            rows = [
                AssetRow(
                    id=_new_id(),
                    deck_id=asset.deck_id,
                    title=asset.title,
                    storage_path=asset.storage_path,
                    public_url=asset.public_url,
                    created_at=asset.created_at,
                )
                for asset in assets
            ]
            session.add_all(rows)
            session.commit()
            return [self._to_asset_record(row) for row in rows]

    def get_asset_storage_path(self, asset_id: str) -> Optional[str]:
        with self._session() as session:
            stmt = select(AssetRow.storage_path).where(AssetRow.id == asset_id)
            return session.execute(stmt).scalar_one_or_none()

    def delete_asset(self, asset_id: str) -> None:
        with self._session() as session:
            session.execute(delete(AssetRow).where(AssetRow.id == asset_id))
            session.commit()


Base = declarative_base()


class DeckRow(Base):
    __tablename__ = "decks"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)


class AssetRow(Base):
    __tablename__ = "assets"

    id = Column(String, primary_key=True)
    deck_id = Column(
        String,
        ForeignKey("decks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String, nullable=True)
    storage_path = Column(String, nullable=False)
    public_url = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
