"""
SQLAlchemy entities for the bookstore catalog and its user identities.
Books reference their Author by foreign key; users carry a set of named roles.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for all catalog tables."""
    pass


class Author(Base):
    """Author of one or more books."""
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firstname: Mapped[str] = mapped_column(String(100), nullable=False)
    lastname: Mapped[str] = mapped_column(String(100), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(String(250), nullable=True)

    def __repr__(self) -> str:
        return f"<Author id={self.id} {self.firstname} {self.lastname}>"


class Book(Base):
    """Catalog entry for a single book."""
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    isbn: Mapped[str] = mapped_column(String(32), nullable=False)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    # Deleting a referenced author is rejected by the store
    author_id: Mapped[int] = mapped_column(
        ForeignKey("authors.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Loaded eagerly so async sessions never trigger a lazy load
    author: Mapped[Optional[Author]] = relationship(Author, lazy="selectin")

    def __repr__(self) -> str:
        return f"<Book id={self.id} title={self.title!r}>"


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """Named role assigned to users, e.g. ``Administrator``."""
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class User(Base):
    """User identity; the email address doubles as the username."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    roles: Mapped[List[Role]] = relationship(Role, secondary=user_roles, lazy="selectin")

    @property
    def role_names(self) -> List[str]:
        return sorted(role.name for role in self.roles)
