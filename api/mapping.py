"""
Conversions between the HTTP models and the catalog entities.

One function per direction and shape, copying fields explicitly.
"""

from catalog.models import Author, Book

from api.models import (
    AuthorCreate, AuthorResponse, AuthorUpdate,
    BookCreate, BookResponse, BookUpdate,
)


def author_from_create(dto: AuthorCreate) -> Author:
    return Author(firstname=dto.firstname, lastname=dto.lastname, bio=dto.bio)


def author_from_update(dto: AuthorUpdate) -> Author:
    return Author(id=dto.id, firstname=dto.firstname, lastname=dto.lastname, bio=dto.bio)


def author_to_response(author: Author) -> AuthorResponse:
    return AuthorResponse(
        id=author.id,
        firstname=author.firstname,
        lastname=author.lastname,
        bio=author.bio,
    )


def book_from_create(dto: BookCreate) -> Book:
    return Book(
        title=dto.title,
        year=dto.year,
        isbn=dto.isbn,
        summary=dto.summary,
        image=dto.image,
        price=dto.price,
        author_id=dto.author_id,
    )


def book_from_update(dto: BookUpdate) -> Book:
    return Book(
        id=dto.id,
        title=dto.title,
        year=dto.year,
        isbn=dto.isbn,
        summary=dto.summary,
        image=dto.image,
        price=dto.price,
        author_id=dto.author_id,
    )


def book_to_response(book: Book) -> BookResponse:
    return BookResponse(
        id=book.id,
        title=book.title,
        year=book.year,
        isbn=book.isbn,
        summary=book.summary,
        image=book.image,
        price=book.price,
        author_id=book.author_id,
        author=author_to_response(book.author) if book.author is not None else None,
    )
