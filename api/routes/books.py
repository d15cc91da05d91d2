"""
Books controller: read access for everyone, writes for authenticated users.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.auth import TokenClaims, require_user
from api.database import get_book_repository
from api.mapping import book_from_create, book_from_update, book_to_response
from api.models import BookCreate, BookResponse, BookUpdate, ErrorResponse
from api.routes import internal_error
from catalog.repository import BookRepository
from utilities.logger import ControllerLogger

router = APIRouter(prefix="/api/books", tags=["Books"])

CONTROLLER = "Books"


@router.get(
    "",
    response_model=List[BookResponse],
    responses={500: {"model": ErrorResponse}},
)
async def get_books(repo: BookRepository = Depends(get_book_repository)):
    """Get all books."""
    log = ControllerLogger(CONTROLLER, "GetBooks")
    try:
        log.attempt("Attempted get all books")
        books = await repo.find_all()
        response = [book_to_response(book) for book in books]
        log.success("Successfully got all books", count=len(response))
        return response
    except Exception as e:
        raise internal_error(log, "Failed to retrieve books", e)


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={404: {"description": "Book not found"}, 500: {"model": ErrorResponse}},
)
async def get_book(book_id: int, repo: BookRepository = Depends(get_book_repository)):
    """
    Get a single book by ID.

    - **book_id**: Book identifier
    """
    log = ControllerLogger(CONTROLLER, "GetBook")
    try:
        log.attempt("Attempted get book", book_id=book_id)
        book = await repo.find_by_id(book_id)
        if book is None:
            log.warn("Could not find book", book_id=book_id)
            return Response(status_code=status.HTTP_404_NOT_FOUND)

        response = book_to_response(book)
        log.success("Successfully got book", book_id=book_id)
        return response
    except Exception as e:
        raise internal_error(log, "Failed to retrieve book", e)


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
               500: {"model": ErrorResponse}},
)
async def create_book(
    book_dto: BookCreate,
    response: Response,
    repo: BookRepository = Depends(get_book_repository),
    claims: TokenClaims = Depends(require_user),
):
    """Create a book. The response carries the generated id."""
    log = ControllerLogger(CONTROLLER, "Create")
    try:
        log.attempt("Attempted to submit book", user_id=claims.uid)
        book = book_from_create(book_dto)

        if not await repo.create(book):
            log.warn("Book create failed", title=book_dto.title)
            raise internal_error(log, "Book create failed")

        log.success("Successfully created book", book_id=book.id, title=book.title)
        response.headers["Location"] = f"{router.prefix}/{book.id}"
        return book_to_response(book)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Failed to create book", e)


@router.patch(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
               500: {"model": ErrorResponse}},
)
async def update_book(
    book_id: int,
    book_dto: BookUpdate,
    repo: BookRepository = Depends(get_book_repository),
    claims: TokenClaims = Depends(require_user),
):
    """
    Update a book.

    - **book_id**: must be positive and equal to the body's ``id``
    """
    log = ControllerLogger(CONTROLLER, "Update")
    try:
        log.attempt("Attempted to update book", book_id=book_id, user_id=claims.uid)

        if book_id < 1 or book_id != book_dto.id:
            log.warn("Book update ID is invalid", book_id=book_id, body_id=book_dto.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Book ID is invalid or does not match the request body"
            )
        if not await repo.exists(book_id):
            log.warn("Book update target does not exist", book_id=book_id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Book with ID '{book_id}' does not exist"
            )

        book = book_from_update(book_dto)
        if not await repo.update(book):
            log.warn("Book update failed", book_id=book_id)
            raise internal_error(log, "Book update failed")

        log.success("Successfully updated book", book_id=book_id, title=book_dto.title)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Failed to update book", e)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
               404: {"description": "Book not found"}, 500: {"model": ErrorResponse}},
)
async def delete_book(
    book_id: int,
    repo: BookRepository = Depends(get_book_repository),
    claims: TokenClaims = Depends(require_user),
):
    """Delete a book."""
    log = ControllerLogger(CONTROLLER, "Delete")
    try:
        log.attempt("Attempted to delete book", book_id=book_id, user_id=claims.uid)

        if book_id < 1:
            log.warn("Book delete ID is invalid", book_id=book_id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Book ID must be positive"
            )

        book = await repo.find_by_id(book_id)
        if book is None:
            log.warn("Could not find book to delete", book_id=book_id)
            return Response(status_code=status.HTTP_404_NOT_FOUND)

        title = book.title
        if not await repo.delete(book):
            log.warn("Book delete failed", book_id=book_id)
            raise internal_error(log, "Book delete failed")

        log.success("Successfully deleted book", book_id=book_id, title=title)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Failed to delete book", e)
