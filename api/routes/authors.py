"""
Authors controller: anonymous reads, writes restricted to administrators.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.auth import TokenClaims, require_role
from api.database import get_author_repository
from api.mapping import author_from_create, author_from_update, author_to_response
from api.models import AuthorCreate, AuthorResponse, AuthorUpdate, ErrorResponse
from api.routes import internal_error
from catalog.repository import AuthorRepository
from catalog.users import ADMINISTRATOR
from utilities.logger import ControllerLogger

router = APIRouter(prefix="/api/authors", tags=["Authors"])

CONTROLLER = "Authors"

require_admin = require_role(ADMINISTRATOR)

WRITE_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("", response_model=List[AuthorResponse], responses={500: {"model": ErrorResponse}})
async def get_authors(repo: AuthorRepository = Depends(get_author_repository)):
    """Get all authors."""
    log = ControllerLogger(CONTROLLER, "GetAuthors")
    try:
        log.attempt("Attempted get all authors")
        authors = await repo.find_all()
        response = [author_to_response(author) for author in authors]
        log.success("Successfully got all authors", count=len(response))
        return response
    except Exception as e:
        raise internal_error(log, "Failed to retrieve authors", e)


@router.get(
    "/{author_id}",
    response_model=AuthorResponse,
    responses={404: {"description": "Author not found"}, 500: {"model": ErrorResponse}},
)
async def get_author(author_id: int, repo: AuthorRepository = Depends(get_author_repository)):
    """Get a single author by ID."""
    log = ControllerLogger(CONTROLLER, "GetAuthor")
    try:
        log.attempt("Attempted get author", author_id=author_id)
        author = await repo.find_by_id(author_id)
        if author is None:
            log.warn("Could not find author", author_id=author_id)
            return Response(status_code=status.HTTP_404_NOT_FOUND)

        response = author_to_response(author)
        log.success("Successfully got author", author_id=author_id)
        return response
    except Exception as e:
        raise internal_error(log, "Failed to retrieve author", e)


@router.post("", response_model=AuthorResponse, status_code=status.HTTP_201_CREATED, responses=WRITE_ERRORS)
async def create_author(
    author_dto: AuthorCreate,
    response: Response,
    repo: AuthorRepository = Depends(get_author_repository),
    claims: TokenClaims = Depends(require_admin),
):
    """Create an author (administrators only)."""
    log = ControllerLogger(CONTROLLER, "Create")
    try:
        log.attempt("Attempted to submit author", user_id=claims.uid)
        author = author_from_create(author_dto)

        if not await repo.create(author):
            log.warn("Author create failed")
            raise internal_error(log, "Author create failed")

        log.success("Successfully created author", author_id=author.id,
                    name=f"{author.firstname} {author.lastname}")
        response.headers["Location"] = f"{router.prefix}/{author.id}"
        return author_to_response(author)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Failed to create author", e)


@router.patch("/{author_id}", status_code=status.HTTP_204_NO_CONTENT, responses=WRITE_ERRORS)
async def update_author(
    author_id: int,
    author_dto: AuthorUpdate,
    repo: AuthorRepository = Depends(get_author_repository),
    claims: TokenClaims = Depends(require_admin),
):
    """Update an author (administrators only)."""
    log = ControllerLogger(CONTROLLER, "Update")
    try:
        log.attempt("Attempted to update author", author_id=author_id, user_id=claims.uid)

        if author_id < 1 or author_id != author_dto.id:
            log.warn("Author update ID is invalid", author_id=author_id, body_id=author_dto.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Author ID is invalid or does not match the request body"
            )
        if not await repo.exists(author_id):
            log.warn("Author update target does not exist", author_id=author_id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Author with ID '{author_id}' does not exist"
            )

        if not await repo.update(author_from_update(author_dto)):
            log.warn("Author update failed", author_id=author_id)
            raise internal_error(log, "Author update failed")

        log.success("Successfully updated author", author_id=author_id,
                    name=f"{author_dto.firstname} {author_dto.lastname}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Failed to update author", e)


@router.delete(
    "/{author_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**WRITE_ERRORS, 404: {"description": "Author not found"}},
)
async def delete_author(
    author_id: int,
    repo: AuthorRepository = Depends(get_author_repository),
    claims: TokenClaims = Depends(require_admin),
):
    """
    Delete an author (administrators only).

    Authors still referenced by books cannot be deleted; the store rejects
    the write and the request fails with 500.
    """
    log = ControllerLogger(CONTROLLER, "Delete")
    try:
        log.attempt("Attempted to delete author", author_id=author_id, user_id=claims.uid)

        if author_id < 1:
            log.warn("Author delete ID is invalid", author_id=author_id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Author ID must be positive"
            )

        author = await repo.find_by_id(author_id)
        if author is None:
            log.warn("Could not find author to delete", author_id=author_id)
            return Response(status_code=status.HTTP_404_NOT_FOUND)

        name = f"{author.firstname} {author.lastname}"
        if not await repo.delete(author):
            log.warn("Author delete failed", author_id=author_id)
            raise internal_error(log, "Author delete failed")

        log.success("Successfully deleted author", author_id=author_id, name=name)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Failed to delete author", e)
