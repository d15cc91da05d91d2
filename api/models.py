"""
API models and schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthorBase(BaseModel):
    """Fields shared by every author shape."""
    firstname: str = Field(..., min_length=1, max_length=100, description="Author first name")
    lastname: str = Field(..., min_length=1, max_length=100, description="Author last name")
    bio: Optional[str] = Field(None, max_length=250, description="Short biography")


class AuthorCreate(AuthorBase):
    """Request body for creating an author."""


class AuthorUpdate(AuthorBase):
    """Request body for updating an author; ``id`` must match the path."""
    id: int = Field(..., description="Author identifier")


class AuthorResponse(AuthorBase):
    """Author response model for API."""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Author identifier")


class BookBase(BaseModel):
    """Fields shared by every book shape."""
    title: str = Field(..., min_length=1, max_length=50, description="Book title")
    year: Optional[int] = Field(None, ge=0, le=9999, description="Publication year")
    isbn: str = Field(..., min_length=1, max_length=32, description="ISBN")
    summary: Optional[str] = Field(None, max_length=500, description="Short summary")
    image: Optional[str] = Field(None, max_length=1024, description="Cover image path")
    price: Optional[float] = Field(None, ge=0, description="Price")
    author_id: int = Field(..., gt=0, description="Identifier of the book's author")


class BookCreate(BookBase):
    """Request body for creating a book."""


class BookUpdate(BookBase):
    """Request body for updating a book; ``id`` must match the path."""
    id: int = Field(..., description="Book identifier")


class BookResponse(BookBase):
    """Book response model for API."""
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Book identifier")
    author: Optional[AuthorResponse] = Field(None, description="The book's author")


class UserCredentials(BaseModel):
    """Register and login request body."""
    email_address: EmailStr = Field(..., description="Email address, used as the username")
    password: str = Field(..., min_length=6, max_length=15,
                          description="Password, between 6 and 15 characters")


class RegisterResponse(BaseModel):
    succeeded: bool = Field(..., description="Whether the user was created")


class TokenResponse(BaseModel):
    token: str = Field(..., description="Signed JSON Web Token")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[Any] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
