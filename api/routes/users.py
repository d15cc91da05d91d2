"""
Users controller: registration and login issuing bearer tokens.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.auth import TokenIssuer, get_token_issuer
from api.database import get_user_store
from api.models import ErrorResponse, RegisterResponse, TokenResponse, UserCredentials
from api.routes import internal_error
from catalog.users import UserStore
from utilities.logger import ControllerLogger

router = APIRouter(prefix="/api/users", tags=["Users"])

CONTROLLER = "Users"


@router.post(
    "/Register",
    response_model=RegisterResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def register(credentials: UserCredentials, store: UserStore = Depends(get_user_store)):
    """
    Register a new user.

    Failure reasons (weak password, address already taken) are logged but
    not returned to the caller.
    """
    log = ControllerLogger(CONTROLLER, "Register")
    try:
        log.attempt("Registration attempted")
        result = await store.create(credentials.email_address, credentials.password)

        if not result.succeeded:
            log.warn("User registration refused", reasons=result.errors)
            raise internal_error(log, "User registration failed")

        log.success("User registered")
        return RegisterResponse(succeeded=result.succeeded)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "User registration failed", e)


@router.post(
    "/Login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def login(
    credentials: UserCredentials,
    store: UserStore = Depends(get_user_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Verify credentials and return a signed token."""
    log = ControllerLogger(CONTROLLER, "Login")
    try:
        log.attempt("Login attempted")
        user = await store.verify(credentials.email_address, credentials.password)

        if user is None:
            log.warn("Login failed: invalid credentials")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        token = issuer.generate(user, await store.get_roles(user))
        log.success("User logged in", user_id=user.id)
        return TokenResponse(token=token)
    except HTTPException:
        raise
    except Exception as e:
        raise internal_error(log, "Login failed", e)
