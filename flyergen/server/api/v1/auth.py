"""
Authentication Endpoints.

Registration, login and logout. Login returns a session token in the body
and also sets it as the ``session`` cookie, so both browser and API clients
can authenticate.
"""

from fastapi import APIRouter, HTTPException, Response, status

from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories import UserRepository
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import LoginRequest, RegisterRequest, TokenResponse, UserRead
from flyergen.server.core import constant
from flyergen.server.core.config import settings
from flyergen.server.services.deps import SessionDep
from flyergen.server.services.security import create_access_token, hash_password, verify_password

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user account with a unique username and e-mail address.",
    responses={
        201: {"description": "Account created"},
        400: {"description": "Invalid username, e-mail or password, or username or e-mail already in use"},
    },
)
async def register(payload: RegisterRequest, session: SessionDep) -> UserRead:
    """
    Register a new account.

    New accounts start with the USER role and the free credit allotment.
    """
    users = UserRepository(session)
    email = payload.email.lower()
    if await users.get_by_email(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    if await users.get_by_username(payload.username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")

    user = await users.create(
        User(
            name=payload.name,
            username=payload.username,
            email=email,
            password_hash=hash_password(payload.password),
        )
    )
    logger.info(f"Registered user {user.id} ({user.username})")
    return UserRead.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    description="Exchange an e-mail address or username and a password for a session token.",
    responses={
        200: {"description": "Logged in; the token is also set as the session cookie"},
        401: {"description": "Invalid credentials"},
    },
)
async def login(payload: LoginRequest, response: Response, session: SessionDep) -> TokenResponse:
    """
    Log in.

    The identifier is matched against both the e-mail address and the username.
    """
    user = await UserRepository(session).get_by_login(payload.identifier.strip())
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_access_token(user.id)
    response.set_cookie(
        constant.SESSION_COOKIE_NAME,
        token,
        max_age=settings.auth.token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    logger.info(f"User {user.id} logged in")
    return TokenResponse(access_token=token, user=UserRead.model_validate(user))


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log Out",
    description="Clear the session cookie.",
)
async def logout(response: Response) -> None:
    """Log out by deleting the session cookie."""
    response.delete_cookie(constant.SESSION_COOKIE_NAME)
