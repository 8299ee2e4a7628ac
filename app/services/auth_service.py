from sqlalchemy.orm import Session
from app.models.user import User
from app.schemas.auth import UserRegister, UserLogin
from app.services.exceptions import Conflict, Unauthorized
from app.utils.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    create_access_token,
    hash_password,
    verify_password,
)
from fastapi import HTTPException, status
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from datetime import timedelta
import os
import logging
from typing import cast

logger = logging.getLogger(__name__)
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")

class AuthService:
    @staticmethod
    def register_user(db: Session, user_data: UserRegister) -> User:
        # Check existing email
        existing_user = db.query(User).filter(User.email == user_data.email).first()
        if existing_user:
            raise Conflict("Email already registered")

        if user_data.username:
            taken = db.query(User).filter(User.username == user_data.username).first()
            if taken:
                raise Conflict("Username already taken")

        # Create user
        new_user = User(
            email=user_data.email,
            username=user_data.username,
            password_hash=hash_password(user_data.password),
            name=user_data.name
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        logger.info(f"Registered user {new_user.id}")
        return new_user

    @staticmethod
    def _issue_token(user: User) -> dict:
        if not cast(bool, user.is_active):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

        access_token = create_access_token(
            data={"sub": user.email, "user_id": user.id},
            expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        )

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            "user": user
        }

    @staticmethod
    def login_user(db: Session, credentials: UserLogin) -> dict:
        # Find user
        user = db.query(User).filter(User.email == credentials.email).first()

        if not user:
            logger.warning(f"Login failed: User not found with email {credentials.email}")
            raise Unauthorized("Incorrect email or password")

        # Google-provisioned accounts have no password to check against
        if not verify_password(credentials.password, user.password_hash):
            logger.warning(f"Login failed: Incorrect password for email {credentials.email}")
            raise Unauthorized("Incorrect email or password")

        return AuthService._issue_token(user)

    @staticmethod
    def verify_google_token(credential: str) -> dict:
        """Verify a Google ID token and return its claims"""
        if not GOOGLE_CLIENT_ID:
            logger.error("GOOGLE_CLIENT_ID is not configured")
            raise Unauthorized("Google sign-in is not available")
        try:
            return id_token.verify_oauth2_token(credential, google_requests.Request(), GOOGLE_CLIENT_ID)
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning(f"Google sign-in failed: {str(e)}")
            raise Unauthorized("Invalid Google token")

    @staticmethod
    def login_with_google(db: Session, credential: str) -> dict:
        """
        Sign in with a Google ID token.
        First sign-in with an unseen email creates the account with no password.
        """
        claims = AuthService.verify_google_token(credential)
        email = claims.get("email")
        if not email or not claims.get("email_verified", True):
            raise Unauthorized("Google account has no verified email")

        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = User(
                email=email,
                name=claims.get("name"),
                password_hash="",
                image=claims.get("picture"),
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info(f"Provisioned user {user.id} from Google sign-in")

        return AuthService._issue_token(user)
