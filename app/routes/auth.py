from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    GoogleLogin,
    UserResponse,
    TokenResponse,
)
from app.services.auth_service import AuthService
from app.utils.dependencies import get_current_user
from app.models.user import User

# Define router
router = APIRouter(prefix="/auth", tags=["Authentication"])

# Register a new user
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user with email and password"""
    return AuthService.register_user(db, user_data)

# Login endpoint
@router.post("/login", response_model=TokenResponse)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with email and password"""
    return AuthService.login_user(db, credentials)

# Google sign-in
@router.post("/google", response_model=TokenResponse)
def google_login(payload: GoogleLogin, db: Session = Depends(get_db)):
    """
    Sign in with a Google ID token

    - **credential**: ID token returned by Google Identity Services
    """
    return AuthService.login_with_google(db, payload.credential)

# Get current authenticated user
@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user"""
    return current_user
