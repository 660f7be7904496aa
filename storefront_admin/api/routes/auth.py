from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront_admin.core.database import get_db
from storefront_admin.core.errors import AuthenticationError
from storefront_admin.models.schemas import LoginRequest, User
from storefront_admin.services.auth_service import AuthService

router = APIRouter()


@router.post("/login", response_model=User)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Check credentials; no session is created"""
    return AuthService(db).authenticate(credentials.username, credentials.password)


@router.get("/me", response_model=User)
def get_current_user():
    # There are no server-side sessions to look the user up from.
    raise AuthenticationError("Not authenticated")
