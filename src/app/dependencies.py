from fastapi import HTTPException, Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
import os
import secrets
from typing import Optional
from dotenv import load_dotenv

from src.services.identity_store import IdentityStore
from src.services.registration_service import RegistrationService

# Load environment variables
load_dotenv()

security = HTTPBasic(auto_error=False)

def get_store(request: Request) -> IdentityStore:
    """The identity store the running app was built with"""
    return request.app.state.store

def get_registration_service(store: IdentityStore = Depends(get_store)) -> RegistrationService:
    return RegistrationService(store)

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": 'Basic realm="Admin"'},
    )

async def verify_admin(credentials: Optional[HTTPBasicCredentials] = Depends(security)):
    """
    Verify HTTP Basic credentials against ADMIN_USERNAME / ADMIN_PASSWORD
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        raise _unauthorized("Admin access is not configured")

    username_ok = secrets.compare_digest(credentials.username.encode(), admin_username.encode())
    password_ok = secrets.compare_digest(credentials.password.encode(), admin_password.encode())
    if not (username_ok and password_ok):
        raise _unauthorized("Invalid credentials")

    return credentials.username

# Create a dependency that can be used in route decorators
admin_dependency = Depends(verify_admin)
