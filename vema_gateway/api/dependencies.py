"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from vema_gateway.domain.models import MemberProfile
from vema_gateway.infrastructure.clients.auth import AuthClient
from vema_gateway.infrastructure.database.repositories import UserRepository
from vema_gateway.infrastructure.database.session import get_db
from vema_gateway.infrastructure.database.store import DocumentStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    """Provide a document store bound to the request's session"""
    return DocumentStore(db)


def get_auth_client() -> AuthClient:
    """Provide auth provider client instance"""
    return AuthClient()


def get_member_or_404(users: UserRepository, user_id: str) -> MemberProfile:
    """Load a member profile, or 404 if the member has no profile yet"""
    profile = users.get_user_by_id(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Member not found")
    return profile
