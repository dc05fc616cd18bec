from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request

from .gateways.identity import IdentityGateway
from .gateways.tasks import TaskGateway
from .providers.documents import DocumentStore, SqlDocumentStore
from .providers.identity import IdentityProvider, LocalIdentityProvider
from .schemas.user import Principal


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProvider:
    """Single provider per process so auth-state listeners are shared."""
    return LocalIdentityProvider()


@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    return SqlDocumentStore()


def get_identity_gateway(
    provider: IdentityProvider = Depends(get_identity_provider),
    store: DocumentStore = Depends(get_document_store),
) -> IdentityGateway:
    return IdentityGateway(provider, store)


def get_task_gateway(store: DocumentStore = Depends(get_document_store)) -> TaskGateway:
    return TaskGateway(store)


def get_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get("token")


def get_current_principal(
    token: Optional[str] = Depends(get_token),
    identity: IdentityGateway = Depends(get_identity_gateway),
) -> Optional[Principal]:
    """Resolve the caller; ``None`` lets the gateways raise ``Unauthenticated``."""
    return identity.current_user(token)
