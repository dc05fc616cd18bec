"""Seed a demo account: demo@example.com / password."""
import logging

from taskbook.database import create_tables
from taskbook.dependencies import get_document_store, get_identity_provider
from taskbook.errors import AlreadyExists
from taskbook.gateways.identity import IdentityGateway

logging.basicConfig(level=logging.INFO)

# Create tables if not exist
create_tables()

identity = IdentityGateway(get_identity_provider(), get_document_store())

try:
    user = identity.register("Demo User", "demo@example.com", "password")
except AlreadyExists:
    print("User already exists")
else:
    print(f"Demo user created: {user.email} / password (id {user.user_id})")
