"""Python client for the StudyGroup API."""

from app.client.api import ClientError, StudyGroupClient
from app.client.session import ClientSession

__all__ = ["ClientError", "ClientSession", "StudyGroupClient"]
