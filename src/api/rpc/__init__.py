"""
gRPC adapter package.

Exposes the registry as emaillist.MailingListService.
"""

from src.api.rpc.client import MailingListClient
from src.api.rpc.service import SERVICE_NAME, MailingListService, add_to_server

__all__ = ["SERVICE_NAME", "MailingListClient", "MailingListService", "add_to_server"]
