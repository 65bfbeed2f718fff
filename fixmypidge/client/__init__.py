"""Async client for the FixMyPidge API."""

from fixmypidge.client.base import ApiClient
from fixmypidge.client.case_store import CaseSyncStore
from fixmypidge.client.session import ANONYMOUS, ClientSession, bootstrap_session

__all__ = ["ANONYMOUS", "ApiClient", "CaseSyncStore", "ClientSession", "bootstrap_session"]
