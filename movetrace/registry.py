"""Aptos fullnode client that reads package metadata from on-chain registries."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

import requests

from . import config
from .errors import MetadataLookupError, NotFoundInRegistry
from .models import PackageMetadata, parse_package_id

logger = logging.getLogger(__name__)

REGISTRY_RESOURCE = "0x1::code::PackageRegistry"


class MetadataProvider(Protocol):
    """Anything that can answer ``fetch(package_id, network)``."""

    def fetch(self, package_id: str, network: str) -> PackageMetadata:
        ...


class AptosRegistryClient:
    """Reads ``0x1::code::PackageRegistry`` resources over the REST API.

    One HTTP session is shared by all networks; node URLs can be
    overridden per network (e.g. to point at a private fullnode).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        node_urls: Optional[Dict[str, str]] = None,
        timeout: int = config.REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.node_urls = {**config.NODE_URLS, **(node_urls or {})}
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def node_url(self, network: str) -> str:
        if network not in self.node_urls:
            raise ValueError(
                f"Unknown network '{network}'. Expected one of: {', '.join(self.node_urls)}"
            )
        return self.node_urls[network].rstrip("/")

    def fetch(self, package_id: str, network: str) -> PackageMetadata:
        pid = parse_package_id(package_id)
        url = f"{self.node_url(network)}/accounts/{pid.address}/resource/{REGISTRY_RESOURCE}"
        logger.debug("Fetching package metadata for %s on %s", package_id, network)

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise MetadataLookupError(
                f"Could not reach {network} node for '{package_id}': {exc}",
                package_id=package_id,
            ) from exc

        if response.status_code == 404:
            raise MetadataLookupError(
                f"Package not found on {network}: address {pid.address} has no package registry.",
                package_id=package_id,
            )
        if not response.ok:
            raise MetadataLookupError(
                f"Registry lookup for '{package_id}' failed with HTTP {response.status_code}: "
                f"{response.text[:200]}",
                package_id=package_id,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise MetadataLookupError(
                f"Registry response for '{package_id}' is not valid JSON.",
                package_id=package_id,
            ) from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        packages = data.get("packages") if isinstance(data, dict) else None
        if not isinstance(packages, list):
            raise MetadataLookupError(
                f"Registry response for '{package_id}' has no package list.",
                package_id=package_id,
            )

        for entry in packages:
            if entry.get("name") == pid.name:
                return PackageMetadata.from_dict(pid.address, entry)

        raise NotFoundInRegistry(package_id, [entry.get("name", "?") for entry in packages])

    def close(self) -> None:
        self.session.close()
