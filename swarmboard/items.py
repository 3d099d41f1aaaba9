# items.py - pass-through client for the external item API (API Gateway + DynamoDB)

import logging
import threading

import requests

from .config import UNCONFIGURED_API_URL
from .errors import ApiError, NotConfiguredError
from .identity import get_hostname
from .parameters import lookup_parameter

logger = logging.getLogger(__name__)


def resolve_base_url(settings, lookup=lookup_parameter):
    """Env var first, then Parameter Store, else the placeholder sentinel."""
    if settings.api_gateway_url:
        return settings.api_gateway_url.rstrip("/")
    if settings.api_gateway_param:
        value = lookup(settings.api_gateway_param, settings.aws_region)
        if value:
            return value.rstrip("/")
    logger.warning("No API gateway URL configured, item calls will fail")
    return UNCONFIGURED_API_URL


class ItemsClient:
    def __init__(self, settings, session=None, lookup=lookup_parameter):
        self.settings = settings
        self.items_path = "/" + settings.items_path.strip("/")
        self.session = session or requests
        self._lookup = lookup
        self._base_url = None
        self._lock = threading.Lock()

    @property
    def base_url(self):
        # resolved once per process
        with self._lock:
            if self._base_url is None:
                self._base_url = resolve_base_url(self.settings, self._lookup)
            return self._base_url

    @property
    def configured(self):
        return self.base_url != UNCONFIGURED_API_URL

    def call_api(self, endpoint, method="GET", body=None):
        if not self.configured:
            raise NotConfiguredError(
                "API gateway URL is not configured (set API_GATEWAY_URL or API_GATEWAY_PARAM)"
            )
        url = self.base_url + endpoint
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"swarmboard/{get_hostname()}",
        }
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(method, url, headers=headers, json=body)
        except requests.RequestException as e:
            raise ApiError(None, str(e)) from e
        if not 200 <= response.status_code < 300:
            raise ApiError(response.status_code, response.text)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, response.text) from e

    def list_items(self):
        return self.call_api(self.items_path)

    def get_item(self, item_id):
        return self.call_api(f"{self.items_path}/{item_id}")

    def create_item(self, item):
        return self.call_api(self.items_path, "POST", item)

    def update_item(self, item_id, item):
        return self.call_api(f"{self.items_path}/{item_id}", "PUT", item)

    def delete_item(self, item_id):
        return self.call_api(f"{self.items_path}/{item_id}", "DELETE")
