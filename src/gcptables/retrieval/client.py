"""Cloud Functions REST client."""

import json
from typing import Any, Dict, Iterator, Optional

import requests
from pydantic import ValidationError

from gcptables.config.loader import Settings
from gcptables.errors import FormatError, NotFoundError, TransientError
from gcptables.models import CloudFunction, ListFunctionsPage, Policy
from gcptables.table.context import QueryContext
from gcptables.utils.logging import get_logger

logger = get_logger(__name__)


class CloudFunctionsClient:
    """
    Thin client over the Cloud Functions v1 REST API.

    One instance (and its requests.Session) is shared by every worker of a
    query. Retries are left to the transport. Request failures surface as
    NotFoundError (HTTP 404) or TransientError (anything else); a payload that
    does not decode into its model raises FormatError.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or Settings()
        self.endpoint = self.settings.api_endpoint
        self.timeout = self.settings.timeout_seconds
        self.page_size = self.settings.page_size
        self.session = session or requests.Session()

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }
        if self.settings.access_token:
            headers["Authorization"] = f"Bearer {self.settings.access_token}"
        return headers

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        GET a path relative to the API endpoint and decode the JSON body.

        Returns:
            Decoded body, or None when the response body is empty

        Raises:
            NotFoundError: On HTTP 404
            TransientError: On any other HTTP, transport or decoding failure
        """
        url = self.endpoint + path
        try:
            response = self.session.get(
                url,
                params=params,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            if status_code == 404:
                raise NotFoundError(f"Resource not found: {path}") from e
            raise TransientError(f"Request to {url} failed with status {status_code}: {e}") from e
        except requests.RequestException as e:
            raise TransientError(f"Request to {url} failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransientError(f"Failed to parse response from {url}: {e}") from e

    def list_function_pages(self, parent: str, context: QueryContext) -> Iterator[ListFunctionsPage]:
        """
        Yield successive pages of functions under parent until exhausted.

        Args:
            parent: Scope such as "projects/p1/locations/-"
            context: Query context; cancellation is checked before each page
        """
        page_token: Optional[str] = None
        page_number = 0
        while True:
            context.raise_if_cancelled()
            params: Dict[str, Any] = {}
            if self.page_size:
                params["pageSize"] = self.page_size
            if page_token:
                params["pageToken"] = page_token

            body = self._get_json(f"{parent}/functions", params=params) or {}
            try:
                page = ListFunctionsPage.model_validate(body)
            except ValidationError as e:
                raise FormatError(f"Failed to decode list response for {parent}: {e}", body) from e

            page_number += 1
            logger.debug(f"Fetched page {page_number} of {parent}: {len(page.functions)} functions")
            if page.unreachable:
                logger.warning(f"Locations unreachable while listing {parent}: {', '.join(page.unreachable)}")

            yield page

            if not page.next_page_token:
                return
            page_token = page.next_page_token

    def list_functions(self, parent: str, context: QueryContext) -> Iterator[CloudFunction]:
        """Yield every function under parent in the order the API returns them."""
        for page in self.list_function_pages(parent, context):
            yield from page.functions

    def get_function(self, name: str, context: QueryContext) -> CloudFunction:
        """
        Fetch one function by its fully-qualified name.

        Raises:
            NotFoundError: If the function does not exist
            TransientError: On any other request failure, or an empty body
            FormatError: If the body does not decode into a CloudFunction
        """
        context.raise_if_cancelled()
        logger.debug(f"Getting function {name}")
        body = self._get_json(name)
        if body is None:
            raise TransientError(f"Empty response for function {name}")
        try:
            return CloudFunction.model_validate(body)
        except ValidationError as e:
            raise FormatError(f"Failed to decode function {name}: {e}", body) from e

    def get_iam_policy(self, name: str, context: QueryContext) -> Optional[Policy]:
        """
        Fetch the IAM policy of a function.

        Returns:
            The decoded Policy, or None when the API returns an empty body
        """
        context.raise_if_cancelled()
        logger.debug(f"Getting IAM policy for {name}")
        body = self._get_json(f"{name}:getIamPolicy")
        if body is None:
            return None
        try:
            return Policy.model_validate(body)
        except ValidationError as e:
            raise FormatError(f"Failed to decode IAM policy for {name}: {e}", body) from e
