"""Bitbucket and GitHub API client implementation."""

import json
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urljoin

import aiohttp
import requests
from loguru import logger
from pydantic import BaseModel

from ..config.config import BitbucketConfig, GitHubConfig
from .exceptions import (
    APIError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
)

USER_AGENT = 'bitbucket-migrate/0.1.0'


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    status_code: int
    data: Any
    headers: Dict[str, str]
    success: bool


class APIClient:
    """REST API client bound to a base URL and credentials."""

    connection_endpoint = '/user'

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[Tuple[str, str]] = None,
        timeout: int = 30,
    ):
        """Initialize API client.

        Args:
            base_url: API base URL every endpoint is resolved against
            headers: Extra headers sent with every request
            auth: Optional (username, password) pair for basic authentication
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.auth = auth
        self.timeout = timeout
        self.headers = {'Content-Type': 'application/json', 'User-Agent': USER_AGENT}
        self.headers.update(headers or {})

        self.session = requests.Session()
        self.session.headers.update(self.headers)
        if auth:
            self.session.auth = auth

        self.logger = logger.bind(component=self.__class__.__name__)

    def _build_url(self, endpoint: str) -> str:
        """Build full API URL from endpoint.

        Args:
            endpoint: API endpoint path

        Returns:
            Full API URL
        """
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    def _raise_for_status(
        self,
        method: str,
        url: str,
        status_code: int,
        headers: Dict[str, str],
        data: Any,
        payload: Any = None,
    ) -> None:
        """Log and raise the matching exception for an error response.

        Raises:
            APIError: For any status code of 400 and above
        """
        if status_code < 400:
            return

        message = f'{method} {url} failed with HTTP {status_code}'
        self.logger.bind(
            details=data, payload=payload, status_code=status_code
        ).error(f'{message}: {data!r}')

        kwargs = {'status_code': status_code, 'response_data': data, 'payload': payload}

        if status_code == 429:
            retry_after = int(headers.get('Retry-After', 60))
            raise RateLimitError(
                f'Rate limit exceeded. Retry after {retry_after} seconds',
                retry_after=retry_after,
                **kwargs,
            )

        if status_code == 401:
            raise AuthenticationError('Authentication failed', **kwargs)

        if status_code == 403:
            raise ForbiddenError('Permission denied', **kwargs)

        if status_code == 404:
            raise NotFoundError('Resource not found', **kwargs)

        if isinstance(data, dict) and data.get('message'):
            detail = data['message']
        elif isinstance(data, dict) and isinstance(data.get('error'), dict):
            detail = data['error'].get('message', f'HTTP {status_code}')
        else:
            detail = f'HTTP {status_code}'

        raise APIError(f'API request failed: {detail}', **kwargs)

    def _handle_response(
        self, response: requests.Response, payload: Any = None
    ) -> APIResponse:
        """Handle API response and convert to standard format.

        Args:
            response: Raw HTTP response
            payload: Request body that was sent

        Returns:
            Standardized API response

        Raises:
            APIError: For various API errors
        """
        headers = dict(response.headers)

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        self._raise_for_status(
            response.request.method if response.request else 'REQUEST',
            response.url,
            response.status_code,
            headers,
            data,
            payload,
        )

        return APIResponse(
            status_code=response.status_code,
            data=data,
            headers=headers,
            success=200 <= response.status_code < 300,
        )

    def _request(self, method: str, endpoint: str, **kwargs) -> APIResponse:
        """Make synchronous API request."""
        url = self._build_url(endpoint)

        try:
            response = self.session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            self.logger.error(f'Network error during {method} request: {e}')
            raise APIError(f'Network error: {e}')

        return self._handle_response(response, kwargs.get('json'))

    async def _make_request_async(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> APIResponse:
        """Make asynchronous API request.

        Args:
            method: HTTP method
            endpoint: API endpoint
            params: Query parameters
            data: Request body data

        Returns:
            API response
        """
        url = self._build_url(endpoint)
        auth = aiohttp.BasicAuth(*self.auth) if self.auth else None
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with aiohttp.ClientSession(
            headers=self.headers, auth=auth, timeout=timeout
        ) as session:
            try:
                async with session.request(
                    method=method, url=url, params=params, json=data
                ) as response:
                    response_headers = dict(response.headers)

                    response_text = await response.text()
                    try:
                        response_data = (
                            json.loads(response_text) if response_text else None
                        )
                    except ValueError:
                        response_data = response_text

                    self._raise_for_status(
                        method,
                        url,
                        response.status,
                        response_headers,
                        response_data,
                        data,
                    )

                    return APIResponse(
                        status_code=response.status,
                        data=response_data,
                        headers=response_headers,
                        success=200 <= response.status < 300,
                    )

            except aiohttp.ClientError as e:
                self.logger.error(f'Network error during {method} request: {e}')
                raise APIError(f'Network error: {e}', payload=data)

    def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make GET request."""
        return self._request('GET', endpoint, params=params)

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> APIResponse:
        """Make POST request."""
        return self._request('POST', endpoint, json=data)

    def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> APIResponse:
        """Make PUT request."""
        return self._request('PUT', endpoint, json=data)

    def patch(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make PATCH request."""
        return self._request('PATCH', endpoint, json=data)

    def delete(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make DELETE request."""
        return self._request('DELETE', endpoint, params=params)

    async def get_async(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make asynchronous GET request.

        Args:
            endpoint: API endpoint
            params: Query parameters

        Returns:
            API response
        """
        return await self._make_request_async('GET', endpoint, params=params)

    async def post_async(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make asynchronous POST request.

        Args:
            endpoint: API endpoint
            data: Request body data

        Returns:
            API response
        """
        return await self._make_request_async('POST', endpoint, data=data)

    async def put_async(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make asynchronous PUT request.

        Args:
            endpoint: API endpoint
            data: Request body data

        Returns:
            API response
        """
        return await self._make_request_async('PUT', endpoint, data=data)

    async def patch_async(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make asynchronous PATCH request.

        Args:
            endpoint: API endpoint
            data: Request body data

        Returns:
            API response
        """
        return await self._make_request_async('PATCH', endpoint, data=data)

    async def delete_async(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> APIResponse:
        """Make asynchronous DELETE request.

        Args:
            endpoint: API endpoint
            params: Query parameters

        Returns:
            API response
        """
        return await self._make_request_async('DELETE', endpoint, params=params)

    def test_connection(self) -> bool:
        """Test the credentials against the provider.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            response = self.get(self.connection_endpoint)
            return response.success
        except APIError as e:
            self.logger.error(f'Connection test failed: {e}')
            return False

    def close(self):
        """Close the client session."""
        self.session.close()
        self.logger.debug('Client session closed')

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class BitbucketClient(APIClient):
    """Bitbucket Cloud API client using app-password authentication."""

    def __init__(self, config: BitbucketConfig):
        self.config = config
        super().__init__(
            config.api_url,
            auth=(config.username, config.password),
            timeout=config.timeout,
        )


class GitHubClient(APIClient):
    """GitHub REST API client using token authentication."""

    def __init__(self, config: GitHubConfig):
        self.config = config
        super().__init__(
            config.api_url,
            headers={
                'Authorization': f'Bearer {config.token}',
                'Accept': 'application/vnd.github+json',
            },
            timeout=config.timeout,
        )
