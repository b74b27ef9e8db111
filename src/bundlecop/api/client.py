"""Simple client for submitting readings to the tracking API."""

from typing import Any, Dict, Optional

import requests

from ..models import Reading


DEFAULT_TIMEOUT = 30


class ApiError(Exception):
    """Raised when the API rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ReadingsApiClient:
    """Client for the readings endpoint of the tracking API."""

    def __init__(self, api_url: str, project_key: str, timeout: float = DEFAULT_TIMEOUT):
        """Initialize the API client.

        Args:
            api_url (str): Base URL of the API, without trailing ``/reading``.
            project_key (str): Key that authenticates us for a project.
            timeout (float, optional): Request timeout in seconds.
        """
        self.api_url = api_url.rstrip("/")
        self.project_key = project_key
        self.timeout = timeout
        self.session = requests.Session()

    def submit_reading(self, reading: Reading) -> Dict[str, Any]:
        """Submit a reading.

        Args:
            reading (Reading): The reading to submit.

        Returns:
            Dict[str, Any]: The decoded response body, empty if there is none.

        Raises:
            ApiError: If the API responds with an error status.
            requests.RequestException: If the request fails.
        """
        url = f"{self.api_url}/reading"
        headers = {
            'Content-Type': 'application/json',
            'Authentication': self.project_key,
        }
        response = self.session.post(
            url, json=reading.to_payload(), headers=headers, timeout=self.timeout
        )

        if not response.ok:
            raise ApiError(
                f"API failed with status code: {response.status_code}, {self._extract_error(response)}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    def _extract_error(self, response: requests.Response) -> str:
        """Get the error message from an error response.

        The API sends ``{"error": "..."}``; anything else is returned as text.
        """
        try:
            data = response.json()
        except ValueError:
            return response.text

        if isinstance(data, dict) and "error" in data:
            return str(data["error"])
        return response.text
