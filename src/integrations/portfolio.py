"""Portfolio blog API integration: config and admin API client.

Provides the existing-post summaries that steer brainstorming and the
publish call the CLI makes once a payload has been reviewed.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from pydantic import BaseModel

from blogwriter.blog.models import Blog, BlogPayload, BlogSummary

logger = logging.getLogger(__name__)

BLOGS_PATH = "/api/admin/blogs"


class PortfolioAPIError(Exception):
    """Raised when the blog API rejects a request."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class PortfolioConfig(BaseModel):
    """Configuration for the portfolio blog API."""

    url: str = ""
    api_key: str = ""


class PortfolioAPIClient:
    """Client for the portfolio admin blog API.

    Bearer-token authentication, JSON bodies via urllib.
    """

    def __init__(self, config: PortfolioConfig, timeout: int = 30) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")
        self.timeout = timeout

    def _auth_headers(self) -> dict[str, str]:
        if not self.config.api_key:
            raise PortfolioAPIError(401, "No API key configured.")
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        data: dict[str, Any] | None = None,
        *,
        action: str,
    ) -> dict[str, Any]:
        """Make an authenticated request and decode the JSON body."""
        url = f"{self.base_url}{path}"
        body = json.dumps(data).encode("utf-8") if data is not None else None
        req = urllib.request.Request(
            url,
            data=body,
            method=method,
            headers=self._auth_headers(),
        )

        logger.debug("%s %s", method, url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            raise PortfolioAPIError(exc.code, f"Failed to {action}: {exc.code}") from exc
        except urllib.error.URLError as exc:
            raise PortfolioAPIError(0, f"Failed to {action}: {exc.reason}") from exc
        except OSError as exc:
            # Read timeouts surface as TimeoutError, not URLError
            raise PortfolioAPIError(0, f"Failed to {action}: {exc}") from exc

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PortfolioAPIError(
                0, f"Failed to {action}: response was not JSON (check the API URL)"
            ) from exc

    def fetch_blogs(self) -> list[Blog]:
        """Fetch every post, published or not."""
        result = self._request("GET", BLOGS_PATH, action="fetch blogs")
        return [Blog.model_validate(item) for item in result.get("blogs", [])]

    def fetch_blog_summaries(self) -> list[BlogSummary]:
        """Title/excerpt/tags of every existing post."""
        return [blog.to_summary() for blog in self.fetch_blogs()]

    def create_blog(self, payload: BlogPayload) -> Blog:
        """Create a post from a validated payload.

        Returns:
            The stored post as returned by the API.
        """
        result = self._request("POST", BLOGS_PATH, payload.to_api_dict(), action="create blog")
        blog = Blog.model_validate(result["blog"])
        logger.info("Created blog post '%s'", blog.title)
        return blog
