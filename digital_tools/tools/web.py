"""
Web tools - fetch URLs and extract readable content from HTML.
"""

import json
import logging
from html.parser import HTMLParser
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import aiohttp

from .base import ParamSpec, Tool, ToolSpec

logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD")

_SKIP_TAGS = {"script", "style", "noscript", "template"}
_BLOCK_TAGS = {
    "p", "div", "br", "li", "ul", "ol", "tr", "table", "section", "article",
    "header", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "blockquote",
}


def _http_settings(timeout: Optional[float]) -> Dict[str, Any]:
    from ..config import get_config
    config = get_config()
    return {
        "timeout": aiohttp.ClientTimeout(total=timeout or config.http_timeout_seconds),
        "headers": {"User-Agent": config.user_agent},
    }


async def fetch_url(
    url: str,
    method: str = "GET",
    headers: Optional[Dict[str, str]] = None,
    body: Any = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Perform one HTTP request.

    Non-2xx responses are returned with ``ok`` false. Connection errors
    and timeouts raise.
    """
    settings = _http_settings(timeout)
    request_kwargs: Dict[str, Any] = {"headers": headers or {}}
    if isinstance(body, (dict, list)):
        request_kwargs["json"] = body
    elif body is not None:
        request_kwargs["data"] = str(body)

    async with aiohttp.ClientSession(**settings) as session:
        async with session.request(method.upper(), url, **request_kwargs) as response:
            content_type = response.headers.get("Content-Type", "")
            text = await response.text(errors="replace")

            payload: Any = text
            if "json" in content_type and text:
                try:
                    payload = json.loads(text)
                except json.JSONDecodeError:
                    logger.debug(f"Response from {url} claims JSON but does not parse")

            logger.info(f"{method.upper()} {url} -> {response.status}")
            return {
                "url": str(response.url),
                "status": response.status,
                "ok": 200 <= response.status < 300,
                "headers": dict(response.headers),
                "content_type": content_type,
                "body": payload,
            }


class _ContentExtractor(HTMLParser):
    """Collects title, visible text, links and images from HTML."""

    def __init__(self, base_url: Optional[str] = None):
        super().__init__(convert_charrefs=True)
        self.base_url = base_url
        self.title = ""
        self.links: List[str] = []
        self.images: List[str] = []
        self._chunks: List[str] = []
        self._skip_depth = 0
        self._in_title = False

    def _resolve(self, ref: str) -> str:
        return urljoin(self.base_url, ref) if self.base_url else ref

    def handle_starttag(self, tag, attrs):
        attributes = dict(attrs)
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
        elif tag == "title":
            self._in_title = True
        elif tag == "a" and attributes.get("href"):
            self.links.append(self._resolve(attributes["href"]))
        elif tag == "img" and attributes.get("src"):
            self.images.append(self._resolve(attributes["src"]))

        if tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag in _SKIP_TAGS and self._skip_depth:
            self._skip_depth -= 1
        elif tag == "title":
            self._in_title = False
        if tag in _BLOCK_TAGS:
            self._chunks.append("\n")

    def handle_data(self, data):
        if self._skip_depth:
            return
        if self._in_title:
            self.title += data
            return
        self._chunks.append(data)

    @property
    def text(self) -> str:
        lines = (" ".join(line.split()) for line in "".join(self._chunks).splitlines())
        return "\n".join(line for line in lines if line)


def extract_content(html: str, base_url: Optional[str] = None) -> Dict[str, Any]:
    """Extract title, text, links and images from an HTML document."""
    parser = _ContentExtractor(base_url=base_url)
    parser.feed(html)
    parser.close()
    return {
        "title": parser.title.strip(),
        "text": parser.text,
        "links": parser.links,
        "images": parser.images,
    }


# === Fetch ===

class FetchUrlTool(Tool):
    """Fetch a URL over HTTP."""

    spec = ToolSpec(
        id="web.fetch",
        name="Fetch URL",
        description="Fetch content from a URL",
        category="web",
        subcategory="fetch",
        parameters=(
            ParamSpec("url", "string", "URL to fetch"),
            ParamSpec("method", "string", "HTTP method", required=False, default="GET",
                      enum=HTTP_METHODS),
            ParamSpec("headers", "object", "Request headers", required=False),
            ParamSpec("body", "any", "Request body (objects are sent as JSON)", required=False),
            ParamSpec("timeout", "number", "Timeout in seconds", required=False),
        ),
        tags=("http", "fetch", "web"),
    )

    async def execute(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        timeout: Optional[float] = None,
        **kwargs
    ) -> Dict[str, Any]:
        return await fetch_url(url, method=method, headers=headers, body=body, timeout=timeout)


# === Parse HTML ===

class ParseHtmlTool(Tool):
    """Extract text, links and images from HTML."""

    spec = ToolSpec(
        id="web.parse-html",
        name="Parse HTML",
        description="Extract text, links and images from HTML",
        category="web",
        subcategory="scrape",
        parameters=(
            ParamSpec("html", "string", "HTML to parse"),
            ParamSpec("base_url", "string", "Base URL for resolving relative links", required=False),
        ),
        tags=("html", "parse", "scrape"),
        idempotent=True,
    )

    def execute(self, html: str, base_url: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        return extract_content(html, base_url=base_url)


# === Read ===

class ReadUrlTool(Tool):
    """Fetch a page and return its readable content."""

    spec = ToolSpec(
        id="web.read",
        name="Read URL",
        description="Fetch a web page and extract its readable text",
        category="web",
        subcategory="fetch",
        parameters=(
            ParamSpec("url", "string", "URL to read"),
            ParamSpec("timeout", "number", "Timeout in seconds", required=False),
        ),
        tags=("http", "read", "content"),
        idempotent=True,
    )

    async def execute(self, url: str, timeout: Optional[float] = None, **kwargs) -> Dict[str, Any]:
        response = await fetch_url(url, timeout=timeout)
        body = response["body"]

        if "html" in response["content_type"] and isinstance(body, str):
            content = extract_content(body, base_url=response["url"])
            return {
                "url": response["url"],
                "status": response["status"],
                "title": content["title"],
                "content": content["text"],
                "links": content["links"],
            }

        if not isinstance(body, str):
            body = json.dumps(body, indent=2)

        return {
            "url": response["url"],
            "status": response["status"],
            "title": "",
            "content": body,
            "links": [],
        }


WEB_TOOLS = [
    FetchUrlTool,
    ParseHtmlTool,
    ReadUrlTool,
]
