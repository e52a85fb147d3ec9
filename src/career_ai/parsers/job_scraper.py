"""Job Scraper - fetches a job posting URL and extracts the description.

The page is fetched over plain HTTP (no JS rendering), stripped to text and
handed to Claude, which keeps only the posting itself. Every failure comes
back as a ScrapingResult carrying a hint to paste the description manually.
"""

from __future__ import annotations

import asyncio
import logging
import re
from html import unescape
from typing import Awaitable, Callable
from urllib.parse import urlparse

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_incrementing,
)

from career_ai.clients.llm_client import LLMClient, get_llm_client
from career_ai.config import get_config
from career_ai.errors import APIError, QuotaExceededError, RateLimitError
from career_ai.logging.models import OperationType
from career_ai.models.match import ScrapingResult
from career_ai.utils.url_validator import validate_url

logger = logging.getLogger(__name__)

# Boards that block bots or need a login
BLOCKED_DOMAINS = (
    "linkedin.com",
    "indeed.com",
    "glassdoor.com",
    "monster.com",
    "ziprecruiter.com",
)
RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})
BLOCKED_PAGE_MARKERS = ("captcha", "access denied", "please verify")
MIN_PAGE_CHARS = 500
MAX_PAGE_TEXT_CHARS = 15000

USER_AGENT = "Mozilla/5.0 (compatible; JobTrackerBot/1.0; +https://jobtracker.app)"

UNSUPPORTED_MESSAGE = (
    "This job board requires manual copy-paste. "
    "Please add the job description in the field below."
)
BLOCKED_MESSAGE = "Couldn't auto-fetch job description (access blocked). Please paste it manually."
TIMEOUT_MESSAGE = "Request timed out. Please paste the job description manually."
NETWORK_MESSAGE = "Network error. Please check your connection or paste manually."
INVALID_URL_MESSAGE = "Invalid job URL. Please check the URL or paste manually."
EXTRACTION_MESSAGE = "Failed to extract job description. Please paste manually."
UNEXPECTED_MESSAGE = "Unexpected error occurred. Please paste the description manually."

SYSTEM_PROMPT = """\
Extract the job description from this webpage text.

Focus on:
- Job title and company
- Job requirements (required skills, years of experience, education)
- Responsibilities and duties
- Qualifications and preferred skills
- Company description (brief)

Ignore:
- Navigation menus, footers, ads
- Application instructions
- Other job listings on the page
- Legal disclaimers

Return only the cleaned job description text (max 2000 words)."""

_SCRIPT_RE = re.compile(r"<script\b.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style\b.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_html(html: str) -> str:
    """Visible text of an HTML page on a single line."""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = unescape(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def is_unsupported_board(hostname: str) -> bool:
    hostname = hostname.lower().rstrip(".")
    return any(hostname == d or hostname.endswith("." + d) for d in BLOCKED_DOMAINS)


def looks_blocked(html: str) -> bool:
    """True for bot walls and near-empty pages."""
    if len(html) < MIN_PAGE_CHARS:
        return True
    lowered = html.lower()
    return any(marker in lowered for marker in BLOCKED_PAGE_MARKERS)


def _failed(error: str) -> ScrapingResult:
    return ScrapingResult(source="failed", error=error)


def _retryable_response(response: httpx.Response) -> bool:
    return response.status_code in RETRYABLE_STATUS


def _last_outcome(retry_state: RetryCallState):
    # Out of attempts: hand back the last response, or re-raise the last error
    return retry_state.outcome.result()


class JobScraper:
    def __init__(
        self,
        llm: LLMClient,
        model: str = "claude-haiku-4-5-20251001",
        *,
        timeout: float = 10.0,
        attempts: int = 2,
        retry_delay: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
        url_validator: Callable[[str], str] = validate_url,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.llm = llm
        self.model = model
        self.timeout = timeout
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.transport = transport
        self.url_validator = url_validator
        self._sleep = sleep

    async def scrape(self, url: str, user_id: str) -> ScrapingResult:
        """Fetch `url` and return the extracted job description.

        Never raises; failures are reported through the result's source
        and error fields.
        """
        try:
            return await self._scrape(url.strip(), user_id)
        except httpx.TimeoutException:
            logger.warning("Timed out fetching job page %s", url)
            return _failed(TIMEOUT_MESSAGE)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError) as exc:
            logger.warning("Rejected job URL %s: %s", url, exc)
            return _failed(INVALID_URL_MESSAGE)
        except httpx.TransportError as exc:
            logger.warning("Network error fetching job page %s: %s", url, exc)
            return _failed(NETWORK_MESSAGE)
        except (RateLimitError, QuotaExceededError) as exc:
            return _failed(exc.message)
        except APIError as exc:
            logger.error("Job description extraction failed: %s", exc.message)
            return _failed(EXTRACTION_MESSAGE)
        except Exception:
            logger.error("Unexpected error scraping %s", url, exc_info=True)
            return _failed(UNEXPECTED_MESSAGE)

    async def _scrape(self, url: str, user_id: str) -> ScrapingResult:
        hostname = urlparse(url).hostname
        if not hostname:
            raise ValueError(f"No hostname in URL: {url!r}")
        if is_unsupported_board(hostname):
            logger.info("Skipping unsupported job board %s", hostname)
            return ScrapingResult(source="unsupported", error=UNSUPPORTED_MESSAGE)

        response = await self._fetch(url)
        if not response.is_success:
            return _failed(
                f"Failed to fetch job page (HTTP {response.status_code}). "
                "Please paste the description manually."
            )

        html = response.text
        if looks_blocked(html):
            logger.info("Job page %s looks blocked (%d chars)", url, len(html))
            return _failed(BLOCKED_MESSAGE)

        page_text = strip_html(html)[:MAX_PAGE_TEXT_CHARS]
        description = await self._extract(page_text, hostname, user_id)
        return ScrapingResult(description=description, source="scraped")

    async def _check_request(self, request: httpx.Request) -> None:
        # Runs for the first request and for every redirect hop
        await asyncio.to_thread(self.url_validator, str(request.url))

    async def _fetch(self, url: str) -> httpx.Response:
        """GET the page, retrying once on network errors and transient statuses."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_incrementing(start=self.retry_delay, increment=self.retry_delay),
            retry=retry_if_exception_type(httpx.TransportError) | retry_if_result(_retryable_response),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            retry_error_callback=_last_outcome,
            sleep=self._sleep,
        )
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self.transport,
            event_hooks={"request": [self._check_request]},
        ) as client:
            return await retrying(client.get, url)

    async def _extract(self, page_text: str, hostname: str, user_id: str) -> str:
        response = await self.llm.generate(
            prompt=page_text,
            system=SYSTEM_PROMPT,
            model=self.model,
            max_tokens=2000,
            user_id=user_id,
            operation_type=OperationType.JOB_ANALYSIS,
            metadata={"source": "job_scraper", "host": hostname},
        )
        return response.text.strip()


async def fetch_job_description(
    url: str,
    user_id: str,
    llm: LLMClient | None = None,
) -> ScrapingResult:
    try:
        config = get_config()
        scraper = JobScraper(
            llm or get_llm_client(),
            model=config.llm.fast_model,
            timeout=config.scraper.timeout,
            attempts=config.scraper.attempts,
            retry_delay=config.scraper.retry_delay,
        )
    except Exception:
        logger.error("Could not set up the job scraper", exc_info=True)
        return _failed(UNEXPECTED_MESSAGE)
    return await scraper.scrape(url, user_id)
