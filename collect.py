"""Codeforces API client.

Every request goes through a single ``RateLimiter`` owned by the client, so
calls made for two different handles are still spaced ``min_interval`` apart.
The upstream envelope is resolved into ``ApiSuccess``/``ApiFailure`` here and
nowhere else.
"""

import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import requests
from pydantic import TypeAdapter, ValidationError

from config import Settings
from structs import ApiFailure, ApiResult, RatingChange, Submission, User, VisitorStats
from utils import dicts_to_models

logger = logging.getLogger(__name__)

SUBMISSIONS_COUNT = 10000
USER_AGENT = "cf-face-off/1.0"

_envelope = TypeAdapter(ApiResult)


class CodeforcesError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class HandleNotFoundError(CodeforcesError):
    def __init__(self, handle: str):
        super().__init__(f"User '{handle}' not found on Codeforces")
        self.handle = handle


class UpstreamError(CodeforcesError):
    pass


class InvalidInputError(ValueError):
    pass


class RateLimiter:
    """Keeps consecutive slots at least ``min_interval`` seconds apart."""

    def __init__(self, min_interval: float = 2.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last: Optional[float] = None

    @contextmanager
    def acquire(self):
        with self._lock:
            if self._last is not None:
                wait = self.min_interval - (self._clock() - self._last)
                if wait > 0:
                    logger.debug("Rate limit: sleeping %.2fs", wait)
                    self._sleep(wait)
            self._last = self._clock()
            yield


def _looks_like_not_found(comment: Optional[str]) -> bool:
    return bool(comment) and "not found" in comment.lower()


def _decode(model_cls, items: list, fallback: str):
    try:
        return dicts_to_models(model_cls, items)
    except ValidationError as e:
        logger.warning("Malformed %s record: %s", model_cls.__name__, e)
        raise UpstreamError(fallback) from e


def _require_handle(handle: str) -> str:
    if not handle or not handle.strip():
        raise InvalidInputError("No handle provided")
    return handle.strip()


class CodeforcesClient:
    def __init__(self, settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None,
                 limiter: Optional[RateLimiter] = None):
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.limiter = limiter or RateLimiter(self.settings.min_request_interval)

    def _call(self, method: str, params: Dict, fallback: str):
        url = f"{self.settings.api_url}/{method}"
        with self.limiter.acquire():
            logger.debug("Requesting %s %s", url, params)
            try:
                response = self.session.get(url, params=params, timeout=self.settings.request_timeout)
            except requests.RequestException as e:
                logger.warning("Request to %s failed: %s", method, e)
                raise UpstreamError(fallback) from e

        # Codeforces answers 400 with a FAILED envelope, so read the body first
        try:
            envelope = _envelope.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Unexpected response from %s (HTTP %s)", method, response.status_code)
            raise UpstreamError(fallback) from e
        return envelope

    def get_user(self, handle: str) -> User:
        handle = _require_handle(handle)
        envelope = self._call("user.info", {"handles": handle}, "Failed to fetch user data")
        if isinstance(envelope, ApiFailure) or not envelope.result:
            logger.info("Handle %s not found", handle)
            raise HandleNotFoundError(handle)
        return _decode(User, envelope.result[:1], "Failed to fetch user data")[0]

    def get_users(self, handles: List[str]) -> List[User]:
        if not handles:
            raise InvalidInputError("No handles provided")
        return [self.get_user(handle) for handle in handles]

    def get_submissions(self, handle: str) -> List[Submission]:
        handle = _require_handle(handle)
        fallback = "Failed to fetch user submissions"
        envelope = self._call("user.status", {"handle": handle, "from": 1, "count": SUBMISSIONS_COUNT}, fallback)
        if isinstance(envelope, ApiFailure):
            if _looks_like_not_found(envelope.comment):
                raise HandleNotFoundError(handle)
            raise UpstreamError(envelope.comment or fallback)
        submissions = _decode(Submission, envelope.result or [], fallback)
        logger.info("Found %d submissions for %s", len(submissions), handle)
        return submissions

    def get_users_submissions(self, handles: List[str]) -> Dict[str, List[Submission]]:
        if not handles:
            raise InvalidInputError("No handles provided")
        return {handle: self.get_submissions(handle) for handle in handles}

    def get_rating_history(self, handle: str) -> List[RatingChange]:
        handle = _require_handle(handle)
        fallback = "Failed to fetch rating history"
        envelope = self._call("user.rating", {"handle": handle}, fallback)
        if isinstance(envelope, ApiFailure):
            if _looks_like_not_found(envelope.comment):
                raise HandleNotFoundError(handle)
            raise UpstreamError(envelope.comment or fallback)
        history = _decode(RatingChange, envelope.result or [], fallback)
        logger.info("Found %d rating change stats for %s", len(history), handle)
        return history


class VisitLogger:
    """Reports searches and comparisons to the analytics backend."""

    def __init__(self, settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None):
        self.settings = settings or Settings()
        self.session = session or requests.Session()

    def log_visit(self, action: str, handles: List[str], path: str) -> None:
        # fire-and-forget: a broken backend must never reach the user
        if not self.settings.log_visits:
            return
        payload = {
            "ipAddress": "::1",
            "action": action,
            "handles": handles,
            "userAgent": USER_AGENT,
            "path": path,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            response = self.session.post(
                f"{self.settings.backend_url}/visitors/log",
                json=payload,
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except Exception:  # noqa: BLE001
            logger.warning("Failed to log visit %s for %s", action, handles, exc_info=True)

    def get_visitor_stats(self) -> VisitorStats:
        try:
            response = self.session.get(
                f"{self.settings.backend_url}/visitors/stats",
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
            return VisitorStats.model_validate(response.json())
        except (requests.RequestException, ValueError, ValidationError) as e:
            logger.exception("Failed to get visitor stats")
            raise UpstreamError("Failed to get visitor stats") from e
