"""Judge0 HTTP client - submits a program for one test case and waits for the result"""

import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from contestjudge.config import settings
from contestjudge.core.exceptions import JudgeUnavailableError

logger = logging.getLogger(__name__)

# Judge0 status ids below this are still queued or processing
FIRST_FINAL_STATUS_ID = 3


@dataclass
class JudgeResult:
    """Raw outcome of one test case run"""
    status_id: int
    output: Optional[str]
    time: Optional[float]
    memory: Optional[float]


def normalize_base_url(value: str) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        return ""
    if trimmed.startswith("http://") or trimmed.startswith("https://"):
        return trimmed.rstrip("/")
    return f"http://{trimmed}".rstrip("/")


def needs_base64(text: str) -> bool:
    """True when the text holds characters Judge0 cannot take as plain JSON text."""
    for char in text:
        code = ord(char)
        if code in (9, 10, 13):
            continue
        if code < 32 or code == 127 or code > 126:
            return True
    return False


def _encode(value: str, use_base64: bool) -> str:
    if not use_base64:
        return value
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def _decode(value: Optional[str], use_base64: bool) -> Optional[str]:
    if not value:
        return None
    if not use_base64:
        return value
    return base64.b64decode(value).decode("utf-8", errors="replace")


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class Judge0Client:
    """Thin client over the Judge0 submissions API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        poll_delay: Optional[float] = None,
        max_poll_attempts: Optional[int] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = normalize_base_url(base_url if base_url is not None else settings.JUDGE0_BASE_URL)
        self.auth_token = auth_token if auth_token is not None else settings.JUDGE0_AUTH_TOKEN
        self.poll_delay = poll_delay if poll_delay is not None else settings.JUDGE0_POLL_DELAY_SECONDS
        self.max_poll_attempts = (
            max_poll_attempts if max_poll_attempts is not None else settings.JUDGE0_MAX_POLL_ATTEMPTS
        )
        self.timeout = timeout if timeout is not None else settings.JUDGE0_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["X-Auth-Token"] = self.auth_token
        return headers

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise JudgeUnavailableError("Judge0 base URL is not configured.")
        return f"{self.base_url}{path}"

    def run(self, source_code: str, language_id: int, stdin: str, expected_output: str) -> JudgeResult:
        """
        Judge one test case.

        Raises:
            JudgeUnavailableError: On transport errors, non-2xx responses or
                when the result never leaves the queue
        """
        use_base64 = needs_base64(source_code) or needs_base64(stdin) or needs_base64(expected_output)
        payload = {
            "source_code": _encode(source_code, use_base64),
            "language_id": language_id,
            "stdin": _encode(stdin, use_base64),
            "expected_output": _encode(expected_output, use_base64),
        }

        try:
            response = self.session.post(
                self._url("/submissions/"),
                params={"base64_encoded": "true" if use_base64 else "false", "wait": "false"},
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise JudgeUnavailableError(f"Judge0 request failed: {exc}")

        if not response.ok:
            raise JudgeUnavailableError(
                f"Judge0 request failed with {response.status_code}: {response.text}".strip()
            )

        result = response.json()
        response_base64 = use_base64
        status_id = (result.get("status") or {}).get("id") or 1
        token = result.get("token")
        if token and status_id < FIRST_FINAL_STATUS_ID:
            result, response_base64 = self._poll(token, use_base64)

        return self._to_result(result, response_base64)

    def _poll(self, token: str, use_base64: bool):
        response_base64 = use_base64

        for attempt in range(self.max_poll_attempts):
            if attempt > 0:
                time.sleep(self.poll_delay)

            try:
                response = self.session.get(
                    self._url(f"/submissions/{token}"),
                    params={"base64_encoded": "true" if response_base64 else "false"},
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                raise JudgeUnavailableError(f"Judge0 poll failed: {exc}")

            if not response.ok:
                body = response.text or ""
                # Output that is not valid UTF-8 can only be fetched base64 encoded
                if response.status_code == 400 and "base64_encoded=true" in body:
                    response_base64 = True
                    continue
                raise JudgeUnavailableError(f"Judge0 poll failed with {response.status_code}: {body}".strip())

            result = response.json()
            status_id = (result.get("status") or {}).get("id") or 1
            if status_id >= FIRST_FINAL_STATUS_ID:
                return result, response_base64

        raise JudgeUnavailableError("Judge0 timed out waiting for result.")

    @staticmethod
    def _to_result(result: Dict[str, Any], use_base64: bool) -> JudgeResult:
        # First field the judge filled in wins, even when it is empty
        raw_output = next(
            (result[key] for key in ("stdout", "compile_output", "stderr") if result.get(key) is not None),
            None,
        )
        status_id = (result.get("status") or {}).get("id") or 1
        logger.debug("Judge0 result status=%s time=%s memory=%s", status_id, result.get("time"), result.get("memory"))
        return JudgeResult(
            status_id=int(status_id),
            output=_decode(raw_output, use_base64),
            time=_to_number(result.get("time")),
            memory=_to_number(result.get("memory")),
        )


judge_client = Judge0Client()
