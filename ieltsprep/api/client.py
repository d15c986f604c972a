"""Async HTTP client for the IELTS practice backend."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from ..errors import NetworkFailure
from ..models.practice import ListeningTest, Question, SpeakingTest
from ..models.submission import FormPart

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/users/login"
SPEAKING_TESTS_PATH = "/api/speaking-tests"
SAMPLE_QUESTIONS_PATH = "/api/speaking-tests/sample-questions"
LISTENING_TESTS_PATH = "/api/listening-tests"


def build_form_data(parts: List[FormPart]) -> aiohttp.MultipartWriter:
    """Convert form parts into a multipart/form-data body.

    Text-only forms are still sent as multipart, never urlencoded.
    """
    writer = aiohttp.MultipartWriter("form-data")
    for part in parts:
        if part.is_file:
            payload = writer.append(
                part.value,
                {"Content-Type": part.content_type or "application/octet-stream"},
            )
            payload.set_content_disposition("form-data", name=part.name, filename=part.filename)
        else:
            payload = writer.append(part.value)
            payload.set_content_disposition("form-data", name=part.name)
    return writer


class ApiClient:
    """Thin async wrapper around aiohttp for the backend REST API.

    Use as an async context manager so the underlying ``ClientSession`` is
    closed. Every failed call raises ``NetworkFailure``.
    """

    def __init__(self, base_url: str = "http://localhost:5000", token: Optional[str] = None,
                 timeout_seconds: float = 30):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

    @classmethod
    def from_config(cls, config, token: Optional[str] = None) -> "ApiClient":
        return cls(
            base_url=config.get_api_base_url(),
            token=token,
            timeout_seconds=config.get('api.timeout_seconds', 30),
        )

    async def __aenter__(self) -> "ApiClient":
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self._session = aiohttp.ClientSession(timeout=self.timeout, headers=headers)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send one request and return the decoded JSON body (or None).

        Outside ``async with`` a one-off session is opened for the call.

        Raises:
            NetworkFailure: On connection errors, timeouts and non-2xx answers.
        """
        if self._session is None:
            async with self:
                return await self._request(method, path, **kwargs)

        url = self.url(path)
        try:
            async with self._session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    detail = await self._error_detail(response)
                    raise NetworkFailure(
                        f"{method} {path} failed with {response.status}: {detail}",
                        status=response.status,
                        url=url,
                    )
                if response.content_type == "application/json":
                    return await response.json()
                text = await response.text()
                return {"raw": text} if text else None
        except aiohttp.ClientError as e:
            raise NetworkFailure(f"{method} {path} failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise NetworkFailure(f"{method} {path} timed out", url=url) from e

    @staticmethod
    async def _error_detail(response: aiohttp.ClientResponse) -> str:
        try:
            body = await response.json(content_type=None)
        except (ValueError, aiohttp.ContentTypeError):
            return (await response.text()) or response.reason or ""
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return str(body)

    @staticmethod
    def _data(body: Any) -> Any:
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def _item(self, model, body: Any, path: str):
        """Build one ``model`` from a response body.

        Raises:
            NetworkFailure: If the body is not a record with an id.
        """
        data = self._data(body)
        try:
            return model.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise NetworkFailure(f"Malformed response from {path}: {body!r}", url=self.url(path)) from e

    def _items(self, model, body: Any, path: str) -> list:
        """Build a list of ``model`` from a list body, skipping malformed entries."""
        data = self._data(body) or []
        if not isinstance(data, list):
            raise NetworkFailure(f"Malformed response from {path}: expected a list", url=self.url(path))
        items = []
        for entry in data:
            try:
                items.append(model.from_dict(entry))
            except (KeyError, TypeError, AttributeError):
                logger.warning(f"Skipping malformed entry from {path}: {entry!r}")
        return items

    # Auth

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        return await self._request("POST", LOGIN_PATH, json={"email": email, "password": password})

    # Response submission

    async def post_form(self, path: str, parts: List[FormPart]) -> Any:
        """POST a multipart form built from ``parts``."""
        return await self._request("POST", path, data=build_form_data(parts))

    # Speaking tests

    async def list_speaking_tests(self) -> List[SpeakingTest]:
        body = await self._request("GET", SPEAKING_TESTS_PATH)
        return self._items(SpeakingTest, body, SPEAKING_TESTS_PATH)

    async def create_speaking_test(self, question: str) -> SpeakingTest:
        body = await self._request("POST", SPEAKING_TESTS_PATH, json={"question": question})
        return self._item(SpeakingTest, body, SPEAKING_TESTS_PATH)

    async def delete_speaking_test(self, test_id: int) -> None:
        await self._request("DELETE", f"{SPEAKING_TESTS_PATH}/{test_id}")

    async def list_sample_questions(self) -> List[Question]:
        body = await self._request("GET", SAMPLE_QUESTIONS_PATH)
        return self._items(Question, body, SAMPLE_QUESTIONS_PATH)

    async def create_sample_question(self, text: str, category: str = "General",
                                     difficulty: str = "Medium") -> Question:
        body = await self._request(
            "POST",
            SAMPLE_QUESTIONS_PATH,
            json={"text": text, "category": category, "difficulty": difficulty},
        )
        return self._item(Question, body, SAMPLE_QUESTIONS_PATH)

    async def delete_sample_question(self, question_id: int) -> None:
        await self._request("DELETE", f"{SAMPLE_QUESTIONS_PATH}/{question_id}")

    # Listening tests

    async def list_listening_tests(self) -> List[ListeningTest]:
        body = await self._request("GET", LISTENING_TESTS_PATH)
        return self._items(ListeningTest, body, LISTENING_TESTS_PATH)

    async def upload_listening_test(self, question: str, audio_path: str, user_id: int = 1) -> ListeningTest:
        path = Path(audio_path)
        parts = [
            FormPart("question", question),
            FormPart("file", path.read_bytes(), filename=path.name),
            FormPart("user_id", str(user_id)),
        ]
        body = await self.post_form(LISTENING_TESTS_PATH, parts)
        return self._item(ListeningTest, body, LISTENING_TESTS_PATH)

    async def delete_listening_test(self, test_id: int) -> None:
        await self._request("DELETE", f"{LISTENING_TESTS_PATH}/{test_id}")

    def listening_audio_url(self, audio_file: str) -> str:
        return self.url(f"{LISTENING_TESTS_PATH}/audio/{audio_file}")
