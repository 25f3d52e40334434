import json as json_lib
from typing import Any, Dict, List

import aiohttp
from loguru import logger
from pydantic import ValidationError
from result import Ok, Err, Result

from schemas import SuccessResponse, ErrorResponse, NoteSchema, NoteRequest
from settings import dynamic_settings

COLLECTION_PATH = "/notes"


class NotesApiClient:
    """笔记后端的 http 客户端

    使用方式：
        async with NotesApiClient() as client:
            result = await client.list_notes()

    所有方法都不抛异常，失败时返回 Err(ErrorResponse)

    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        self.base_url = (base_url or dynamic_settings.api_base_url).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or dynamic_settings.request_timeout)
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "NotesApiClient":
        self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
        return False

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _request(self, method: str, path: str, json: Dict | None = None) -> Result[Any, ErrorResponse]:
        url = self._url(path)
        logger.debug("[{}] {}", method, url)
        try:
            async with self.session.request(method, url, json=json) as response:
                text = await response.text()
                try:
                    body = json_lib.loads(text) if text else None
                except ValueError:
                    logger.debug("response body is not json: {!r}", text[:200])
                    body = None
                if response.status >= 400:
                    body = body if isinstance(body, dict) else {}
                    error = ErrorResponse(
                        code=response.status,
                        message=body.get("message") or response.reason or "request failed",
                        errors=body.get("errors") or {},
                    )
                    logger.error("[{}] {} -> {}", method, url, error)
                    return Err(error)
                return Ok(body)
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(e)
            return Err(ErrorResponse(code=0, message=str(e) or type(e).__name__))

    async def _request_note(self, method: str, path: str, json: Dict | None = None) -> Result[NoteSchema, ErrorResponse]:
        result = await self._request(method, path, json=json)
        if result.is_err():
            return result
        try:
            response = SuccessResponse[NoteSchema].model_validate(result.unwrap())
        except ValidationError as e:
            logger.error(e)
            return Err(ErrorResponse(code=0, message=f"unexpected response: {e}"))
        return Ok(response.data)

    async def list_notes(self) -> Result[List[NoteSchema], ErrorResponse]:
        result = await self._request("GET", COLLECTION_PATH)
        if result.is_err():
            return result
        try:
            response = SuccessResponse[List[NoteSchema]].model_validate(result.unwrap())
        except ValidationError as e:
            logger.error(e)
            return Err(ErrorResponse(code=0, message=f"unexpected response: {e}"))
        return Ok(response.data or [])

    async def get_note(self, note_id: int | str) -> Result[NoteSchema, ErrorResponse]:
        return await self._request_note("GET", f"{COLLECTION_PATH}/{note_id}")

    async def create_note(self, payload: Dict[str, Any]) -> Result[NoteSchema, ErrorResponse]:
        body = NoteRequest(note=payload).model_dump()
        return await self._request_note("POST", COLLECTION_PATH, json=body)

    async def update_note(self, note_id: int | str, payload: Dict[str, Any]) -> Result[NoteSchema, ErrorResponse]:
        body = NoteRequest(note=payload).model_dump()
        return await self._request_note("PUT", f"{COLLECTION_PATH}/{note_id}", json=body)

    async def delete_note(self, note_id: int | str) -> Result[bool, ErrorResponse]:
        result = await self._request("DELETE", f"{COLLECTION_PATH}/{note_id}")
        if result.is_err():
            return result
        return Ok(True)
