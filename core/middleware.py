# RequestContextMiddleware, RequestLoggingMiddleware
import json
import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from core.log_serializers import redact_body, redact_headers, serialize_body
from core.request_context import generate_request_id, reset_request_context, set_request_context

logger = logging.getLogger("http")

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        request.state.request_id = request_id
        token = set_request_context(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            reset_request_context(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        start = time.time()
        content_type = request.headers.get("content-type")
        received = {
            "method": request.method,
            "url": request.url.path,
            "headers": redact_headers(request.headers),
        }
        if content_type and content_type.startswith("application/json"):
            received["body"] = serialize_body(
                redact_body(await self._read_json(request)), content_type, request.headers
            )
        elif content_type:
            received["body"] = serialize_body(None, content_type, request.headers)
        logger.info("request received %s", received)

        try:
            response: Response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request failed: %s %s %s (%.2fms)",
                request.method, request.url.path, exc, (time.time() - start) * 1000,
            )
            raise

        logger.info(
            "request completed %s %s %s (%.2fms)",
            request.method, request.url.path, response.status_code, (time.time() - start) * 1000,
        )
        return response

    @staticmethod
    async def _read_json(request: Request):
        raw = await request.body()
        if not raw:
            return None
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request failed: %s %s %s (%.2fms)",
                request.method, request.url.path, exc, (time.time() - start) * 1000,
            )
            raise

        response_type = response.headers.get("content-type")
        completed = {"statusCode": response.status_code}
        if response_type and response_type.startswith("application/json"):
            raw = b"".join([chunk async for chunk in response.body_iterator])
            response.body_iterator = self._replay(raw)
            completed["body"] = serialize_body(
                redact_body(self._parse_json(raw)), response_type, response.headers
            )
        elif response_type:
            # static images and the like are only described, never read
            completed["body"] = serialize_body(None, response_type, response.headers)

        logger.info(
            "request completed %s %s %s (%.2fms) %s",
            request.method, request.url.path, response.status_code, (time.time() - start) * 1000, completed,
        )
        return response

    @staticmethod
    async def _read_json(request: Request):
        return RequestLoggingMiddleware._parse_json(await request.body())

    @staticmethod
    def _parse_json(raw: bytes):
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return raw.decode("utf-8", errors="replace")

    @staticmethod
    async def _replay(raw: bytes):
        yield raw
