import time
import uuid
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("modular_house.http")

REQUEST_ID_HEADER = "X-Request-ID"


class APILoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        client = request.client.host if request.client else "unknown"
        logger.info(
            f"→ [{request_id}] {request.method} {request.url.path} "
            f"from {client} ua={request.headers.get('user-agent', '-')}"
        )

        response = await call_next(request)
        latency_ms = int((time.time() - start_time) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id

        status = response.status_code
        level = logging.ERROR if status >= 500 else logging.WARNING if status >= 400 else logging.INFO
        outcome = "errored" if status >= 400 else "completed"
        logger.log(
            level,
            f"← [{request_id}] {request.method} {request.url.path} {outcome} {status} in {latency_ms}ms",
        )
        return response
