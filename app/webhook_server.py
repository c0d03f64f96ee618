from __future__ import annotations

import sys
from typing import Optional

import uvicorn
from linebot.v3 import WebhookParser
from linebot.v3.exceptions import InvalidSignatureError
from loguru import logger
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

import database
from dispatcher import Dispatcher
from line_client import LineMessenger
from ratelimit import RecordThrottle
from recorder import Recorder
from settings import Settings, get_settings

SIGNATURE_HEADER = "X-Line-Signature"


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def build_dispatcher(settings: Settings) -> Dispatcher:
    """Wire the shared messenger and rate-limit store once per process."""
    messenger = LineMessenger.from_access_token(settings.line_channel_access_token)
    recorder = Recorder(RecordThrottle(), ttl_hours=settings.record_ttl_hours)
    return Dispatcher(messenger, recorder)


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[Dispatcher] = None,
    parser: Optional[WebhookParser] = None,
) -> Starlette:
    settings = settings or get_settings()
    database.init_db(settings.database_url)
    dispatcher = dispatcher or build_dispatcher(settings)
    parser = parser or WebhookParser(settings.line_channel_secret)

    async def webhook(request: Request):
        """Verify and parse a LINE delivery, then handle its events in order.

        Answers 400 for a missing or invalid signature or an unparsable body,
        and an empty 200 otherwise.
        """
        signature = request.headers.get(SIGNATURE_HEADER)
        if not signature:
            raise HTTPException(status_code=400, detail="Signature not found")

        body = await request.body()
        try:
            events = parser.parse(body.decode("utf-8"), signature)
        except InvalidSignatureError:
            logger.warning("Rejected webhook with invalid signature")
            raise HTTPException(status_code=400, detail="Invalid signature")
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Rejected malformed webhook body: {}", e)
            raise HTTPException(status_code=400, detail="Invalid event request")

        await run_in_threadpool(dispatcher.handle_events, events)
        return Response(status_code=200)

    # Lightweight health endpoint for quick readiness checks
    async def health_check(request: Request):
        return JSONResponse({"status": "ok"})

    return Starlette(
        routes=[
            Route("/webhook", webhook, methods=["POST"]),
            Route("/healthz", health_check, methods=["GET"]),
        ]
    )


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting poop bot webhook on {}:{}", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
