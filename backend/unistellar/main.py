"""FastAPI application entrypoint."""

from __future__ import annotations

import argparse
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from unistellar.api import ops, search, universities, users
from unistellar.api.errors import install_error_handlers
from unistellar.api.middleware_request_id import RequestIdMiddleware
from unistellar.infra import postgres
from unistellar.obs import init as obs_init
from unistellar.obs import logging as obs_logging
from unistellar.settings import settings

logger = obs_logging.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
	if settings.store_backend != "memory":
		await postgres.init_pool()
	logger.info("launching server", extra={"store": settings.store_backend, "scorer": settings.search_scorer})
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="UniStellar", lifespan=lifespan)

obs_init(app)
app.add_middleware(RequestIdMiddleware)
install_error_handlers(app)

app.include_router(users.router)
app.include_router(universities.router)
app.include_router(search.router)
app.include_router(ops.router)


def _parse_args() -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="UniStellar server")
	parser.add_argument("--host", default="127.0.0.1")
	parser.add_argument("--port", type=int, default=8080)
	parser.add_argument(
		"--log-to",
		choices=("stdout", "file"),
		default=None,
		help="Where to write logs; defaults to stdout in development and a timestamped file otherwise",
	)
	return parser.parse_args()


def run() -> None:
	args = _parse_args()
	if args.log_to:
		settings.log_to = args.log_to
		obs_logging.configure_logging()
	uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
	run()
