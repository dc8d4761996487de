"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from ddtrace import patch_all
from fastapi import FastAPI

from transcribe_api.app import create_app
from transcribe_api.dependencies import get_storage

patch_all()


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_storage().ensure_bucket_exists()
    yield


app = create_app(lifespan=lifespan)
