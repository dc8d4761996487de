import pytest
from fastapi.testclient import TestClient

from transcribe_api.app import create_app
from transcribe_api.config import AppConfig, AssemblyAIConfig, MinioConfig
from transcribe_api.dependencies import (
    get_config,
    get_storage,
    get_transcription_service,
)
from transcribe_api.domain import (
    IssuedUploadToken,
    NormalizedAudio,
    TranscriptionResult,
)
from transcribe_api.exceptions import (
    InvalidStagedUrl,
    StagedObjectNotFound,
    StorageDeleteError,
    StorageFetchFailed,
)
from transcribe_api.interfaces import StagedStorage, TranscriptionService

BUCKET_URL = "http://minio.test:9000/transcription-staging"
MIB = 1024 * 1024


class FakeStorage(StagedStorage):
    """In-memory staging bucket that records every call made against it."""

    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str | None]] = {}
        self.calls: list[tuple[str, str]] = []
        self.delete_calls: list[str] = []
        self.fail_delete = False
        self.delete_error: Exception | None = None
        self.fail_download_status: int | None = None
        self.probe_reports_missing = False

    def add(self, object_name: str, data: bytes, content_type: str | None) -> str:
        self.objects[object_name] = (data, content_type)
        return self.object_url(object_name)

    def presign_upload(self, object_name, content_type, max_bytes, expires_in_seconds):
        self.calls.append(("presign_upload", object_name))
        return IssuedUploadToken(
            upload_url=BUCKET_URL,
            form_fields={
                "key": object_name,
                "Content-Type": content_type,
                "policy": "p",
            },
        )

    def object_url(self, object_name: str) -> str:
        return f"{BUCKET_URL}/{object_name}"

    def resolve(self, url: str) -> str:
        prefix = f"{BUCKET_URL}/staging/"
        if not url.startswith(prefix):
            raise InvalidStagedUrl(url)
        return url[len(BUCKET_URL) + 1:]

    def stat(self, object_name: str):
        self.calls.append(("stat", object_name))
        if self.probe_reports_missing or object_name not in self.objects:
            raise StagedObjectNotFound(object_name)
        data, content_type = self.objects[object_name]
        return len(data), content_type

    def download(self, object_name: str):
        self.calls.append(("download", object_name))
        if self.fail_download_status is not None:
            raise StorageFetchFailed(object_name, self.fail_download_status)
        if object_name not in self.objects:
            raise StorageFetchFailed(object_name, 404)
        return self.objects[object_name]

    def delete(self, object_name: str) -> None:
        self.calls.append(("delete", object_name))
        self.delete_calls.append(object_name)
        if self.fail_delete:
            raise StorageDeleteError(object_name, RuntimeError("storage unavailable"))
        if self.delete_error is not None:
            raise self.delete_error
        self.objects.pop(object_name, None)

    def ensure_bucket_exists(self) -> None:
        self.calls.append(("ensure_bucket_exists", ""))


class StubTranscriber(TranscriptionService):
    def __init__(self, text: str = "Hallo zusammen, das ist ein Test.") -> None:
        self.text = text
        self.error: Exception | None = None
        self.calls: list[NormalizedAudio] = []
        self.timeouts: list[float | None] = []

    def transcribe(self, audio, timeout=None):
        self.calls.append(audio)
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return TranscriptionResult(text=self.text)


def make_config(api_key: str = "test-key", **limits) -> AppConfig:
    config = AppConfig(
        minio=MinioConfig(endpoint="minio.test:9000", user="user", password="secret"),
        assemblyai=AssemblyAIConfig(api_key=api_key),
    )
    if limits:
        config = config.model_copy(
            update={"limits": config.limits.model_copy(update=limits)}
        )
    return config


@pytest.fixture
def config() -> AppConfig:
    return make_config()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def transcriber() -> StubTranscriber:
    return StubTranscriber()


@pytest.fixture
def app(config: AppConfig, storage: FakeStorage, transcriber: StubTranscriber):
    application = create_app()
    application.dependency_overrides[get_config] = lambda: config
    application.dependency_overrides[get_storage] = lambda: storage
    application.dependency_overrides[get_transcription_service] = lambda: transcriber
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
