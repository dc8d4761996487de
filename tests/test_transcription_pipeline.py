import pytest

from conftest import MIB, FakeStorage, StubTranscriber, make_config
from transcribe_api.domain import PipelineState
from transcribe_api.exceptions import TranscriptionServiceError
from transcribe_api.handlers import TranscriptionPipeline


@pytest.fixture
def pipeline(config, storage, transcriber) -> TranscriptionPipeline:
    return TranscriptionPipeline(config, storage, transcriber)


def test_staged_success_reaches_done(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    url = storage.add("staging/a/voice.mp3", b"\x00" * 1024, "audio/mpeg")

    outcome = pipeline.run_staged(url)

    assert outcome.succeeded
    assert outcome.transcript == transcriber.text
    assert outcome.cleanup_attempted and outcome.cleanup_performed
    assert pipeline.state is PipelineState.DONE
    assert "staging/a/voice.mp3" not in storage.objects


def test_filename_defaults_to_object_basename(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    url = storage.add("staging/a/Sprachnachricht.OPUS", b"\x00" * 1024, None)

    pipeline.run_staged(url)

    assert transcriber.calls[0].filename == "Sprachnachricht.ogg"
    assert transcriber.calls[0].content_type == "audio/ogg"


@pytest.mark.parametrize(
    "arrange",
    [
        lambda storage, transcriber: setattr(storage, "fail_download_status", 500),
        lambda storage, transcriber: storage.add(
            "staging/a/voice.mp3", b"\x00" * (26 * MIB), "audio/mpeg"
        ),
        lambda storage, transcriber: setattr(
            transcriber, "error", TranscriptionServiceError("boom", status_code=502)
        ),
        lambda storage, transcriber: setattr(storage, "fail_delete", True),
    ],
    ids=["download-fails", "too-large", "transcription-fails", "delete-fails"],
)
def test_exactly_one_delete_per_staged_run(
    pipeline: TranscriptionPipeline,
    storage: FakeStorage,
    transcriber: StubTranscriber,
    arrange,
) -> None:
    url = storage.add("staging/a/voice.mp3", b"\x00" * 1024, "audio/mpeg")
    arrange(storage, transcriber)

    pipeline.run_staged(url)

    assert storage.delete_calls == ["staging/a/voice.mp3"]
    assert pipeline.state is PipelineState.DONE


def test_unwrapped_delete_exception_keeps_transcript(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    url = storage.add("staging/a/voice.mp3", b"\x00" * 1024, "audio/mpeg")
    storage.delete_error = ConnectionError("connection reset by peer")

    outcome = pipeline.run_staged(url)

    assert outcome.succeeded
    assert outcome.transcript == transcriber.text
    assert outcome.cleanup_attempted
    assert not outcome.cleanup_performed
    assert pipeline.state is PipelineState.DONE


def test_failure_carries_originating_error(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    url = storage.add("staging/a/voice.mp3", b"\x00" * 1024, "audio/mpeg")
    transcriber.error = TranscriptionServiceError("Invalid audio", status_code=422)

    outcome = pipeline.run_staged(url)

    assert outcome.transcript is None
    assert outcome.error.kind == "upstream_transcription"
    assert outcome.error.message == "Invalid audio"
    assert outcome.error.status_code == 422
    assert outcome.cleanup_performed


def test_unresolvable_url_skips_cleanup(
    pipeline: TranscriptionPipeline, storage: FakeStorage
) -> None:
    outcome = pipeline.run_staged("http://elsewhere.test/voice.mp3")

    assert outcome.error.kind == "validation"
    assert not outcome.cleanup_attempted
    assert storage.delete_calls == []


def test_expired_deadline_aborts_before_download(
    storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    pipeline = TranscriptionPipeline(
        make_config(request_timeout_seconds=0), storage, transcriber
    )
    url = storage.add("staging/a/voice.mp3", b"\x00" * 1024, "audio/mpeg")

    outcome = pipeline.run_staged(url)

    assert outcome.error.kind == "upstream_fetch"
    assert ("download", "staging/a/voice.mp3") not in storage.calls
    assert storage.delete_calls == ["staging/a/voice.mp3"]
    assert transcriber.calls == []


def test_transcriber_receives_remaining_budget(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    pipeline.run_direct("voice.wav", "audio/wav", b"\x00" * 1024)

    (timeout,) = transcriber.timeouts
    assert 0 < timeout <= 300


def test_direct_run_never_touches_storage(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    outcome = pipeline.run_direct("voice.opus", None, b"\x00" * 1024)

    assert outcome.succeeded
    assert not outcome.cleanup_attempted
    assert storage.calls == []
    assert transcriber.calls[0].filename == "voice.ogg"


def test_empty_direct_upload_is_rejected(pipeline: TranscriptionPipeline) -> None:
    outcome = pipeline.run_direct("voice.mp3", "audio/mpeg", b"")

    assert outcome.error.kind == "validation"
    assert outcome.error.message == "No file provided"


def test_unexpected_failure_becomes_pipeline_error(
    pipeline: TranscriptionPipeline, storage: FakeStorage, transcriber: StubTranscriber
) -> None:
    url = storage.add("staging/a/voice.mp3", b"\x00" * 1024, "audio/mpeg")
    transcriber.error = KeyError("text")

    outcome = pipeline.run_staged(url)

    assert outcome.error.message == "Failed to transcribe audio"
    assert outcome.error.status_code == 500
    assert storage.delete_calls == ["staging/a/voice.mp3"]


def test_pipeline_serves_a_single_request(pipeline: TranscriptionPipeline) -> None:
    pipeline.run_direct("voice.mp3", "audio/mpeg", b"\x00")

    with pytest.raises(RuntimeError):
        pipeline.run_direct("voice.mp3", "audio/mpeg", b"\x00")
