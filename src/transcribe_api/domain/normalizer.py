"""Filename and content-type normalization ahead of transcription."""

from .models import NormalizedAudio

# WhatsApp voice notes arrive as ".opus" but are Opus streams in an Ogg container.
_CODEC_CONTAINERS = {
    ".opus": (".ogg", "audio/ogg"),
}


def normalize_name(filename: str, content_type: str) -> tuple[str, str]:
    """
    Maps codec-only extensions onto the container the transcriber expects.

    Args:
        filename: Declared filename of the upload.
        content_type: Content type reported by storage or the client.

    Returns:
        Tuple of (filename, content_type), unchanged unless the extension
        names a codec with a known container.
    """
    lowered = filename.lower()
    for codec_extension, (container_extension, container_type) in (
        _CODEC_CONTAINERS.items()
    ):
        if lowered.endswith(codec_extension):
            stem = filename[: -len(codec_extension)]
            return stem + container_extension, container_type
    return filename, content_type


def normalize_audio(filename: str, content_type: str, data: bytes) -> NormalizedAudio:
    """Builds the transcription payload; the bytes are passed through as-is."""
    normalized_filename, normalized_type = normalize_name(filename, content_type)
    return NormalizedAudio(
        filename=normalized_filename,
        content_type=normalized_type,
        data=data,
    )
