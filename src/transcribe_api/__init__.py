"""Audio transcription service with staged object-storage uploads."""
