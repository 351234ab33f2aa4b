# speechtxt/storage/__init__.py
# ==============================
# Object Storage Layer
#
# Uploads finished transcripts to a Google Cloud Storage bucket.
#
# Public API:
#   TranscriptStorage(bucket, bucket_name).save_transcript(text, filename) → public URL

from speechtxt.storage.gcs import StorageError, TranscriptStorage  # noqa: F401

__all__ = ["StorageError", "TranscriptStorage"]
