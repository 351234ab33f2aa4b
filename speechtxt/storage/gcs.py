"""
speechtxt/storage/gcs.py
=========================
Google Cloud Storage transcript uploader

Responsibility:
    - Upload a transcript as ``<prefix>/<filename>.txt`` (text/plain)
    - Return the public object URL

The bucket handle is injected; its client lifecycle belongs to the
service. API errors and transport errors from the underlying requests
session both surface as StorageError.
"""

import logging

import requests
from google.api_core import exceptions as google_exceptions
from google.cloud import storage

from speechtxt.retry import call_with_retry

logger = logging.getLogger("speechtxt.storage.gcs")

PUBLIC_URL_BASE = "https://storage.googleapis.com"


class StorageError(Exception):
    """Raised when a transcript cannot be uploaded."""
    pass


class TranscriptStorage:

    def __init__(
        self,
        bucket: storage.Bucket,
        bucket_name: str,
        prefix: str = "transcriptions",
        cache_control: str = "public, max-age=31536000",
        max_retries: int = 0,
        retry_base_delay: float = 1.0,
    ):
        self.bucket = bucket
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.cache_control = cache_control
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def object_name(self, filename: str) -> str:
        name = f"{filename}.txt"
        return f"{self.prefix}/{name}" if self.prefix else name

    def public_url(self, filename: str) -> str:
        return f"{PUBLIC_URL_BASE}/{self.bucket_name}/{self.object_name(filename)}"

    def save_transcript(self, transcript: str, filename: str) -> str:
        """
        Upload the transcript text and return its public URL.

        Raises:
            StorageError: If the upload fails.
        """
        blob = self.bucket.blob(self.object_name(filename))
        blob.cache_control = self.cache_control

        try:
            call_with_retry(
                blob.upload_from_string,
                transcript,
                content_type="text/plain",
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay,
            )
        except (google_exceptions.GoogleAPIError, requests.exceptions.RequestException) as exc:
            raise StorageError(f"Transcript upload failed: {exc}") from exc

        url = self.public_url(filename)
        logger.info("Transcript uploaded to %s", url)
        return url
