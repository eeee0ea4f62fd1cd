# songpig/services/storage.py
"""Cloudflare R2（S3 互換）への音声ファイル保存"""
import logging
import re
import time
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Config

logger = logging.getLogger(__name__)

# 対応している音声の Content-Type → 拡張子
SUPPORTED_AUDIO_TYPES: dict[str, str] = {
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/wav": ".wav",
    "audio/wave": ".wav",
    "audio/x-wav": ".wav",
    "audio/aiff": ".aiff",
    "audio/x-aiff": ".aiff",
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
    "audio/ogg": ".ogg",
    "audio/webm": ".webm",
    "audio/mp4": ".m4a",
    "audio/x-m4a": ".m4a",
}


def is_supported_audio_type(content_type: str) -> bool:
    return content_type in SUPPORTED_AUDIO_TYPES


def extension_for_type(content_type: str) -> str:
    return SUPPORTED_AUDIO_TYPES.get(content_type, ".mp3")


def sanitize_filename(file_name: str) -> str:
    sanitized = re.sub(r"[^a-zA-Z0-9._-]", "_", file_name)
    return re.sub(r"_+", "_", sanitized)


def generate_storage_key(room_id: str, file_name: str, now_ms: Optional[int] = None) -> str:
    """rooms/{room_id}/{タイムスタンプ(ms)}_{ファイル名}。拡張子がなければ .mp3"""
    sanitized = sanitize_filename(file_name)
    ext = "" if "." in sanitized else ".mp3"
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"rooms/{room_id}/{timestamp}_{sanitized}{ext}"


class R2Storage:
    def __init__(self, config: Config):
        self.account_id = config.CLOUDFLARE_ACCOUNT_ID
        self.access_key_id = config.CLOUDFLARE_R2_ACCESS_KEY_ID
        self.secret_access_key = config.CLOUDFLARE_R2_SECRET_ACCESS_KEY
        self.bucket = config.CLOUDFLARE_R2_BUCKET_NAME
        self.public_base_url = config.CLOUDFLARE_R2_PUBLIC_URL
        self.upload_expires = config.UPLOAD_URL_EXPIRES
        self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(
            self.account_id
            and self.access_key_id
            and self.secret_access_key
            and self.public_base_url
        )

    def _get_client(self):
        if not (self.account_id and self.access_key_id and self.secret_access_key):
            raise RuntimeError("Cloudflare R2 credentials not configured")
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name="auto",
                endpoint_url=f"https://{self.account_id}.r2.cloudflarestorage.com",
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def upload_url(self, storage_key: str, content_type: str = "audio/mpeg") -> str:
        """PUT 用の署名付き URL（ローカルで署名するだけで通信はしない）"""
        return self._get_client().generate_presigned_url(
            "put_object",
            Params={
                "Bucket": self.bucket,
                "Key": storage_key,
                "ContentType": content_type,
            },
            ExpiresIn=self.upload_expires,
        )

    def public_url(self, storage_key: str) -> str:
        if not self.public_base_url:
            raise RuntimeError("R2 public URL not configured")
        return f"{self.public_base_url.rstrip('/')}/{storage_key}"

    def delete(self, storage_key: str) -> bool:
        try:
            self._get_client().delete_object(Bucket=self.bucket, Key=storage_key)
        except (BotoCoreError, ClientError):
            logger.exception("failed to delete %s from R2", storage_key)
            return False
        return True
