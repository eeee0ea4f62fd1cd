# songpig/config.py
import os
from datetime import timedelta

from dotenv import load_dotenv

# .env があれば環境変数に読み込む
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


class Config:
    APP_NAME = os.getenv("APP_NAME", "Song Pig")
    VERSION = os.getenv("VERSION", "0.1.0")

    # --- DB ---
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./songpig.db")
    # SQLite のビジータイムアウト（ルーム取得のタイムアウトを兼ねる）
    DB_TIMEOUT_SEC = float(os.getenv("DB_TIMEOUT_SEC", "10"))

    # --- 認証トークン ---
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
    ACCESS_TOKEN_EXPIRES = int(
        os.getenv(
            "ACCESS_TOKEN_EXPIRES_SECONDS", str(int(timedelta(days=14).total_seconds()))
        )
    )

    # --- 書き込み直後の読み取りリトライ（結果整合なストア向け） ---
    READ_RETRY_ATTEMPTS = int(os.getenv("READ_RETRY_ATTEMPTS", "5"))
    READ_RETRY_BASE_DELAY = float(os.getenv("READ_RETRY_BASE_DELAY", "0.1"))
    READ_RETRY_MAX_DELAY = float(os.getenv("READ_RETRY_MAX_DELAY", "1.0"))

    # 招待コード衝突時の再生成回数
    INVITE_CODE_ATTEMPTS = int(os.getenv("INVITE_CODE_ATTEMPTS", "10"))

    # --- 初期管理者 ---
    DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")

    # --- Cloudflare R2 ---
    CLOUDFLARE_ACCOUNT_ID = os.getenv("CLOUDFLARE_ACCOUNT_ID", "")
    CLOUDFLARE_R2_ACCESS_KEY_ID = os.getenv("CLOUDFLARE_R2_ACCESS_KEY_ID", "")
    CLOUDFLARE_R2_SECRET_ACCESS_KEY = os.getenv("CLOUDFLARE_R2_SECRET_ACCESS_KEY", "")
    CLOUDFLARE_R2_BUCKET_NAME = os.getenv("CLOUDFLARE_R2_BUCKET_NAME", "songpig-audio")
    CLOUDFLARE_R2_PUBLIC_URL = os.getenv("CLOUDFLARE_R2_PUBLIC_URL", "")
    UPLOAD_URL_EXPIRES = int(os.getenv("UPLOAD_URL_EXPIRES_SECONDS", "3600"))

    # --- 開発用 ---
    DEBUG_ENDPOINTS = _env_bool("DEBUG_ENDPOINTS")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    # カンマ区切り。'*' なら全許可
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")


settings = Config()
