# tests/conftest.py
import os

# アプリを import する前にテスト用の設定を入れておく
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_songpig.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("READ_RETRY_BASE_DELAY", "0")
os.environ.setdefault("READ_RETRY_MAX_DELAY", "0")
os.environ.setdefault("DEFAULT_ADMIN_USERNAME", "admin")
os.environ.setdefault("DEFAULT_ADMIN_PASSWORD", "admin123")
os.environ.setdefault("DEBUG_ENDPOINTS", "true")
os.environ.setdefault("CLOUDFLARE_ACCOUNT_ID", "testaccount")
os.environ.setdefault("CLOUDFLARE_R2_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("CLOUDFLARE_R2_SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("CLOUDFLARE_R2_BUCKET_NAME", "songpig-test")
os.environ.setdefault("CLOUDFLARE_R2_PUBLIC_URL", "https://audio.example.com")

import pytest  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from songpig.db import Base, engine, SessionLocal  # noqa: E402
from songpig.main import app  # noqa: E402

# 全モデルを Base に登録しておく
import songpig.models  # noqa: E402,F401


@pytest.fixture(scope="function")
def db() -> Session:
    """
    テストごとにクリーンな DB を用意するフィクスチャ。
    アプリ本体と同じ engine を使う。
    """
    # 既存テーブルを全部削除してから、再作成
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db: Session) -> TestClient:
    """
    通常の FastAPI app をそのまま使う TestClient。
    DB を作り直した後に起動するので、初期管理者は毎回シードされる。
    """
    with TestClient(app) as c:
        yield c
