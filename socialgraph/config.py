"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Storage ────────────────────────────────────────────────────────────
    # 'redis' in every real deployment; 'memory' keeps the whole keyspace
    # in-process (tests, local demos).
    storage_backend: str = "redis"

    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0

    # Max entries kept per timeline structure after each fan-out push.
    # 0 disables trimming.
    timeline_max_size: int = 800

    # ── Credentials ────────────────────────────────────────────────────────
    jwt_secret: str = "change-me-in-production-please-32b"
    jwt_issuer: str = "socialgraph"
    jwt_expiration_seconds: int = 86400  # 24h

    login_max_failures: int = 5
    login_lockout_seconds: int = 300
    activation_token_expiry_seconds: int = 86400

    # ── MinIO (S3-compatible) ──────────────────────────────────────────────
    minio_enabled: bool = True
    minio_endpoint: str = "minio:9000"
    minio_public_url: str = "http://localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_bucket: str = "photos"
    upload_key_expiry_seconds: int = 300

    # ── Observability ──────────────────────────────────────────────────────
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "socialgraph-api"
    environment: str = "development"
    log_level: str = "INFO"
    version: str = "2.0.0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
