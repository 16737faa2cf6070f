"""
Environment configuration shared by the Lambda functions.
"""
from dataclasses import dataclass
from typing import Optional

from shared.utils import get_env_var


@dataclass(frozen=True)
class Settings:
    words_file_path: str
    words_s3_bucket: Optional[str]
    words_s3_key: Optional[str]
    layouts_file_path: str
    layouts_s3_bucket: Optional[str]
    layouts_s3_key: Optional[str]
    layout_refresh_seconds: int

    @property
    def words_from_s3(self) -> bool:
        return bool(self.words_s3_bucket)

    @property
    def layouts_from_s3(self) -> bool:
        return bool(self.layouts_s3_bucket)


def _optional(key: str) -> Optional[str]:
    return get_env_var(key, '').strip() or None


def _paired(bucket_key: str, object_key: str):
    bucket = _optional(bucket_key)
    key = _optional(object_key)
    if bool(bucket) != bool(key):
        raise ValueError(f"{bucket_key} and {object_key} must be set together")
    return bucket, key


def load_settings() -> Settings:
    """
    Read settings from environment variables.

    Returns:
        Settings

    Raises:
        ValueError: If an S3 bucket is configured without its key (or the
            reverse) or LAYOUT_REFRESH_SECONDS is not a non-negative integer
    """
    words_bucket, words_key = _paired('WORDS_S3_BUCKET', 'WORDS_S3_KEY')
    layouts_bucket, layouts_key = _paired('LAYOUTS_S3_BUCKET', 'LAYOUTS_S3_KEY')

    raw_refresh = get_env_var('LAYOUT_REFRESH_SECONDS', '300')
    try:
        refresh = int(raw_refresh)
    except ValueError:
        raise ValueError(f"LAYOUT_REFRESH_SECONDS must be an integer, got {raw_refresh!r}")
    if refresh < 0:
        raise ValueError(f"LAYOUT_REFRESH_SECONDS must not be negative, got {refresh}")

    return Settings(
        words_file_path=get_env_var('WORDS_FILE_PATH', 'words.txt'),
        words_s3_bucket=words_bucket,
        words_s3_key=words_key,
        layouts_file_path=get_env_var('LAYOUTS_FILE_PATH', 'layouts.json'),
        layouts_s3_bucket=layouts_bucket,
        layouts_s3_key=layouts_key,
        layout_refresh_seconds=refresh,
    )
