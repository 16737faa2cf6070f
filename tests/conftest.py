"""
Pytest configuration and fixtures
"""
from typing import Any, Dict, List

import boto3
import pytest

from shared.config import Settings
from shared.conversion import ConversionEngine
from shared.dictionary import WordDictionary
from shared.layout import default_layout

WORDS = [
    "apple", "banana", "cherry", "date", "elderberry",
    "fig", "grape", "honeydew", "kiwi", "lemon",
    "mango", "nectarine", "orange", "papaya", "quince", "raspberry",
]


class MemoryLayoutSource:
    """Layout source holding its records in memory."""

    def __init__(self, records: List[Dict[str, Any]] = None):
        self.records = list(records or [])
        self.writes = 0

    def __str__(self):
        return "memory"

    def read(self) -> List[Dict[str, Any]]:
        return list(self.records)

    def write(self, records: List[Dict[str, Any]]) -> None:
        self.records = list(records)
        self.writes += 1


def make_settings(**overrides) -> Settings:
    values = dict(
        words_file_path="words.txt",
        words_s3_bucket=None,
        words_s3_key=None,
        layouts_file_path="layouts.json",
        layouts_s3_bucket=None,
        layouts_s3_key=None,
        layout_refresh_seconds=300,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def dictionary() -> WordDictionary:
    return WordDictionary(WORDS)


@pytest.fixture
def engine(dictionary) -> ConversionEngine:
    return ConversionEngine(dictionary)


@pytest.fixture
def layout():
    return default_layout()


@pytest.fixture
def memory_source() -> MemoryLayoutSource:
    return MemoryLayoutSource()


@pytest.fixture
def s3_client():
    """Real boto3 client for use with botocore.stub.Stubber; never reaches AWS."""
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
