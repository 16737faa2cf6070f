"""
Word dictionary for encoding/decoding barcodes.

Each word's index is its position in the source word list. The list is read
once per container and never modified afterwards.
"""
from typing import Dict, Iterable, List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import Settings
from shared.errors import DictionaryLoadError
from shared.utils import setup_logger

logger = setup_logger(__name__)


class WordDictionary:
    """Ordered, duplicate-free word list with index lookups in both directions."""

    def __init__(self, words: Iterable[str]):
        self._words: List[str] = list(words)
        if not self._words:
            raise DictionaryLoadError("Word dictionary is empty")

        self._index: Dict[str, int] = {}
        for index, word in enumerate(self._words):
            if word in self._index:
                raise DictionaryLoadError(
                    f"Duplicate word '{word}' at index {index} (first seen at {self._index[word]})"
                )
            self._index[word] = index

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> 'WordDictionary':
        """
        Build a dictionary from newline-delimited text.

        Args:
            lines: Raw lines; each non-blank line is trimmed and kept in order

        Returns:
            WordDictionary
        """
        return cls(line.strip() for line in lines if line.strip())

    def index_of(self, word: str) -> int:
        """
        Look up a word's index.

        Raises:
            KeyError: If the word is not in the dictionary
        """
        return self._index[word]

    def word_at(self, index: int) -> str:
        """
        Look up the word at an index.

        Raises:
            IndexError: If the index is negative or past the end
        """
        if index < 0 or index >= len(self._words):
            raise IndexError(f"Word index {index} out of range for dictionary size {len(self._words)}")
        return self._words[index]

    def __contains__(self, word: object) -> bool:
        return word in self._index

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self):
        return f"WordDictionary(size={len(self._words)})"


def load_word_dictionary(path: str) -> WordDictionary:
    """
    Load the word dictionary from a local text file.

    Args:
        path: Path to a newline-delimited word list

    Returns:
        Loaded WordDictionary

    Raises:
        DictionaryLoadError: If the file cannot be read or holds no usable words
    """
    logger.info(f"Loading word list from: {path}")
    try:
        with open(path, encoding='utf-8') as handle:
            dictionary = WordDictionary.from_lines(handle)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to load word list: {e}")
        raise DictionaryLoadError(f"Word list file could not be read: {path}") from e

    logger.info(f"Loaded {len(dictionary)} words")
    return dictionary


def load_word_dictionary_from_s3(s3_client, bucket: str, key: str) -> WordDictionary:
    """
    Load the word dictionary from an S3 object.

    Args:
        s3_client: boto3 S3 client
        bucket: Bucket name
        key: Object key of the word list

    Returns:
        Loaded WordDictionary

    Raises:
        DictionaryLoadError: If the object cannot be fetched or holds no usable words
    """
    logger.info(f"Loading word list from: s3://{bucket}/{key}")
    try:
        response = s3_client.get_object(Bucket=bucket, Key=key)
        content = response['Body'].read().decode('utf-8')
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to fetch word list from S3: {e}")
        raise DictionaryLoadError(f"Word list could not be fetched from s3://{bucket}/{key}") from e
    except UnicodeDecodeError as e:
        raise DictionaryLoadError(f"Word list s3://{bucket}/{key} is not valid UTF-8") from e

    dictionary = WordDictionary.from_lines(content.splitlines())
    logger.info(f"Loaded {len(dictionary)} words")
    return dictionary


def load_configured_dictionary(settings: Settings, s3_client=None) -> WordDictionary:
    """Load the word dictionary from the source the settings describe."""
    if settings.words_from_s3:
        return load_word_dictionary_from_s3(
            s3_client or boto3.client('s3'),
            settings.words_s3_bucket,
            settings.words_s3_key
        )
    return load_word_dictionary(settings.words_file_path)
