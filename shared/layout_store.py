"""
Layout store: the named layouts available for conversion.

Layouts are persisted as a JSON list of layout records, either in a local
file or in an S3 object. The in-memory mapping is never edited in place; every
change builds a new mapping and swaps the reference, so readers always see a
complete set of validated layouts.
"""
import json
import os
import threading
from typing import Dict, Any, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import Settings
from shared.errors import BarcodeConverterError, LayoutNotFoundError, LayoutStoreError
from shared.layout import Layout, default_layout
from shared.utils import setup_logger

logger = setup_logger(__name__)


def _parse_records(raw: str, location: str) -> List[Dict[str, Any]]:
    if not raw.strip():
        return []
    try:
        records = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LayoutStoreError(f"Layout store {location} is not valid JSON: {e.msg}") from e
    if not isinstance(records, list):
        raise LayoutStoreError(f"Layout store {location} must contain a JSON list")
    return records


def _dump_records(records: List[Dict[str, Any]]) -> str:
    return json.dumps(records, indent=2)


class LocalLayoutSource:
    """Layout records kept in a JSON file on local disk."""

    def __init__(self, path: str):
        self.path = path

    def __str__(self):
        return self.path

    def read(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            logger.info(f"Layout file not found: {self.path}")
            return []
        try:
            with open(self.path, encoding='utf-8') as handle:
                raw = handle.read()
        except OSError as e:
            raise LayoutStoreError(f"Layout file could not be read: {self.path}") from e
        return _parse_records(raw, self.path)

    def write(self, records: List[Dict[str, Any]]) -> None:
        directory = os.path.dirname(self.path)
        tmp_path = f"{self.path}.tmp"
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as handle:
                handle.write(_dump_records(records))
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise LayoutStoreError(f"Layout file could not be written: {self.path}") from e


class S3LayoutSource:
    """Layout records kept in a JSON object in S3."""

    def __init__(self, s3_client, bucket: str, key: str):
        self.s3_client = s3_client
        self.bucket = bucket
        self.key = key

    def __str__(self):
        return f"s3://{self.bucket}/{self.key}"

    def read(self) -> List[Dict[str, Any]]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=self.key)
            raw = response['Body'].read().decode('utf-8')
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                logger.info(f"Layout object not found: {self}")
                return []
            logger.error(f"Failed to read layouts from S3: {e}")
            raise LayoutStoreError(f"Layout store {self} could not be read") from e
        except (BotoCoreError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read layouts from S3: {e}")
            raise LayoutStoreError(f"Layout store {self} could not be read") from e
        return _parse_records(raw, str(self))

    def write(self, records: List[Dict[str, Any]]) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=self.key,
                Body=_dump_records(records).encode('utf-8'),
                ContentType='application/json'
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to write layouts to S3: {e}")
            raise LayoutStoreError(f"Layout store {self} could not be written") from e


def build_layout_source(settings: Settings, s3_client=None):
    """Pick the layout source the settings describe."""
    if settings.layouts_from_s3:
        return S3LayoutSource(
            s3_client or boto3.client('s3'),
            settings.layouts_s3_bucket,
            settings.layouts_s3_key
        )
    return LocalLayoutSource(settings.layouts_file_path)


class LayoutStore:
    """
    Named, validated layouts backed by a persistent source.

    Every layout held by the store has passed validate().
    """

    def __init__(self, source, seed_default: bool = True):
        self.source = source
        self.seed_default = seed_default
        self._layouts: Dict[str, Layout] = {}
        self._write_lock = threading.Lock()

    def _read_layouts(self) -> Dict[str, Layout]:
        records = self.source.read()
        layouts = {}
        for record in records:
            name = record.get('name') if isinstance(record, dict) else None
            try:
                layout = Layout.from_record(record)
                layout.validate()
            except BarcodeConverterError as e:
                logger.warning(f"Skipping layout '{name}': {e}")
                continue
            if layout.name in layouts:
                logger.warning(f"Duplicate layout name '{layout.name}'; keeping the later record")
            layouts[layout.name] = layout

        if not layouts and self.seed_default:
            layout = default_layout()
            logger.info(f"No layouts loaded from {self.source}; using built-in '{layout.name}'")
            layouts[layout.name] = layout
        return layouts

    def _write_layouts(self, layouts: Dict[str, Layout]) -> None:
        self.source.write([layouts[name].to_record() for name in sorted(layouts)])

    def load(self) -> int:
        """
        (Re)load layouts from the source.

        Invalid layout records are logged and skipped. When nothing valid is
        found the built-in default layout is used (unless seeding is disabled).

        Returns:
            Number of layouts now held

        Raises:
            LayoutStoreError: If the source cannot be read
        """
        layouts = self._read_layouts()
        self._layouts = layouts
        logger.info(f"Loaded {len(layouts)} layouts from {self.source}")
        return len(layouts)

    def names(self) -> List[str]:
        return sorted(self._layouts)

    def layouts(self) -> List[Layout]:
        current = self._layouts
        return [current[name] for name in sorted(current)]

    def get(self, name: Optional[str] = None) -> Layout:
        """
        Resolve a layout by name.

        Args:
            name: Layout name; when empty the lexicographically smallest
                loaded name is used

        Returns:
            Validated Layout

        Raises:
            LayoutNotFoundError: If the name is unknown or no layouts are loaded
        """
        current = self._layouts
        if name is None or not name.strip():
            if not current:
                raise LayoutNotFoundError("No layouts are available.")
            return current[min(current)]

        layout = current.get(name)
        if layout is None:
            raise LayoutNotFoundError(f"Layout with name '{name}' not found.", name=name)
        return layout

    def save(self, layout: Layout) -> Layout:
        """
        Validate a layout, persist it and make it visible, replacing any
        layout with the same name.

        The source is re-read before writing so layouts saved elsewhere since
        the last load are kept.

        Raises:
            LayoutValidationError: If the layout is invalid
            LayoutStoreError: If the source cannot be read or written
        """
        layout.validate()
        with self._write_lock:
            layouts = self._read_layouts()
            layouts[layout.name] = layout
            self._write_layouts(layouts)
            self._layouts = layouts
        logger.info(f"Saved layout '{layout.name}' ({layout.total_length} characters)")
        return layout

    def delete(self, name: str) -> bool:
        """
        Remove a layout and persist the change.

        Returns:
            True if a layout was removed, False if the name was unknown

        Raises:
            LayoutNotFoundError: If the name is empty
            LayoutStoreError: If the source cannot be read or written
        """
        if not name or not name.strip():
            raise LayoutNotFoundError("Layout name to delete cannot be null or empty.")

        with self._write_lock:
            layouts = self._read_layouts()
            if name not in layouts:
                self._layouts = layouts
                logger.info(f"Layout '{name}' not found for deletion")
                return False
            del layouts[name]
            self._write_layouts(layouts)
            self._layouts = layouts
        logger.info(f"Deleted layout '{name}'")
        return True
