"""
Layout Admin Lambda Function.

Lists, inspects, previews, saves and deletes barcode layouts in the layout
store. Saved layouts are validated before they are persisted; a layout is
always replaced whole, never edited in place.
"""
from typing import Dict, Any, Optional

from botocore.exceptions import ClientError

from shared.config import load_settings
from shared.errors import BarcodeConverterError, LayoutStoreError
from shared.layout import Layout
from shared.layout_store import LayoutStore, build_layout_source
from shared.utils import setup_logger, create_response, error_response, parse_request_body

# Initialize logger
logger = setup_logger(__name__)

# Configuration from environment variables
SETTINGS = load_settings()

_layout_store: Optional[LayoutStore] = None


def get_layout_store() -> LayoutStore:
    """Return the layout store, loading it on first use."""
    global _layout_store
    if _layout_store is None:
        store = LayoutStore(build_layout_source(SETTINGS))
        store.load()
        _layout_store = store
    return _layout_store


def describe_layout(layout: Layout) -> Dict[str, Any]:
    """Layout record plus its total barcode length."""
    record = layout.to_record()
    record['totalLength'] = layout.total_length
    return record


def list_layouts() -> Dict[str, Any]:
    return {'layouts': [describe_layout(layout) for layout in get_layout_store().layouts()]}


def get_layout(name: str) -> Dict[str, Any]:
    return describe_layout(get_layout_store().get(name))


def preview_layout(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a layout without storing it and report whether it would validate.

    Args:
        record: Layout record

    Returns:
        Dictionary with the layout's total length, validity and any error
    """
    layout = Layout.from_record(record)
    total_length = layout.total_length
    try:
        layout.validate()
    except BarcodeConverterError as e:
        return {'name': layout.name, 'totalLength': total_length, 'valid': False, 'error': str(e)}
    return {'name': layout.name, 'totalLength': total_length, 'valid': True, 'error': None}


def save_layout(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build, validate and persist a layout, replacing any layout with the same name.

    Args:
        record: Layout record

    Returns:
        Saved layout record with its total length
    """
    layout = Layout.from_record(record)
    get_layout_store().save(layout)
    return describe_layout(layout)


def delete_layout(name: str) -> Dict[str, Any]:
    return {'deleted': get_layout_store().delete(name)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for layout management."""
    try:
        logger.info("Layout admin Lambda invoked")

        body = parse_request_body(event)
        action = body.get('action', 'listLayouts')
        name = body.get('name')
        record = body.get('layout')

        if action in ('getLayout', 'deleteLayout') and (not isinstance(name, str) or not name.strip()):
            return error_response(400, 'name is required')
        if action in ('previewLayout', 'saveLayout') and not isinstance(record, dict):
            return error_response(400, 'layout is required')

        result = None
        if action == 'listLayouts':
            result = list_layouts()

        elif action == 'getLayout':
            result = get_layout(name)

        elif action == 'previewLayout':
            result = preview_layout(record)

        elif action == 'saveLayout':
            result = save_layout(record)

        elif action == 'deleteLayout':
            result = delete_layout(name)

        else:
            return error_response(400, f'Unknown action: {action}')

        logger.info(f"Action {action} completed successfully")
        return create_response(200, {'status': 'success', **result})

    except ValueError as e:
        logger.warning(f"Validation error: {e}")
        return error_response(400, str(e))
    except (LayoutStoreError, ClientError) as e:
        logger.error(f"Layout store error: {e}")
        return error_response(500, 'Layout store error')
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return error_response(500, 'Internal server error')
