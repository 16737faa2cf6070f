"""
Converter Lambda Function.

Converts four dictionary words into a barcode and a barcode back into its
four words, using a named layout from the layout store.
The word dictionary and layouts are loaded once per warm container; layouts
are reloaded when older than LAYOUT_REFRESH_SECONDS.
"""
import time
from typing import Dict, Any, Optional

from botocore.exceptions import ClientError

from shared.config import load_settings
from shared.conversion import ConversionEngine
from shared.dictionary import load_configured_dictionary
from shared.errors import (
    DictionaryLoadError,
    LayoutNotFoundError,
    LayoutNotValidatedError,
    LayoutStoreError,
    LayoutValidationError,
)
from shared.layout_store import LayoutStore, build_layout_source
from shared.utils import setup_logger, create_response, error_response, parse_request_body

# Initialize logger
logger = setup_logger(__name__)

# Configuration from environment variables
SETTINGS = load_settings()

# Created on first use and reused while the container stays warm
_engine: Optional[ConversionEngine] = None
_layout_store: Optional[LayoutStore] = None
_layouts_loaded_at = 0.0


def get_engine() -> ConversionEngine:
    """Return the conversion engine, loading the word dictionary on first use."""
    global _engine
    if _engine is None:
        _engine = ConversionEngine(load_configured_dictionary(SETTINGS))
    return _engine


def get_layout_store() -> LayoutStore:
    """Return the layout store, reloading it when it has gone stale."""
    global _layout_store, _layouts_loaded_at
    now = time.monotonic()
    if _layout_store is None:
        store = LayoutStore(build_layout_source(SETTINGS))
        store.load()
        _layout_store = store
        _layouts_loaded_at = now
    elif SETTINGS.layout_refresh_seconds and now - _layouts_loaded_at >= SETTINGS.layout_refresh_seconds:
        try:
            _layout_store.load()
            _layouts_loaded_at = now
        except LayoutStoreError as e:
            # Cached layouts stay in service until a reload succeeds
            logger.warning(f"Layout reload failed, serving cached layouts: {e}")
    return _layout_store


def convert(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run one conversion request.

    Args:
        body: Request payload with optional layout_name and either barcode or words

    Returns:
        API Gateway response
    """
    layout_name = body.get('layout_name') or body.get('layoutName')
    if layout_name is not None and not isinstance(layout_name, str):
        return error_response(400, "layout_name must be a string.")

    barcode = body.get('barcode')
    words = body.get('words')
    if barcode is not None and not isinstance(barcode, str):
        return error_response(400, "barcode must be a string.")
    if words is not None and not isinstance(words, list):
        return error_response(400, "words must be a list of strings.")

    has_barcode = bool(barcode and barcode.strip())
    has_words = bool(words)
    if not has_barcode and not has_words:
        return error_response(400, "Either 'barcode' or 'words' must be provided in the request.")

    store = get_layout_store()
    if not layout_name or not layout_name.strip():
        try:
            layout = store.get()
        except LayoutNotFoundError:
            return error_response(500, "No default layout configured or no layouts available in the system.")
        logger.info(f"No layout_name provided, defaulting to layout: {layout.name}")
    else:
        layout = store.get(layout_name)

    engine = get_engine()
    if has_barcode:
        result = engine.decode(barcode, layout)
        logger.info(f"Decoded barcode with layout '{layout.name}'")
        return create_response(200, {'status': 'success', 'words': result})

    if len(words) != 4:
        return error_response(400, "Exactly 4 words are required for conversion to barcode.")
    result = engine.encode(words, layout)
    logger.info(f"Encoded words with layout '{layout.name}'")
    return create_response(200, {'status': 'success', 'barcode': result})


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for barcode/word conversion."""
    try:
        logger.info("Converter Lambda invoked")
        body = parse_request_body(event)
        return convert(body)

    except (LayoutValidationError, LayoutNotValidatedError) as e:
        logger.error(f"Layout configuration error: {e}")
        return error_response(500, f"Processing error: {e}")
    except ValueError as e:
        logger.warning(f"Conversion rejected: {e}")
        return error_response(400, str(e))
    except DictionaryLoadError as e:
        logger.error(f"Word dictionary unavailable: {e}")
        return error_response(503, 'Word dictionary unavailable')
    except (LayoutStoreError, ClientError) as e:
        logger.error(f"Layout store error: {e}")
        return error_response(500, 'Failed to load layouts')
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return error_response(500, 'An unexpected error occurred. Please check server logs.')
