"""
Shared utilities for Lambda functions.
"""
import os
import json
import logging
from typing import Dict, Any, Optional


def setup_logger(logger_name: str) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        logger_name: Name of the logger

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_env_var(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable key
        default: Optional default value

    Returns:
        Environment variable value

    Raises:
        ValueError: If variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(f"Environment variable {key} is required but not set")
    return value


def create_response(
    status_code: int,
    body: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a standardized API Gateway response.

    Args:
        status_code: HTTP status code
        body: Response body dictionary
        headers: Optional custom headers

    Returns:
        API Gateway formatted response
    """
    default_headers = {
        'Content-Type': 'application/json',
        'Access-Control-Allow-Origin': '*',  # Configure appropriately for production
    }

    if headers:
        default_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': default_headers,
        'body': body if isinstance(body, str) else json.dumps(body)
    }


def error_response(status_code: int, message: str) -> Dict[str, Any]:
    """Create an API Gateway response carrying an error envelope."""
    return create_response(status_code, {'status': 'error', 'message': message})


def parse_request_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract the request payload from an API Gateway event.

    The body may arrive as a JSON string or an already-decoded dict; when no
    body is present the query string parameters are used instead.

    Args:
        event: API Gateway proxy event

    Returns:
        Request payload dictionary

    Raises:
        ValueError: If the body is not valid JSON or not a JSON object
    """
    if event.get('body') is not None:
        body = event['body']
        if isinstance(body, str):
            try:
                body = json.loads(body) if body.strip() else {}
            except json.JSONDecodeError as e:
                raise ValueError(f"Request body is not valid JSON: {e.msg}")
    else:
        body = event.get('queryStringParameters') or {}

    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body
