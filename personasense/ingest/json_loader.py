"""
JSON loading for record sets.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Union

from pydantic import ValidationError

from personasense.exceptions import IngestValidationError
from .schema import UserFinancialData
from .validation import validate_financial_data

logger = logging.getLogger(__name__)


def read_json(path: Union[str, Path]) -> Any:
    """Decode a JSON file, reporting encoding and syntax errors as IngestValidationError."""
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except UnicodeDecodeError as e:
        raise IngestValidationError(f"{path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise IngestValidationError(f"{path} is not valid JSON: {e}") from e


def format_validation_errors(error: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into 'loc: message' strings."""
    return [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in error.errors()
    ]


def parse_financial_data(payload: Any) -> UserFinancialData:
    """
    Parse and validate a decoded JSON record set.

    Args:
        payload: Dict with ``accounts``, ``transactions``, ``liabilities`` and
            optionally ``recurring_streams``

    Returns:
        Validated UserFinancialData

    Raises:
        IngestValidationError: If the payload is malformed
    """
    try:
        data = UserFinancialData.model_validate(payload)
    except ValidationError as e:
        errors = format_validation_errors(e)
        raise IngestValidationError(f"Malformed record set: {errors[0]}", errors) from e

    validate_financial_data(data)
    logger.debug(
        "Parsed %d accounts, %d transactions, %d liabilities",
        len(data.accounts), len(data.transactions), len(data.liabilities),
    )
    return data


def load_financial_data(path: Union[str, Path]) -> UserFinancialData:
    """Load a record set from a JSON file."""
    return parse_financial_data(read_json(path))
