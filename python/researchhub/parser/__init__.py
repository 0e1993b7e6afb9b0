"""Document parsing (text extraction) client."""

from researchhub.parser.client import (
    IMAGE_PLACEHOLDER,
    ParserClient,
    ParserError,
    get_parser_client,
)

__all__ = [
    "IMAGE_PLACEHOLDER",
    "ParserClient",
    "ParserError",
    "get_parser_client",
]
