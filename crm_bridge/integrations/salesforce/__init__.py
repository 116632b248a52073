"""
Salesforce adapter.

- session:  OAuth password-grant token manager
- client:   HTTP envelope (auth headers, response classification, JSON decode)
- query:    SOQL encoding and single-page query runner
- service:  adapter facade with read-through caching of reference data
- mapping:  lending entities -> Salesforce field payloads
- sync:     create/update of Salesforce records for an application
"""

from .client import SalesforceClient
from .errors import ErrorKind, Result, SalesforceError
from .mapping import FieldMapper, format_date, format_datetime, parse_boolean, parse_not_boolean
from .query import QueryRunner, encode_soql
from .service import SalesforceService
from .session import Session, TokenManager
from .sync import ApplicationSync

__all__ = [
    "ApplicationSync", "ErrorKind", "FieldMapper", "QueryRunner", "Result",
    "SalesforceClient", "SalesforceError", "SalesforceService", "Session", "TokenManager",
    "encode_soql", "format_date", "format_datetime", "parse_boolean", "parse_not_boolean",
]
