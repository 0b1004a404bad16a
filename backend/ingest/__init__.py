from ingest.jsonl import IngestError, ParseResult, PayloadTooLarge, dump_jsonl, parse_jsonl
from ingest.validation import sanitize_edit_events, validate_config, validate_edit_event

__all__ = [
    "IngestError", "ParseResult", "PayloadTooLarge", "dump_jsonl", "parse_jsonl",
    "sanitize_edit_events", "validate_config", "validate_edit_event",
]
