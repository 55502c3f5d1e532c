"""
Tokenizing CSV reader for product import files.

Comma-separated, double-quote escaped text only. Quoted fields may span
lines and contain commas; "" inside quotes is a literal quote. Unquoted
fields are trimmed and rows whose fields are all empty are dropped.
"""

import structlog

from parsers.records import CSVParseResult

logger = structlog.get_logger(__name__)

# Tried in order; latin-1 maps every byte so it always succeeds
UPLOAD_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


# ===================
# MAIN PARSER
# ===================

def parse_csv(content: str) -> CSVParseResult:
    """
    Split CSV text into headers and data rows.

    Never raises: malformed quoting is absorbed (an unterminated quote
    runs to the end of input).

    Args:
        content: Full CSV text

    Returns:
        CSVParseResult with the first non-empty row as headers
    """
    if not content or not content.strip():
        return CSVParseResult()

    rows: list[list[str]] = []
    current_row: list[str] = []
    current_field: list[str] = []
    in_quotes = False

    i = 0
    length = len(content)
    while i < length:
        char = content[i]
        next_char = content[i + 1] if i + 1 < length else ""

        if in_quotes:
            if char == '"' and next_char == '"':
                current_field.append('"')
                i += 2
                continue
            if char == '"':
                in_quotes = False
            elif char == "\r" and next_char == "\n":
                current_field.append("\n")
                i += 2
                continue
            else:
                current_field.append(char)
        elif char == '"':
            in_quotes = True
        elif char == ",":
            current_row.append("".join(current_field).strip())
            current_field = []
        elif char == "\n" or (char == "\r" and next_char == "\n"):
            current_row.append("".join(current_field).strip())
            current_field = []
            _append_row(rows, current_row)
            current_row = []
            if char == "\r":
                i += 1
        else:
            current_field.append(char)
        i += 1

    # Flush whatever is left after the last delimiter
    if current_field or current_row:
        current_row.append("".join(current_field).strip())
        _append_row(rows, current_row)

    if not rows:
        return CSVParseResult()

    result = CSVParseResult(headers=rows[0], rows=rows[1:])

    logger.debug(
        "csv_tokenized",
        columns=len(result.headers),
        row_count=result.row_count
    )

    return result


def decode_csv_bytes(data: bytes) -> str:
    """
    Decode an uploaded file to text.

    Spreadsheet tools export UTF-8 (often with a BOM) or Windows-1252,
    so those are tried before the latin-1 catch-all.
    """
    for encoding in UPLOAD_ENCODINGS:
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.debug("csv_decoded", encoding=encoding, size_bytes=len(data))
        return text

    # latin-1 cannot fail, this is unreachable
    raise UnicodeDecodeError("latin-1", data, 0, len(data), "undecodable upload")


# ===================
# HELPER FUNCTIONS
# ===================

def _append_row(rows: list[list[str]], row: list[str]) -> None:
    """Keep the row only if at least one field has content."""
    if any(cell != "" for cell in row):
        rows.append(row)
