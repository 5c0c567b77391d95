"""Simplestreams index and products documents for tools metadata.

Layout of a published pair (under the ``tools/`` prefix)::

    streams/v1/index.json
    streams/v1/com.ubuntu.juju:released:tools.json

The index lists the product ids found in the products file, so both are
always generated from the same record set.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from email.utils import format_datetime

from toolstream.core.errors import EncodingError
from toolstream.models.metadata import MetadataDocumentPair, ToolsMetadataRecord

PATH_PREFIX = "tools/"
DEFAULT_INDEX_PATH = "streams/v1/index"
UNSIGNED_SUFFIX = ".json"
INDEX_PATH = DEFAULT_INDEX_PATH + UNSIGNED_SUFFIX
CONTENT_ID = "com.ubuntu.juju:released:tools"
PRODUCT_METADATA_PATH = f"streams/v1/{CONTENT_ID}.json"

INDEX_FORMAT = "index:1.0"
PRODUCTS_FORMAT = "products:1.0"
DATA_TYPE = "content-download"

SERIES_VERSIONS: dict[str, str] = {
    "precise": "12.04",
    "quantal": "12.10",
    "raring": "13.04",
    "saucy": "13.10",
    "trusty": "14.04",
    "utopic": "14.10",
    "vivid": "15.04",
    "wily": "15.10",
    "xenial": "16.04",
}

_SHA256_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def series_version(series: str) -> str:
    """Return the release number for an Ubuntu series, else the series itself."""
    return SERIES_VERSIONS.get(series, series)


def product_id(record: ToolsMetadataRecord) -> str:
    return f"com.ubuntu.juju:{series_version(record.release)}:{record.arch}"


def item_id(record: ToolsMetadataRecord) -> str:
    return f"{record.version}-{record.release}-{record.arch}"


def canonical_order(records: Iterable[ToolsMetadataRecord]) -> list[ToolsMetadataRecord]:
    """Sort records the way a products document lists them."""
    return sorted(records, key=lambda r: (product_id(r), item_id(r)))


def format_updated(updated: datetime) -> str:
    """Format a timestamp as RFC 2822, the simplestreams ``updated`` field."""
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)
    return format_datetime(updated)


def validate_record(record: ToolsMetadataRecord) -> None:
    """Raise ``EncodingError`` if *record* cannot appear in a products file."""
    for field in ("release", "version", "arch", "path", "file_type"):
        if not getattr(record, field):
            raise EncodingError(f"tools record {item_id(record)!r} has empty {field}")
    if record.path.startswith("/"):
        raise EncodingError(f"tools path {record.path!r} must be relative")
    if record.size < 0:
        raise EncodingError(f"tools record {item_id(record)!r} has negative size")
    if record.sha256:
        if not _SHA256_PATTERN.match(record.sha256):
            raise EncodingError(
                f"tools record {item_id(record)!r} has malformed sha256 {record.sha256!r}"
            )
    elif record.size:
        raise EncodingError(
            f"tools record {item_id(record)!r} has a size but no sha256"
        )


def _dumps(document: dict) -> bytes:
    return json.dumps(document, indent=4).encode("utf-8")


def marshal_index(records: Sequence[ToolsMetadataRecord], updated: datetime) -> bytes:
    """Encode the index document pointing at the products file."""
    stamp = format_updated(updated)
    document = {
        "index": {
            CONTENT_ID: {
                "updated": stamp,
                "format": PRODUCTS_FORMAT,
                "datatype": DATA_TYPE,
                "path": PRODUCT_METADATA_PATH,
                "products": sorted({product_id(r) for r in records}),
            }
        },
        "updated": stamp,
        "format": INDEX_FORMAT,
    }
    return _dumps(document)


def marshal_products(records: Sequence[ToolsMetadataRecord], updated: datetime) -> bytes:
    """Encode the products document listing every record."""
    for record in records:
        validate_record(record)
    items_version = updated.strftime("%Y%m%d")
    products: dict[str, dict] = {}
    for record in canonical_order(records):
        pid = product_id(record)
        catalog = products.setdefault(
            pid,
            {
                "version": record.version,
                "arch": record.arch,
                "versions": {items_version: {"items": {}}},
            },
        )
        items = catalog["versions"][items_version]["items"]
        iid = item_id(record)
        if iid in items:
            raise EncodingError(f"duplicate tools item {iid!r} in product {pid!r}")
        items[iid] = record.to_document()
    document = {
        "content_id": CONTENT_ID,
        "datatype": DATA_TYPE,
        "format": PRODUCTS_FORMAT,
        "updated": format_updated(updated),
        "products": products,
    }
    return _dumps(document)


def marshal_tools_metadata(
    records: Sequence[ToolsMetadataRecord], updated: datetime
) -> MetadataDocumentPair:
    """Encode *records* as an index/products pair.

    Raises
    ------
    EncodingError
        If any record violates the products schema. Nothing is returned in
        that case, so nothing can be published.
    """
    products = marshal_products(records, updated)
    index = marshal_index(records, updated)
    return MetadataDocumentPair(
        index=index,
        products=products,
        index_path=INDEX_PATH,
        products_path=PRODUCT_METADATA_PATH,
    )


def unmarshal_products(data: bytes) -> list[ToolsMetadataRecord]:
    """Decode a products document back into records, in canonical order."""
    try:
        document = json.loads(data)
        records = [
            ToolsMetadataRecord.model_validate(item)
            for catalog in document["products"].values()
            for collection in catalog["versions"].values()
            for item in collection["items"].values()
        ]
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise EncodingError(f"malformed products document: {exc}") from exc
    return canonical_order(records)


def index_product_ids(data: bytes) -> list[str]:
    """Return the product ids the tools entry of an index document lists."""
    try:
        document = json.loads(data)
        return list(document["index"][CONTENT_ID]["products"])
    except (ValueError, KeyError, TypeError) as exc:
        raise EncodingError(f"malformed index document: {exc}") from exc
