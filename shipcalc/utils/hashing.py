import hashlib, json, logging, re
from datetime import date
from typing import Union

logger = logging.getLogger(__name__)

HASH_LENGTH = 16

_WHITESPACE = re.compile(r"\s+")


def payload_hash(payload: dict) -> str:
    s = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()


def normalize_address(address: str) -> str:
    return _WHITESPACE.sub(" ", address.strip().lower())


def simple_hash(value: str) -> str:
    """32-bit rolling hash (h * 31 + unit) over UTF-16 code units.

    Much weaker than SHA-256; only used when no digest is available, which
    is acceptable for duplicate detection.
    """
    if not value:
        return "0" * HASH_LENGTH

    h = 0
    units = value.encode("utf-16-le")
    for i in range(0, len(units), 2):
        unit = units[i] | (units[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return format(abs(h), "x").zfill(HASH_LENGTH)[:HASH_LENGTH]


def calculation_fingerprint(
    pickup: str,
    delivery: str,
    shipping_date: Union[date, str],
    transport_type: str,
    vehicle_type: str,
    vehicle_value: str,
    premium_enhancements: bool,
    special_load: bool,
    inoperable: bool,
    supplementary_insurance: bool,
    final_price: float,
) -> str:
    if isinstance(shipping_date, date):
        shipping_date = shipping_date.isoformat()
    return "|".join([
        normalize_address(pickup),
        normalize_address(delivery),
        shipping_date,
        str(transport_type),
        str(vehicle_type),
        str(vehicle_value),
        "1" if premium_enhancements else "0",
        "1" if special_load else "0",
        "1" if inoperable else "0",
        "1" if supplementary_insurance else "0",
        f"{final_price:.2f}",
    ])


def calculation_hash(**fields) -> str:
    """Deterministic 16-hex key of a priced calculation, used for lead dedup."""
    fingerprint = calculation_fingerprint(**fields)
    try:
        digest = hashlib.new("sha256")
    except ValueError as e:
        logger.warning(f"sha256 unavailable ({e}), using fallback hash")
        return simple_hash(fingerprint)
    digest.update(fingerprint.encode("utf-8"))
    return digest.hexdigest()[:HASH_LENGTH]
