"""Deterministic remote folder names for upload requests.

The name is a pure function of (order_reference, buyer_name) so a retried upload
addresses the same folder. Each component is percent-encoded, including the
hyphen used as separator, which keeps the mapping injective.
"""

from urllib.parse import quote

FOLDER_PREFIX = "Order"


def _encode_component(value: str) -> str:
    # quote() leaves "-" alone; encode it so it only ever appears as a separator
    return quote(value, safe=" ").replace("-", "%2D")


def folder_name_for(order_reference: str, buyer_name: str) -> str:
    """Build the folder name for an order

    Example:
        >>> folder_name_for("1001", "Jane Doe")
        'Order-1001-Jane Doe'
        >>> folder_name_for("1-2", "A/B")
        'Order-1%2D2-A%2FB'
    """
    return f"{FOLDER_PREFIX}-{_encode_component(order_reference)}-{_encode_component(buyer_name)}"
