"""Account identity helpers.

Identities are opaque comparable strings. Hex addresses are compared
case-insensitively, so they are normalised to their checksum form before
being used as ledger keys or admin slots.
"""

from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_null(identity: str | None) -> bool:
    """Check whether an identity is empty or the zero address.

    Parameters
    ----------
    identity : str | None
        Identity to check.

    Returns
    -------
    bool
        True if the identity is missing, blank or the zero address.
    """
    if identity is None or not identity.strip():
        return True
    identity = identity.strip()
    if not identity.startswith(("0x", "0X")):
        return False
    try:
        return int(identity, 16) == 0
    except ValueError:
        return False


def normalize(identity: str) -> str:
    """Normalise an identity for comparison and storage.

    Valid hex addresses are returned checksummed; anything else is returned
    stripped and unchanged.
    """
    identity = identity.strip()
    if Web3.is_address(identity):
        return Web3.to_checksum_address(identity)
    return identity


def same_identity(a: str | None, b: str | None) -> bool:
    """Compare two identities after normalisation."""
    if a is None or b is None:
        return False
    return normalize(a) == normalize(b)
