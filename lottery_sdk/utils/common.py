"""Common helpers for addresses and indexer keys."""


def shorten_eth_address(address: str) -> str:
    """Shorten an Ethereum address for display: '0x123456...abcd'.
    Returns the first 6 and last 4 characters, separated by '...'.
    Handles addresses with or without '0x' prefix.
    """
    if not address:
        return ""
    addr = address.lower()
    if addr.startswith("0x"):
        addr = addr[2:]
    if len(addr) < 10:
        return f"0x{addr}"
    return f"0x{addr[:6]}...{addr[-4:]}"


def normalize_address(address: str) -> str:
    """Lowercase an address so it matches the indexer's entity ids."""
    return address.strip().lower()


def draw_entity_id(contract_address: str, draw_id: int) -> str:
    """Composite indexer key for a draw: '<contract lowercased>_<draw id>'."""
    return f"{normalize_address(contract_address)}_{int(draw_id)}"
