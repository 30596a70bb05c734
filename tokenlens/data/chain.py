"""
TokenLens - Chain Detection & Token Info Resolution
"""
from typing import Any, Dict

from tokenlens.data.models import ChainInfo, DataSource, ProviderSnapshot, TokenInfo
from tokenlens.utils.helpers import is_contract_address

# CoinGecko asset_platform_id -> chain name
PLATFORM_MAP: Dict[str, str] = {
    "ethereum": "ethereum",
    "binance-smart-chain": "bsc",
    "polygon-pos": "polygon",
    "solana": "solana",
    "avalanche": "avalanche",
    "arbitrum-one": "arbitrum",
    "optimistic-ethereum": "optimism",
}

# Metadata lookup order for display fields
METADATA_PRIORITY = (DataSource.COINGECKO, DataSource.BIRDEYE, DataSource.DEXSCREENER)


def detect_chain(token: str, snapshots: Dict[DataSource, ProviderSnapshot]) -> ChainInfo:
    """
    Detect the blockchain of a token identifier.
    DexScreener's pair chain wins, then CoinGecko's asset platform, then the
    address format as a fallback.
    """
    blockchain = "unknown"
    chain_id = ""

    dex = snapshots.get(DataSource.DEXSCREENER)
    if dex and dex.chain_id:
        blockchain = dex.chain_id
        chain_id = dex.chain_id

    gecko = snapshots.get(DataSource.COINGECKO)
    if gecko and gecko.asset_platform:
        blockchain = PLATFORM_MAP.get(gecko.asset_platform, blockchain)

    if blockchain == "unknown":
        if len(token) == 42 and token.startswith("0x"):
            blockchain = "ethereum"
        elif 32 <= len(token) <= 44 and not token.startswith("0x"):
            blockchain = "solana"

    return ChainInfo(
        blockchain=blockchain,
        chain_id=chain_id,
        is_contract_address=is_contract_address(token),
        address_format="evm" if token.startswith("0x") else "solana",
    )


def _first(snapshots: Dict[DataSource, ProviderSnapshot], attr: str) -> Any:
    for source in METADATA_PRIORITY:
        snap = snapshots.get(source)
        if snap is not None and getattr(snap, attr):
            return getattr(snap, attr)
    return None


def resolve_token_info(token: str, snapshots: Dict[DataSource, ProviderSnapshot],
                       chain: ChainInfo) -> TokenInfo:
    """Resolve display metadata, taking each field from the first provider that has it."""
    gecko = snapshots.get(DataSource.COINGECKO)

    if chain.is_contract_address:
        address = token
    else:
        address = (gecko.contract_address if gecko and gecko.contract_address else token)

    social_links = {
        "twitter": gecko.twitter if gecko else "",
        "telegram": gecko.telegram if gecko else "",
    }

    return TokenInfo(
        name=_first(snapshots, "name") or "Unknown Token",
        symbol=(_first(snapshots, "symbol") or "UNKNOWN").upper(),
        address=address,
        blockchain=chain.blockchain,
        chain_id=chain.chain_id,
        image_url=_first(snapshots, "image_url") or "",
        description=(gecko.description if gecko and gecko.description else "No description available"),
        websites=_first(snapshots, "websites") or [],
        social_links=social_links,
    )
