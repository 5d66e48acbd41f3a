from functools import lru_cache

from pydantic_settings import BaseSettings
from solders.pubkey import Pubkey


class Settings(BaseSettings):
    solana_rpc: str = "https://api.mainnet-beta.solana.com"
    helius_rpc_url: str = ""
    log_level: str = "INFO"

    # Solsea escrow v3 (source in resources/solsea_escrow3).
    solsea_program_id: str = "617jbWo616ggkDxvW1Le8pV38XLbVSyWY8ae6QUmGBAU"
    # Taken from mainnet buy 5eE2FRxu...sp1f7fVkAVXi5P6ZbPeZYjoZJi2K7Abp1sQWMLaB.
    # The escrow's authority_account is documented as the fee account but the
    # program rejects it; this key is the one the live program accepts.
    solsea_platform_fee_account: str = "6T4f5bdrd9ffTtehqAj9BGyxahysRGcaUZeDzA1XN52N"

    # Magic Eden escrow (closed source, layout reverse engineered from txs).
    magic_eden_program_id: str = "MEisE1HzehtrDpAAT8PnLHjpSSkRYakotTuJRPjTpo8"
    # Read-only account present at index 4 of every observed buy. Looks like a
    # program authority; purpose unconfirmed.
    magic_eden_authority: str = "GUfCR9mK6azb9vcpsxgXyj7XRPAKJd4KMHTTVvtncGgp"
    # Writable fee receiver at index 7 of observed buys.
    magic_eden_platform_fee_account: str = "2NZukH2TXpcuZP4htiuT8CFxcaQSWzkkR6kepSWnZ24Q"
    # First 8 data bytes of buy 2TGe7grZ...ZtWTndnM9X8ifo.
    magic_eden_buy_selector: str = "438e36d81f1d1b5c"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def load_pubkey(settings: Settings, field: str) -> Pubkey:
    value = getattr(settings, field)
    if not value:
        raise RuntimeError(f"{field} must be set to a valid pubkey")
    try:
        return Pubkey.from_string(value)
    except Exception as exc:  # noqa: BLE001
        raise RuntimeError(f"{field} is not a valid pubkey: {exc}") from exc


def load_selector(settings: Settings, field: str, length: int = 8) -> bytes:
    value = getattr(settings, field)
    try:
        raw = bytes.fromhex(value)
    except ValueError as exc:
        raise RuntimeError(f"{field} is not valid hex: {exc}") from exc
    if len(raw) != length:
        raise RuntimeError(f"{field} must be {length} bytes, got {len(raw)}")
    return raw
