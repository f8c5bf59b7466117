"""Synthetic log factories for testing."""

from __future__ import annotations

from eth_abi import encode

from evm_sniper.chain.decoder import POOL_CREATED_TOPIC, TRANSFER_TOPIC

WETH = "0x4200000000000000000000000000000000000006"
FACTORY = "0x33128a8fc17869897dce68ed026d694621f6fdfd"
TOKEN = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
OTHER_TOKEN = "0x1234567890123456789012345678901234567890"
POOL = "0x9999999999999999999999999999999999999999"
ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"


def address_topic(address: str) -> str:
    """Left-pad a 20-byte address into a 32-byte topic word."""
    return "0x" + "00" * 12 + address.lower()[2:]


def uint_topic(value: int) -> str:
    return "0x" + encode(["uint256"], [value]).hex()


def make_transfer_log(
    from_address: str = ALICE,
    to_address: str = BOB,
    value: int = 10**18,
    contract: str = TOKEN,
    block_number: int = 1_000_000,
    log_index: int = 0,
) -> dict:
    return {
        "address": contract,
        "topics": [TRANSFER_TOPIC, address_topic(from_address), address_topic(to_address)],
        "data": "0x" + encode(["uint256"], [value]).hex(),
        "blockNumber": hex(block_number),
        "transactionHash": "0x" + f"{block_number:064x}",
        "logIndex": hex(log_index),
    }


def make_nft_transfer_log(token_id: int = 7) -> dict:
    """ERC721 Transfer: same topic hash, tokenId indexed, empty-ish data."""
    return {
        "address": TOKEN,
        "topics": [
            TRANSFER_TOPIC,
            address_topic(ALICE),
            address_topic(BOB),
            uint_topic(token_id),
        ],
        "data": "0x" + "00" * 32,
        "blockNumber": "0x10",
    }


def make_pool_created_log(
    token0: str = WETH,
    token1: str = TOKEN,
    fee: int = 3000,
    tick_spacing: int = 60,
    pool: str = POOL,
    block_number: int = 1_000_000,
) -> dict:
    return {
        "address": FACTORY,
        "topics": [
            POOL_CREATED_TOPIC,
            address_topic(token0),
            address_topic(token1),
            uint_topic(fee),
        ],
        "data": "0x" + encode(["int24", "address"], [tick_spacing, pool]).hex(),
        "blockNumber": hex(block_number),
        "transactionHash": "0x" + f"{block_number:064x}",
        "logIndex": "0x0",
    }
