"""Agent wallet: balance reads and ETH transfers over JSON-RPC."""
import asyncio
import logging

from eth_account import Account
from web3 import Web3

logger = logging.getLogger(__name__)

TRANSFER_GAS = 21_000


def wei_to_eth(wei: int) -> float:
    return float(Web3.from_wei(wei, "ether"))


def explorer_address_url(explorer_url: str, address: str) -> str:
    return f"{explorer_url.rstrip('/')}/address/{address}"


class Wallet:
    """Signing wallet bound to one EVM chain.

    web3's HTTP provider is blocking, so the async methods run it in a
    worker thread.
    """

    def __init__(self, rpc_url: str, private_key: str, chain_id: int = 8453):
        if not private_key:
            raise ValueError("WALLET_PRIVATE_KEY is required")
        self.chain_id = chain_id
        self.account = Account.from_key(private_key)
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 20}))
        logger.info(
            "Wallet initialized",
            extra={"address": self.account.address, "chain_id": chain_id},
        )

    @property
    def address(self) -> str:
        return self.account.address

    def get_balance_wei(self) -> int:
        return self.w3.eth.get_balance(self.address)

    async def balance(self) -> float:
        """Balance in ETH."""
        wei = await asyncio.to_thread(self.get_balance_wei)
        return wei_to_eth(wei)

    def transfer(self, to: str, amount_eth: float) -> str:
        """Sign and broadcast a plain ETH transfer; waits for the receipt."""
        tx = {
            "to": Web3.to_checksum_address(to),
            "value": Web3.to_wei(amount_eth, "ether"),
            "nonce": self.w3.eth.get_transaction_count(self.address),
            "gas": TRANSFER_GAS,
            "gasPrice": self.w3.eth.gas_price,
            "chainId": self.chain_id,
        }
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=120)
        if receipt["status"] != 1:
            raise RuntimeError(f"Transfer reverted: {tx_hash.hex()}")
        return tx_hash.hex()

    async def send_eth(self, to: str, amount_eth: float) -> str:
        tx_hash = await asyncio.to_thread(self.transfer, to, amount_eth)
        logger.info(
            "ETH transfer confirmed",
            extra={"to": to, "amount_eth": amount_eth, "tx_hash": tx_hash},
        )
        return tx_hash
