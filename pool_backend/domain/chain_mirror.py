"""
Best-effort mirror of player sessions onto the game's stats contract.

The mirror is never authoritative. Every call logs and swallows its own
failures so that a missing or unhealthy chain cannot affect logins.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from web3 import Web3

log = logging.getLogger("chain_mirror")

_STATS_COMPONENTS = [
    {"name": "totalTimePlayed", "type": "uint256"},
    {"name": "totalGamesPlayedVsCPU", "type": "uint256"},
    {"name": "totalGamesWonVsCPU", "type": "uint256"},
    {"name": "totalGamesPlayedVsHuman", "type": "uint256"},
    {"name": "totalGamesWonVsHuman", "type": "uint256"},
    {"name": "totalBallsPocketed", "type": "uint256"},
    {"name": "ttBestScore", "type": "uint256"},
    {"name": "matrixBestScore", "type": "uint256"},
]

# Account stats keys in contract tuple order
STATS_FIELDS = [
    "total_time_played",
    "total_games_played_vs_cpu",
    "total_games_won_vs_cpu",
    "total_games_played_vs_human",
    "total_games_won_vs_human",
    "total_balls_pocketed",
    "tt_best_score",
    "matrix_best_score",
]

CONTRACT_ABI = [
    {
        "type": "function",
        "name": "recordSession",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "_user", "type": "address"},
            {"name": "_stats", "type": "tuple", "components": _STATS_COMPONENTS},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "getUserLoginCount",
        "stateMutability": "view",
        "inputs": [{"name": "_user", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getLatestSession",
        "stateMutability": "view",
        "inputs": [{"name": "_user", "type": "address"}],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [
                    {"name": "walletAddress", "type": "address"},
                    {"name": "loginCount", "type": "uint256"},
                    {"name": "timestamp", "type": "uint256"},
                    {"name": "stats", "type": "tuple", "components": _STATS_COMPONENTS},
                ],
            }
        ],
    },
    {
        "type": "function",
        "name": "getTotalUsers",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "totalSessions",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


class ChainMirror:
    def __init__(self, rpc_url=None, private_key=None, contract_address=None, max_workers: int = 2):
        self.rpc_url = rpc_url
        self._private_key = private_key
        self.contract_address = contract_address
        self._max_workers = max_workers
        self._web3 = None
        self._operator = None
        self._contract = None
        self._executor = None
        self._ready = False

    def initialize(self) -> None:
        if not self.rpc_url:
            log.warning("BLOCKCHAIN_RPC_URL not set; chain mirror disabled")
            return
        if not self._private_key:
            log.warning("OPERATOR_PRIVATE_KEY not set; chain mirror disabled")
            return
        if not self.contract_address:
            log.warning("CONTRACT_ADDRESS not set; chain mirror disabled")
            return

        try:
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url))
            self._operator = self._web3.eth.account.from_key(self._private_key)
            self._contract = self._web3.eth.contract(
                address=Web3.to_checksum_address(self.contract_address), abi=CONTRACT_ABI
            )
            chain_id = self._web3.eth.chain_id
            log.info(f"Chain mirror connected to chain {chain_id} as {self._operator.address}")
            self._ready = True
        except Exception as e:
            log.error(f"Failed to initialise chain mirror: {e}")
            self._ready = False

    def is_ready(self) -> bool:
        return self._ready

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    @staticmethod
    def stats_tuple(stats: dict) -> tuple:
        return tuple(int(stats.get(field) or 0) for field in STATS_FIELDS)

    def record_session(self, wallet_address: str, stats: dict):
        if not self._ready:
            log.warning("Chain mirror not ready; skipping session recording")
            return None

        try:
            log.info(f"Recording session for {wallet_address} on chain")
            call = self._contract.functions.recordSession(
                Web3.to_checksum_address(wallet_address), self.stats_tuple(stats)
            )
            tx = call.build_transaction(
                {
                    "from": self._operator.address,
                    "nonce": self._web3.eth.get_transaction_count(self._operator.address, "pending"),
                }
            )
            signed = self._operator.sign_transaction(tx)
            tx_hash = self._web3.eth.send_raw_transaction(signed.raw_transaction)
            log.info(f"Session transaction sent: {tx_hash.hex()}")

            receipt = self._web3.eth.wait_for_transaction_receipt(tx_hash)
            log.info(
                f"Session recorded in block {receipt['blockNumber']}, gas used {receipt['gasUsed']}"
            )
            return {
                "success": True,
                "transactionHash": Web3.to_hex(receipt["transactionHash"]),
                "blockNumber": receipt["blockNumber"],
                "gasUsed": str(receipt["gasUsed"]),
            }
        except Exception as e:
            log.error(f"Failed to record session for {wallet_address}: {e}")
            return {"success": False, "error": str(e)}

    def record_session_async(self, wallet_address: str, stats: dict):
        """Queue a session recording without waiting for it."""
        if not self._ready:
            return None
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="chain-mirror"
            )
        future = self._executor.submit(self.record_session, wallet_address, dict(stats))
        future.add_done_callback(lambda f: self._log_recorded(wallet_address, f))
        return future

    @staticmethod
    def _log_recorded(wallet_address, future) -> None:
        if future.exception() is not None:
            log.error(f"Chain session recording for {wallet_address} crashed: {future.exception()}")
            return
        result = future.result()
        if result and result.get("success"):
            log.info(f"Chain session recorded for {wallet_address}: {result['transactionHash']}")

    def get_login_count(self, wallet_address: str):
        if not self._ready:
            return None
        try:
            return int(
                self._contract.functions.getUserLoginCount(
                    Web3.to_checksum_address(wallet_address)
                ).call()
            )
        except Exception as e:
            log.error(f"Failed to read login count for {wallet_address}: {e}")
            return None

    def get_latest_session(self, wallet_address: str):
        if not self._ready:
            return None
        try:
            wallet, login_count, timestamp, stats = self._contract.functions.getLatestSession(
                Web3.to_checksum_address(wallet_address)
            ).call()
        except Exception as e:
            log.error(f"Failed to read latest session for {wallet_address}: {e}")
            return None

        if int(login_count) == 0:
            return None
        return {
            "walletAddress": wallet,
            "loginCount": int(login_count),
            "timestamp": int(timestamp),
            "stats": {
                component["name"]: int(value)
                for component, value in zip(_STATS_COMPONENTS, stats)
            },
        }

    def get_stats(self):
        if not self._ready:
            return None
        try:
            return {
                "totalUsers": int(self._contract.functions.getTotalUsers().call()),
                "totalSessions": int(self._contract.functions.totalSessions().call()),
            }
        except Exception as e:
            log.error(f"Failed to read contract stats: {e}")
            return None
