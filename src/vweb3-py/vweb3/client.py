import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import requests

from .contract import Contract
from .errors import RpcError
from .events import decode_search_log
from .rpc_client import HttpProvider, init_provider

logger = logging.getLogger(__name__)


def _require_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be a number.")
    return value


def _as_list(value: Union[str, Sequence[str]], field: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ValueError(f"{field} must be a string or a list.")


class Vweb3:
    """Node client: forwards typed arguments to the node's RPC methods."""

    def __init__(self, provider: Any) -> None:
        self.provider = init_provider(provider)

    @classmethod
    def from_config(cls, config: Any) -> "Vweb3":
        provider = HttpProvider(
            config.rpc_url,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            backoff_seconds=config.backoff_seconds,
        )
        return cls(provider)

    def contract(self, address: str, abi: Sequence[Dict[str, Any]]) -> Contract:
        return Contract(self.provider, address, abi)

    def raw_call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        return self.provider.raw_call(method, params or [])

    # ---------- misc ----------

    def is_connected(self) -> bool:
        try:
            return isinstance(self.raw_call("getnetworkinfo"), dict)
        except (RpcError, requests.RequestException) as exc:
            logger.debug("Node not reachable: %s", exc)
            return False

    # ---------- blockchain ----------

    def get_account_info(self, contract_address: str) -> Any:
        return self.raw_call("getaccountinfo", [contract_address])

    def get_best_block_hash(self) -> Any:
        return self.raw_call("getbestblockhash")

    def get_block(self, block_hash: str, verbose: bool = True) -> Any:
        return self.raw_call("getblock", [block_hash, verbose])

    def get_blockchain_info(self) -> Any:
        return self.raw_call("getblockchaininfo")

    def get_block_count(self) -> Any:
        return self.raw_call("getblockcount")

    def get_block_hash(self, block_num: int) -> Any:
        return self.raw_call("getblockhash", [block_num])

    def get_block_header(self, block_hash: str, verbose: bool = True) -> Any:
        return self.raw_call("getblockheader", [block_hash, verbose])

    def get_chain_tips(self) -> Any:
        return self.raw_call("getchaintips")

    def get_checkpoint(self) -> Any:
        return self.raw_call("getcheckpoint")

    def get_difficulty(self) -> Any:
        return self.raw_call("getdifficulty")

    def get_mempool_ancestors(self, txid: str, verbose: bool = True) -> Any:
        return self.raw_call("getmempoolancestors", [txid, verbose])

    def get_mempool_descendants(self, txid: str, verbose: bool = True) -> Any:
        return self.raw_call("getmempooldescendants", [txid, verbose])

    def get_mempool_entry(self, txid: str) -> Any:
        return self.raw_call("getmempoolentry", [txid])

    def get_mempool_info(self) -> Any:
        return self.raw_call("getmempoolinfo")

    def get_storage(self, contract_address: str) -> Any:
        return self.raw_call("getstorage", [contract_address])

    def get_transaction_receipt(self, txid: str) -> Any:
        return self.raw_call("gettransactionreceipt", [txid])

    def list_contracts(self, starting_acct_index: int = 1, max_display: int = 20) -> Any:
        return self.raw_call("listcontracts", [starting_acct_index, max_display])

    def make_key_pair(self) -> Any:
        return self.raw_call("makekeypair")

    def precious_block(self, block_hash: str) -> Any:
        return self.raw_call("preciousblock", [block_hash])

    def prune_blockchain(self, height: int) -> Any:
        return self.raw_call("pruneblockchain", [height])

    def search_logs(
        self,
        from_block: int,
        to_block: int,
        addresses: Union[str, Sequence[str]],
        topics: Union[str, Sequence[str]],
        contract_metadata: Any = None,
        remove_hex_prefix: bool = False,
    ) -> List[Dict[str, Any]]:
        """Search logs in a block range and decode them against ``contract_metadata``.

        ``to_block`` of -1 searches up to the chain tip.
        """
        _require_int(from_block, "from_block")
        _require_int(to_block, "to_block")
        address_filter = {"addresses": _as_list(addresses, "addresses")}
        topic_filter = {"topics": _as_list(topics, "topics")}
        results = self.raw_call("searchlogs", [from_block, to_block, address_filter, topic_filter])
        return decode_search_log(results, contract_metadata, remove_hex_prefix)

    def send_checkpoint(self, block_hash: str) -> Any:
        return self.raw_call("sendcheckpoint", [block_hash])

    def verify_chain(self, check_level: int = 3, nblocks: int = 6) -> Any:
        return self.raw_call("verifychain", [check_level, nblocks])

    def verify_txout_proof(self, txout_proof: str) -> Any:
        return self.raw_call("verifytxoutproof", [txout_proof])

    # ---------- generating ----------

    def generate(self, blocks: int, max_tries: int = 1000000) -> Any:
        _require_int(blocks, "blocks")
        return self.raw_call("generate", [blocks, max_tries])

    def generate_to_address(self, blocks: int, address: str, max_tries: int = 1000000) -> Any:
        _require_int(blocks, "blocks")
        if not isinstance(address, str):
            raise ValueError("address must be a string.")
        return self.raw_call("generatetoaddress", [blocks, address, max_tries])

    # ---------- network ----------

    def get_peer_info(self) -> Any:
        return self.raw_call("getpeerinfo")

    # ---------- raw transactions ----------

    def get_hex_address(self, address: str) -> Any:
        return self.raw_call("gethexaddress", [address])

    def from_hex_address(self, hex_address: str) -> Any:
        return self.raw_call("fromhexaddress", [hex_address])

    # ---------- util ----------

    def validate_address(self, address: str) -> Any:
        return self.raw_call("validateaddress", [address])

    # ---------- wallet ----------

    def backup_wallet(self, destination: str) -> Any:
        return self.raw_call("backupwallet", [destination])

    def dump_private_key(self, address: str) -> Any:
        return self.raw_call("dumpprivkey", [address])

    def encrypt_wallet(self, passphrase: str) -> Any:
        return self.raw_call("encryptwallet", [passphrase])

    def get_account(self, address: str) -> Any:
        return self.raw_call("getaccount", [address])

    def get_account_address(self, acct_name: str = "") -> Any:
        return self.raw_call("getaccountaddress", [acct_name])

    def get_addresses_by_account(self, acct_name: str = "") -> Any:
        return self.raw_call("getaddressesbyaccount", [acct_name])

    def get_new_address(self, acct_name: str = "") -> Any:
        return self.raw_call("getnewaddress", [acct_name])

    def get_transaction(self, txid: str) -> Any:
        return self.raw_call("gettransaction", [txid])

    def get_wallet_info(self) -> Any:
        return self.raw_call("getwalletinfo")

    def get_unconfirmed_balance(self) -> Any:
        return self.raw_call("getunconfirmedbalance")

    def import_address(self, address: str, label: str = "", rescan: bool = True) -> Any:
        return self.raw_call("importaddress", [address, label, rescan])

    def import_private_key(self, private_key: str, label: str = "", rescan: bool = True) -> Any:
        return self.raw_call("importprivkey", [private_key, label, rescan])

    def import_public_key(self, public_key: str, label: str = "", rescan: bool = True) -> Any:
        return self.raw_call("importpubkey", [public_key, label, rescan])

    def import_wallet(self, filename: str) -> Any:
        return self.raw_call("importwallet", [filename])

    def list_address_groupings(self) -> Any:
        return self.raw_call("listaddressgroupings")

    def list_lock_unspent(self) -> Any:
        return self.raw_call("listlockunspent")

    def list_unspent(self) -> Any:
        return self.raw_call("listunspent")

    def send_to_address(
        self,
        address: str,
        amount: float,
        comment: str = "",
        comment_to: str = "",
        subtract_fee_from_amount: bool = False,
        replaceable: bool = True,
        conf_target: int = 6,
        estimate_mode: str = "UNSET",
        sender_address: Optional[str] = None,
        change_to_sender: bool = False,
    ) -> Any:
        if estimate_mode not in {"UNSET", "ECONOMICAL", "CONSERVATIVE"}:
            raise ValueError("estimate_mode must be one of: UNSET, ECONOMICAL, CONSERVATIVE.")
        params: List[Any] = [
            address,
            amount,
            comment,
            comment_to,
            subtract_fee_from_amount,
            replaceable,
            conf_target,
            estimate_mode,
        ]
        # sender is positional; only send it (and what follows) when given
        if sender_address:
            params.extend([sender_address, change_to_sender])
        return self.raw_call("sendtoaddress", params)

    def set_tx_fee(self, amount: float) -> Any:
        return self.raw_call("settxfee", [amount])

    def wallet_lock(self) -> Any:
        return self.raw_call("walletlock")

    def wallet_passphrase(self, passphrase: str, timeout: int, staking_only: bool = False) -> Any:
        return self.raw_call("walletpassphrase", [passphrase, timeout, staking_only])

    def wallet_passphrase_change(self, old_passphrase: str, new_passphrase: str) -> Any:
        return self.raw_call("walletpassphrasechange", [old_passphrase, new_passphrase])

    def is_wallet_encrypted(self) -> bool:
        info = self.get_wallet_info()
        return isinstance(info, dict) and "unlocked_until" in info
