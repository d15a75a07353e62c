import pytest

from vweb3.abi import encode_parameters
from vweb3.errors import FormatError
from vweb3.events import EventDefinition, EventTable, decode_search_log

from conftest import ALICE, BOB, ERC20_ABI, TOKEN_ADDRESS, address_topic


def test_decodes_in_order_and_keeps_envelope(transfer_log):
    unknown = {"address": TOKEN_ADDRESS, "topics": ["00" * 32], "data": ""}
    results = decode_search_log([transfer_log, unknown], {"Token": ERC20_ABI})
    assert results == [
        {
            "blockNumber": 120,
            "transactionHash": "ab" * 32,
            "address": TOKEN_ADDRESS,
            "event": "Transfer",
            "args": {"from": ALICE, "to": BOB, "value": 1000},
        },
        unknown,
    ]


def test_remove_hex_prefix(transfer_log):
    [decoded] = decode_search_log([dict(transfer_log, address="0x" + TOKEN_ADDRESS)], [*ERC20_ABI], True)
    assert decoded["address"] == TOKEN_ADDRESS
    assert decoded["args"] == {"from": ALICE[2:], "to": BOB[2:], "value": 1000}


def test_remove_hex_prefix_covers_envelope_fields(transfer_log):
    entry = dict(transfer_log, transactionHash="0x" + "ab" * 32)
    plain = decode_search_log([entry], {"Token": ERC20_ABI})[0]
    stripped = decode_search_log([entry], {"Token": ERC20_ABI}, True)[0]
    assert plain["transactionHash"] == "0x" + "ab" * 32
    assert stripped["transactionHash"] == "ab" * 32
    assert stripped["blockNumber"] == plain["blockNumber"] == 120
    assert stripped["args"]["value"] == plain["args"]["value"]


def test_receipt_entries_decode_nested_logs(transfer_log):
    receipt = {"blockHash": "cd" * 32, "blockNumber": 120, "log": [transfer_log]}
    [decoded] = decode_search_log([receipt], {"Token": ERC20_ABI})
    assert decoded["blockHash"] == "cd" * 32
    assert decoded["log"][0]["event"] == "Transfer"
    assert receipt["log"][0] is transfer_log


def test_failed_entry_does_not_abort_batch(transfer_log):
    broken = dict(transfer_log, data="")
    results = decode_search_log([broken, transfer_log], {"Token": ERC20_ABI})
    assert results[0]["error"]["kind"] == "DecodeError"
    assert results[0]["data"] == ""
    assert results[1]["event"] == "Transfer"


def test_non_object_entry_reported_as_error():
    [result] = decode_search_log(["garbage"], {"Token": ERC20_ABI})
    assert result == {
        "entry": "garbage",
        "error": {"kind": "FormatError", "message": "Log entry must be an object.", "param": None, "location": ""},
    }


def test_accepts_prebuilt_table(transfer_log):
    table = EventTable.from_abi(ERC20_ABI, TOKEN_ADDRESS)
    assert decode_search_log([transfer_log], table)[0]["event"] == "Transfer"


def test_empty_metadata_passes_everything_through(transfer_log):
    assert decode_search_log([transfer_log], None) == [transfer_log]


def test_result_must_be_a_list():
    with pytest.raises(FormatError):
        decode_search_log({"log": []}, {})


def test_remove_hex_prefix_keeps_string_arguments():
    note_abi = [
        {
            "type": "event",
            "name": "Note",
            "inputs": [
                {"name": "author", "type": "address", "indexed": True},
                {"name": "text", "type": "string", "indexed": False},
                {"name": "tag", "type": "bytes2", "indexed": False},
            ],
        }
    ]
    topic = EventDefinition.from_abi(note_abi[0]).topic
    data = encode_parameters(["string", "bytes2"], ["0xcafe is my name", "0xbeef"])
    entry = {"address": TOKEN_ADDRESS, "topics": [topic, address_topic(ALICE)], "data": data}
    [decoded] = decode_search_log([entry], {"Notes": note_abi}, True)
    assert decoded["args"] == {"author": ALICE[2:], "text": "0xcafe is my name", "tag": "beef"}
