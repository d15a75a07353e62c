import pytest

from vweb3.abi import Parameter, canonical_signature, event_signature_hash, function_selector, parse_signature
from vweb3.errors import FormatError
from vweb3.events import EventDefinition

from conftest import APPROVAL_TOPIC, TRANSFER_TOPIC


@pytest.mark.parametrize(
    "name, types, selector",
    [
        ("transfer", ["address", "uint256"], "a9059cbb"),
        ("balanceOf", ["address"], "70a08231"),
        ("approve", ["address", "uint256"], "095ea7b3"),
        ("sam", ["bytes", "bool", "uint256[]"], "a5643bf2"),
        ("f", ["uint256", "uint32[]", "bytes10", "bytes"], "8be65246"),
    ],
)
def test_function_selector(name, types, selector):
    assert function_selector(name, types).hex() == selector


def test_selector_uses_canonical_types():
    assert function_selector("transfer", ["address", "uint"]) == function_selector("transfer", ["address", "uint256"])


def test_event_topics():
    assert event_signature_hash("Transfer", ["address", "address", "uint256"]).hex() == TRANSFER_TOPIC
    assert event_signature_hash("Approval", "address,address,uint256").hex() == APPROVAL_TOPIC


def test_canonical_signature_from_abi_inputs():
    inputs = [
        {"name": "order", "type": "tuple", "components": [{"name": "a", "type": "uint"}, {"name": "b", "type": "bytes"}]},
        {"name": "to", "type": "address"},
    ]
    assert canonical_signature("fill", inputs) == "fill((uint256,bytes),address)"


def test_parse_signature():
    assert parse_signature("transfer(address, uint)") == ("transfer", ("address", "uint256"))
    assert parse_signature("totalSupply()") == ("totalSupply", ())


@pytest.mark.parametrize("text", ["transfer", "transfer(address", "1bad(uint256)", "(uint256)", ""])
def test_parse_signature_rejects_malformed(text):
    with pytest.raises(FormatError):
        parse_signature(text)


def test_directly_built_parameters_hash_canonically():
    params = [Parameter("to", "address"), Parameter("value", "uint")]
    assert function_selector("transfer", params).hex() == "a9059cbb"
    definition = EventDefinition(
        name="Transfer",
        inputs=(Parameter("from", "address", True), Parameter("to", "address", True), Parameter("value", "uint")),
    )
    assert definition.signature == "Transfer(address,address,uint256)"
    assert definition.topic == TRANSFER_TOPIC
