import pytest

from ethproofkit.signing import (
    batch_sign_message,
    batch_sign_messages,
    batch_verify_signatures,
    get_wallet_address,
    hash_message,
    parse_address,
    sign_message,
    verify_signature,
    verify_signatures,
)

ANVIL_KEY_1 = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ANVIL_KEY_2 = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
ANVIL_ADDRESS_1 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ANVIL_ADDRESS_2 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

SECP256K1_ORDER = int("fffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141", 16)


def test_sign_message_basic():
    signature = sign_message(ANVIL_KEY_1, "Hello, test world!")
    assert signature.r != 0
    assert signature.s != 0
    assert signature.v in (27, 28)


def test_verify_signature_valid():
    message = "Test message for verification"
    signature = sign_message(ANVIL_KEY_1, message)
    assert verify_signature(message, signature, parse_address(ANVIL_ADDRESS_1)) is True


def test_verify_signature_wrong_message():
    signature = sign_message(ANVIL_KEY_1, "Original message")
    assert verify_signature("Wrong message", signature, ANVIL_ADDRESS_1) is False


def test_verify_signature_wrong_address():
    signature = sign_message(ANVIL_KEY_1, "Test message")
    assert verify_signature("Test message", signature, ANVIL_ADDRESS_2) is False


def test_sign_with_different_keys():
    message = "Same message, different signers"
    sig1 = sign_message(ANVIL_KEY_1, message)
    sig2 = sign_message(ANVIL_KEY_2, message)
    assert sig1.r != sig2.r
    assert sig1.s != sig2.s
    assert verify_signature(message, sig1, ANVIL_ADDRESS_1) is True
    assert verify_signature(message, sig2, ANVIL_ADDRESS_2) is True


def test_get_wallet_address():
    assert get_wallet_address(ANVIL_KEY_1) == parse_address(ANVIL_ADDRESS_1)


def test_get_wallet_address_invalid_key():
    with pytest.raises(ValueError):
        get_wallet_address("0xinvalid")


def test_batch_sign_messages():
    messages = ["First message", "Second message", "Third message"]
    signatures = batch_sign_messages(ANVIL_KEY_1, messages)
    assert len(signatures) == len(messages)
    for message, signature in zip(messages, signatures):
        assert verify_signature(message, signature, ANVIL_ADDRESS_1) is True


def test_batch_verify_signatures():
    messages = ["Msg 1", "Msg 2", "Msg 3"]
    signatures = batch_sign_messages(ANVIL_KEY_1, messages)
    results = batch_verify_signatures(messages, signatures, ANVIL_ADDRESS_1)
    assert results == [True, True, True]


def test_batch_verify_length_mismatch():
    signatures = batch_sign_messages(ANVIL_KEY_1, ["Single msg"])
    with pytest.raises(ValueError, match="length mismatch"):
        batch_verify_signatures(["Msg 1", "Msg 2"], signatures, ANVIL_ADDRESS_1)


def test_verify_signatures_all_and_mismatch():
    messages = ["Msg 1", "Msg 2"]
    signatures = batch_sign_messages(ANVIL_KEY_1, messages)
    assert verify_signatures(messages, signatures, ANVIL_ADDRESS_1) is True
    assert verify_signatures(messages, signatures, ANVIL_ADDRESS_2) is False
    assert verify_signatures(["Msg 1", "Other"], signatures, ANVIL_ADDRESS_1) is False
    with pytest.raises(ValueError):
        verify_signatures(messages, signatures[:1], ANVIL_ADDRESS_1)


def test_batch_sign_message_with_several_keys():
    message = "Shared message"
    signatures = batch_sign_message(message, [ANVIL_KEY_1, ANVIL_KEY_2])
    assert len(signatures) == 2
    assert verify_signature(message, signatures[0], ANVIL_ADDRESS_1) is True
    assert verify_signature(message, signatures[1], ANVIL_ADDRESS_2) is True


def test_empty_message():
    signature = sign_message(ANVIL_KEY_1, "")
    assert verify_signature("", signature, ANVIL_ADDRESS_1) is True


def test_unicode_message():
    message = "Hello, 世界! 🌍 Ethereum signatures work with unicode! 🚀"
    signature = sign_message(ANVIL_KEY_1, message)
    assert verify_signature(message, signature, ANVIL_ADDRESS_1) is True


def test_long_message():
    message = "A" * 1000
    signature = sign_message(ANVIL_KEY_1, message)
    assert verify_signature(message, signature, ANVIL_ADDRESS_1) is True


def test_signature_deterministic():
    sig1 = sign_message(ANVIL_KEY_1, "Deterministic test")
    sig2 = sign_message(ANVIL_KEY_1, "Deterministic test")
    assert (sig1.r, sig1.s, sig1.v) == (sig2.r, sig2.s, sig2.v)


def test_cross_wallet_verification_fails():
    signature = sign_message(ANVIL_KEY_1, "Cross verification test")
    assert verify_signature("Cross verification test", signature, ANVIL_ADDRESS_2) is False


def test_signature_components_range():
    signature = sign_message(ANVIL_KEY_1, "Range test")
    assert signature.v in (27, 28)
    assert signature.r != 0
    assert signature.s != 0
    assert signature.s <= SECP256K1_ORDER // 2


def test_hash_message_str_and_bytes_agree():
    assert hash_message("Msg 1") == hash_message(b"Msg 1")
    assert hash_message("Msg 1") != hash_message("Msg 2")
    assert len(hash_message("")) == 32


def test_parse_address_forms():
    raw = parse_address(ANVIL_ADDRESS_1)
    assert raw == bytes.fromhex(ANVIL_ADDRESS_1[2:])
    assert parse_address(ANVIL_ADDRESS_1[2:].lower()) == raw
    assert parse_address(raw) == raw
    with pytest.raises(ValueError):
        parse_address("0x1234")
    with pytest.raises(ValueError):
        parse_address(b"\x00" * 19)