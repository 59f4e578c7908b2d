import pytest

from iccertified.ledger import (
    DEFAULT_FEE,
    DEFAULT_SUBACCOUNT,
    MAINNET_CYCLES_MINTING_CANISTER_ID,
    MAINNET_GOVERNANCE_CANISTER_ID,
    MAINNET_LEDGER_CANISTER_ID,
    AccountIdentifier,
    BadFee,
    InsufficientFunds,
    Memo,
    Subaccount,
    Tokens,
    TransferArgs,
    TransferError,
    TxCreatedInFuture,
    TxDuplicate,
    TxTooOld,
)
from iccertified.principal import Principal

ACCOUNT_HEX = "bdc4ee05d42cd0669786899f256c8fd7217fa71177bd1fa7b9534f568680a938"
OWNER_TEXT = "iooej-vlrze-c5tme-tn7qt-vqe7z-7bsj5-ebxlc-hlzgs-lueo3-3yast-pae"


def test_account_id():
    owner = Principal.from_text(OWNER_TEXT)
    assert str(AccountIdentifier.new(owner, DEFAULT_SUBACCOUNT)) == ACCOUNT_HEX


def test_account_id_try_from():
    data = bytearray.fromhex(ACCOUNT_HEX)
    assert str(AccountIdentifier.from_bytes(data)) == ACCOUNT_HEX
    data[0] = 0
    with pytest.raises(ValueError, match="CRC-32 checksum failed to verify"):
        AccountIdentifier.from_bytes(data)


def test_account_id_round_trip():
    owner = Principal.from_text(OWNER_TEXT)
    account = AccountIdentifier.new(owner, Subaccount(bytes([7]) * 32))
    assert AccountIdentifier.from_bytes(bytes(account)) == account


def test_account_id_wrong_length():
    with pytest.raises(ValueError):
        AccountIdentifier.from_bytes(bytes(31))


def test_ledger_canister_id():
    assert MAINNET_LEDGER_CANISTER_ID == Principal.from_text("ryjl3-tyaaa-aaaaa-aaaba-cai")


def test_governance_canister_id():
    assert MAINNET_GOVERNANCE_CANISTER_ID == Principal.from_text(
        "rrkah-fqaaa-aaaaa-aaaaq-cai"
    )


def test_cycles_minting_canister_id():
    assert MAINNET_CYCLES_MINTING_CANISTER_ID == Principal.from_text(
        "rkp4c-7iaaa-aaaaa-aaaca-cai"
    )


def test_tokens_display():
    assert str(Tokens.from_e8s(123_456_789)) == "1.23456789"
    assert str(Tokens.ZERO) == "0.00000000"
    assert str(DEFAULT_FEE) == "0.00010000"


def test_tokens_arithmetic():
    total = Tokens.from_e8s(5) + Tokens.from_e8s(7)
    assert total == Tokens.from_e8s(12)
    assert total - Tokens.from_e8s(2) == Tokens.from_e8s(10)
    total += Tokens.from_e8s(1)
    assert total.e8s == 13
    total -= Tokens.from_e8s(13)
    assert total == Tokens.ZERO


def test_tokens_overflow():
    with pytest.raises(OverflowError, match="overflowed"):
        Tokens.MAX + Tokens.from_e8s(1)


def test_tokens_underflow():
    with pytest.raises(OverflowError, match="underflowed"):
        Tokens.ZERO - Tokens.from_e8s(1)


def test_tokens_ordering():
    assert Tokens.from_e8s(1) < Tokens.from_e8s(2) < Tokens.MAX


def test_tokens_range_checked():
    with pytest.raises(ValueError):
        Tokens.from_e8s(-1)
    with pytest.raises(ValueError):
        Tokens.from_e8s(2**64)


def test_subaccount_length_checked():
    with pytest.raises(ValueError):
        Subaccount(bytes(5))


def test_transfer_args_defaults():
    to = AccountIdentifier.new(MAINNET_LEDGER_CANISTER_ID, DEFAULT_SUBACCOUNT)
    args = TransferArgs(
        memo=Memo(0), amount=Tokens.from_e8s(1_000_000), fee=DEFAULT_FEE, to=to
    )
    assert args.amount == Tokens.from_e8s(1_000_000)
    assert (args.from_subaccount, args.created_at_time) == (None, None)


@pytest.mark.parametrize(
    "error, message",
    [
        (BadFee(expected_fee=Tokens.from_e8s(10_000)), "transaction fee should be 0.00010000"),
        (
            InsufficientFunds(balance=Tokens.from_e8s(100_000_000)),
            "the debit account doesn't have enough funds to complete the transaction, "
            "current balance: 1.00000000",
        ),
        (
            TxTooOld(allowed_window_nanos=86_400_000_000_000),
            "transaction is older than 86400 seconds",
        ),
        (TxCreatedInFuture(), "transaction's created_at_time is in future"),
        (
            TxDuplicate(duplicate_of=42),
            "transaction is a duplicate of another transaction in block 42",
        ),
    ],
)
def test_transfer_error_messages(error, message):
    assert str(error) == message


def test_transfer_error_can_be_raised():
    with pytest.raises(TransferError) as info:
        raise TxDuplicate(duplicate_of=7)
    assert info.value == TxDuplicate(duplicate_of=7)