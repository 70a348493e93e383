import pytest

from goodluck.constants import U128_MAX
from goodluck.events import APPROVAL, TRANSFER
from goodluck.token import ZERO_ADDRESS, FungibleToken, InMemoryToken


def test_token_satisfies_protocol(token):
    assert isinstance(token, FungibleToken)


def test_mint_transfer_and_allowance(chain, token: InMemoryToken):
    assert token.mint("a", 100)
    assert token.total_supply() == 100
    assert chain.events.last(TRANSFER).args == {"from": ZERO_ADDRESS, "to": "a", "value": 100}

    assert token.transfer("a", "b", 30)
    assert (token.balance_of("a"), token.balance_of("b")) == (70, 30)
    assert not token.transfer("a", "b", 71)

    assert token.approve("a", "spender", 50)
    assert chain.events.last(APPROVAL).args == {"owner": "a", "spender": "spender", "value": 50}
    assert not token.transfer_from("spender", "a", "c", 51)
    assert token.transfer_from("spender", "a", "c", 50)
    assert token.allowance("a", "spender") == 0
    assert token.balance_of("c") == 50


@pytest.mark.parametrize("amount", [-1, U128_MAX + 1, 1.5, True])
def test_token_refuses_bad_amounts(token, amount):
    assert not token.mint("a", amount)
    assert not token.transfer("a", "b", amount)


def test_token_state_rolls_back_with_the_host(chain, token):
    token.mint("a", 10)
    with pytest.raises(RuntimeError):
        with chain.atomic():
            token.transfer("a", "b", 10)
            raise RuntimeError("revert")
    assert token.balance_of("a") == 10
    assert token.balance_of("b") == 0


def test_event_log_filters(chain):
    chain.events.emit("x", "Ping", n=1)
    chain.mine(2)
    chain.events.emit("y", "Ping", n=2)
    chain.events.emit("x", "Pong", n=3, blob=b"\x01")

    assert [e.args["n"] for e in chain.events.get_logs(name="Ping")] == [1, 2]
    assert [e.args["n"] for e in chain.events.get_logs(address="x")] == [1, 3]
    assert [e.args["n"] for e in chain.events.get_logs(from_block=chain.height)] == [2, 3]
    assert len(list(chain.events.get_logs(limit=1))) == 1

    d = chain.events.last().to_dict()
    assert d["event"] == "Pong"
    assert d["logIndex"] == 2
    assert d["args"]["blob"] == "0x01"
