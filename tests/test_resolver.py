from __future__ import annotations

import pytest

from linea_eligibility.calldata import CallingMode
from linea_eligibility.decoder import EligibilityResult
from linea_eligibility.errors import ConfigurationError, TransportError
from linea_eligibility.resolver import ModeResolver

from ._rpc_helpers import (
    FALSE_WORD,
    SELECTOR,
    TRUE_WORD,
    FakeCaller,
    _config,
    _revert,
    _transport,
    _words,
)

ADDR = "0x" + "ab" * 20


def _by_mode(address_arg, sender_arg, leaf_arg):
    """Dispatch on the calldata shape each mode produces."""

    def responder(call):
        if call["from"]:
            return sender_arg(call)
        if call["data"].startswith(SELECTOR + "0" * 24):
            return address_arg(call)
        return leaf_arg(call)

    return responder


def _ok(result):
    return lambda _call: result


def test_first_mode_success_stops_probing():
    caller = FakeCaller(_ok(TRUE_WORD))
    result = ModeResolver(_config(), caller).resolve(ADDR)
    assert result.eligible is True
    assert len(caller.calls) == 1


def test_auto_falls_through_reverts_to_leaf_mode():
    caller = FakeCaller(_by_mode(_revert, _revert, _ok(_words(1, 250))))
    result = ModeResolver(_config(), caller).resolve(ADDR)
    assert result.eligible is True
    assert result.amount == "250"
    assert result.error is None
    assert len(caller.calls) == 3


def test_auto_order_is_address_sender_leaf():
    caller = FakeCaller(_revert)
    ModeResolver(_config(), caller).resolve(ADDR)
    (_, first, first_from), (_, second, second_from), (_, third, third_from) = caller.calls
    assert first == SELECTOR + "0" * 24 + ADDR[2:]
    assert first_from is None
    assert second == SELECTOR
    assert second_from == ADDR
    assert len(third) == 2 + 8 + 64
    assert third_from is None


def test_all_reverts_is_exactly_not_eligible():
    caller = FakeCaller(_revert)
    result = ModeResolver(_config(), caller).resolve(ADDR)
    assert result == EligibilityResult(eligible=False)
    assert result.to_dict() == {"eligible": False}


def test_auto_continues_after_transport_error():
    caller = FakeCaller(_by_mode(_transport, _ok(FALSE_WORD), _revert))
    result = ModeResolver(_config(), caller).resolve(ADDR)
    assert result.eligible is False
    assert result.raw == FALSE_WORD
    assert len(caller.calls) == 2


def test_auto_reports_error_when_last_failure_is_transport():
    caller = FakeCaller(_by_mode(_revert, _revert, _transport))
    result = ModeResolver(_config(), caller).resolve(ADDR)
    assert result.error == "RPC timeout after 15s."


def test_auto_last_revert_after_transport_is_not_eligible():
    caller = FakeCaller(_by_mode(_transport, _transport, _revert))
    result = ModeResolver(_config(), caller).resolve(ADDR)
    assert result == EligibilityResult(eligible=False)


def test_fixed_mode_uses_only_that_mode():
    caller = FakeCaller(_ok(TRUE_WORD))
    ModeResolver(_config(fixed_mode=CallingMode.SENDER), caller).resolve(ADDR)
    assert caller.calls == [(_config().contract, SELECTOR, ADDR)]


def test_fixed_mode_transport_error_surfaces():
    caller = FakeCaller(_transport)
    result = ModeResolver(_config(fixed_mode=CallingMode.ADDRESS), caller).resolve(ADDR)
    assert result.error == "RPC timeout after 15s."
    assert len(caller.calls) == 1


def test_fixed_mode_revert_is_not_eligible():
    caller = FakeCaller(_revert)
    result = ModeResolver(_config(fixed_mode=CallingMode.BYTES32), caller).resolve(ADDR)
    assert result == EligibilityResult(eligible=False)


def test_missing_configuration_fails_before_any_call():
    caller = FakeCaller(_ok(TRUE_WORD))
    with pytest.raises(ConfigurationError) as excinfo:
        ModeResolver(_config(selector=""), caller).resolve(ADDR)
    assert "ELIG_FUNC_SELECTOR" in excinfo.value.message
    assert caller.calls == []


def test_unexpected_errors_propagate():
    def boom(_call):
        raise KeyError("bug")

    with pytest.raises(KeyError):
        ModeResolver(_config(), FakeCaller(boom)).resolve(ADDR)


def test_transport_error_kind_is_not_revert():
    assert not TransportError("x").is_revert
