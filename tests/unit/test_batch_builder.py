"""Tests for mk_order.domain.builder — OrderBatchBuilder."""
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.mk_common.enums import OrderSide
from src.mk_common.errors import BatchTooLargeError, ValidationError
from src.mk_order.domain.builder import OrderBatchBuilder, encode_order
from src.mk_order.domain.models import OrderRequest
from src.mk_security.validator import InputValidator, ValidationLimits
from tests.fakes import OWNER, FakeChainGateway


def _request(token_id: object = 1, quantity: object = 1, **kwargs: object) -> OrderRequest:
    defaults: dict[str, object] = dict(
        token_id=token_id, price="1.5", quantity=quantity, user=OWNER, side="sell"
    )
    defaults.update(kwargs)
    return OrderRequest(**defaults)  # type: ignore[arg-type]


def _builder(chain: FakeChainGateway, **kwargs: object) -> OrderBatchBuilder:
    return OrderBatchBuilder(InputValidator(), chain, **kwargs)  # type: ignore[arg-type]


class TestBatchSizeCap:
    async def test_over_cap_fails_before_network(self) -> None:
        chain = FakeChainGateway(balances={1: 100})
        builder = _builder(chain, max_batch_size=3)
        with pytest.raises(BatchTooLargeError) as exc_info:
            await builder.prepare([_request() for _ in range(4)], OWNER)
        assert exc_info.value.code == 1002
        assert chain.balance_reads == []

    async def test_exactly_at_cap_succeeds(self) -> None:
        chain = FakeChainGateway(balances={1: 100})
        builder = _builder(chain, max_batch_size=3)
        prepared = await builder.prepare([_request() for _ in range(3)], OWNER)
        assert len(prepared.orders) == 3
        assert prepared.dropped == []

    async def test_default_cap_is_50(self) -> None:
        chain = FakeChainGateway(balances={1: 100})
        builder = _builder(chain)
        await builder.prepare([_request() for _ in range(50)], OWNER)
        with pytest.raises(BatchTooLargeError):
            await builder.prepare([_request() for _ in range(51)], OWNER)


class TestBalanceSufficiency:
    async def test_drops_only_insufficient_items(self) -> None:
        chain = FakeChainGateway(balances={1: 10, 2: 1})
        prepared = await _builder(chain).prepare(
            [_request(token_id=1, quantity=5), _request(token_id=2, quantity=100)], OWNER
        )
        assert [(o.token_id, o.quantity) for o in prepared.orders] == [(1, 5)]
        assert len(prepared.dropped) == 1
        assert prepared.dropped[0].index == 1
        assert "Insufficient balance" in prepared.dropped[0].reason

    async def test_exact_balance_is_enough(self) -> None:
        chain = FakeChainGateway(balances={7: 3})
        prepared = await _builder(chain).prepare([_request(token_id=7, quantity=3)], OWNER)
        assert len(prepared.orders) == 1

    async def test_balance_read_failure_drops_item(self) -> None:
        oracle = AsyncMock()
        oracle.get_balance.side_effect = [10, ConnectionError("rpc down"), 10]
        builder = OrderBatchBuilder(InputValidator(), oracle)
        prepared = await builder.prepare(
            [_request(token_id=1), _request(token_id=2), _request(token_id=3)], OWNER
        )
        assert [o.token_id for o in prepared.orders] == [1, 3]
        assert "Balance lookup failed" in prepared.dropped[0].reason

    async def test_order_preserved(self) -> None:
        chain = FakeChainGateway(balances={1: 1, 2: 1, 3: 0, 4: 1, 5: 1})
        prepared = await _builder(chain).prepare(
            [_request(token_id=t) for t in (5, 3, 1, 4, 2)], OWNER
        )
        assert [o.token_id for o in prepared.orders] == [5, 1, 4, 2]


class TestValidationDrops:
    async def test_invalid_fields_dropped_individually(self) -> None:
        chain = FakeChainGateway(balances={1: 10})
        requests = [
            _request(price="abc"),
            _request(quantity=0),
            _request(token_id=0),
            _request(side="hold"),
            _request(user="0x" + "11" * 20),
            _request(),
        ]
        prepared = await _builder(chain).prepare(requests, OWNER)
        assert len(prepared.orders) == 1
        assert [d.index for d in prepared.dropped] == [0, 1, 2, 3, 4]
        assert "does not match owner" in prepared.dropped[4].reason
        # invalid items never reach the balance oracle
        assert len(chain.balance_reads) == 1

    async def test_side_is_case_insensitive(self) -> None:
        chain = FakeChainGateway(balances={1: 10})
        prepared = await _builder(chain).prepare([_request(side=" BUY ")], OWNER)
        assert prepared.orders[0].side is OrderSide.BUY

    async def test_invalid_owner_is_fatal(self) -> None:
        chain = FakeChainGateway(balances={1: 10})
        with pytest.raises(ValidationError):
            await _builder(chain).prepare([_request()], "not-an-address")

    async def test_empty_when_nothing_survives(self) -> None:
        chain = FakeChainGateway(balances={})
        prepared = await _builder(chain).prepare([_request()], OWNER)
        assert prepared.is_empty


class TestWireRangeRecheck:
    async def test_price_beyond_uint72_dropped(self) -> None:
        # 5000 ETH is inside the configured price range but not the wire width
        chain = FakeChainGateway(balances={1: 10})
        prepared = await _builder(chain).prepare([_request(price="5000")], OWNER)
        assert prepared.is_empty
        assert "Price exceeds maximum" in prepared.dropped[0].reason

    async def test_quantity_beyond_uint24_dropped_even_if_config_allows(self) -> None:
        chain = FakeChainGateway(balances={1: 2**30})
        validator = InputValidator(ValidationLimits(quantity_max=2**30))
        builder = OrderBatchBuilder(validator, chain)  # type: ignore[arg-type]
        prepared = await builder.prepare([_request(quantity=2**24)], OWNER)
        assert prepared.is_empty
        assert "Quantity exceeds maximum" in prepared.dropped[0].reason

    def test_encode_order_wire_layout(self) -> None:
        order = encode_order(7, OrderSide.SELL, Decimal("1.5"), 3, OWNER)
        assert order.as_wire() == (0, 7, 1_500_000_000_000_000_000, 3)

    def test_encode_rejects_sub_wei_price(self) -> None:
        with pytest.raises(ValidationError):
            encode_order(7, OrderSide.SELL, Decimal("1e-19"), 3, OWNER)
