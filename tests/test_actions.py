# tests/test_actions.py
# SPDX-License-Identifier: Apache-2.0
import pytest

from conftest import CAMPAIGN, DONOR
from core.errors import InsufficientFunds, InsufficientGas, InvalidAmount, WalletNotConnected
from services import actions

ENOUGH_GAS = 10**16


@pytest.fixture
def funded(chain):
    chain.add_campaign()
    chain.native[DONOR.lower()] = ENOUGH_GAS
    chain.token_contract.fns["balanceOf"] = lambda who: 1_000_000
    return chain


class TestDonate:
    def test_insufficient_balance_submits_nothing(self, chain, signer):
        chain.add_campaign()
        chain.native[DONOR.lower()] = ENOUGH_GAS
        chain.token_contract.fns["balanceOf"] = lambda who: 5_000  # 50.00

        with pytest.raises(InsufficientFunds, match="need 100 IDRX"):
            actions.donate(chain, signer, CAMPAIGN, "100")
        assert signer.sent == []

    def test_insufficient_gas_submits_nothing(self, funded, signer):
        funded.native[DONOR.lower()] = 10
        with pytest.raises(InsufficientGas):
            actions.donate(funded, signer, CAMPAIGN, "100")
        assert signer.sent == []

    def test_fresh_allowance_approves_then_donates(self, funded, signer):
        actions.donate(funded, signer, CAMPAIGN, "100")
        assert signer.sent == [
            ("approve", (CAMPAIGN, 10_000)),
            ("donate", (10_000,)),
        ]

    def test_stale_allowance_is_reset_first(self, funded, signer):
        funded.token_contract.fns["allowance"] = lambda owner, spender: 2_500
        actions.donate(funded, signer, CAMPAIGN, "100")
        assert signer.sent == [
            ("approve", (CAMPAIGN, 0)),
            ("approve", (CAMPAIGN, 10_000)),
            ("donate", (10_000,)),
        ]

    def test_sufficient_allowance_skips_approve(self, funded, signer):
        funded.token_contract.fns["allowance"] = lambda owner, spender: 50_000
        tx = actions.donate(funded, signer, CAMPAIGN, "100")
        assert signer.sent == [("donate", (10_000,))]
        assert tx.startswith("0x")

    def test_requires_wallet(self, funded):
        with pytest.raises(WalletNotConnected):
            actions.donate(funded, None, CAMPAIGN, "100")

    @pytest.mark.parametrize("amount", ["0", "abc", "1.001"])
    def test_invalid_amounts(self, funded, signer, amount):
        with pytest.raises(InvalidAmount):
            actions.donate(funded, signer, CAMPAIGN, amount)
        assert signer.sent == []


class TestCreateCampaign:
    def test_normalizes_target(self, chain, signer):
        actions.create_campaign(chain, signer, " Clean Water ", "1500.5", 86_400, "QmMeta")
        assert signer.sent == [("createCampaign", ("Clean Water", 150_050, 86_400, "QmMeta"))]

    def test_zero_target_rejected(self, chain, signer):
        with pytest.raises(InvalidAmount):
            actions.create_campaign(chain, signer, "X", "0", 60, "QmMeta")

    def test_bad_name_or_duration(self, chain, signer):
        with pytest.raises(ValueError):
            actions.create_campaign(chain, signer, "  ", "10", 60, "QmMeta")
        with pytest.raises(ValueError):
            actions.create_campaign(chain, signer, "X", "10", 0, "QmMeta")
        assert signer.sent == []

    def test_requires_wallet(self, chain):
        with pytest.raises(WalletNotConnected):
            actions.create_campaign(chain, None, "X", "10", 60, "QmMeta")


class TestSingleCalls:
    @pytest.mark.parametrize(
        "fn, method",
        [
            (actions.withdraw, "withdraw"),
            (actions.refund, "refund"),
            (actions.update_peak_balance, "updatePeakBalance"),
            (actions.sync_idrx_donations, "syncIDRXDonations"),
        ],
    )
    def test_submits_one_call(self, chain, signer, fn, method):
        chain.add_campaign()
        fn(chain, signer, CAMPAIGN)
        assert signer.sent == [(method, ())]

    def test_requires_wallet(self, chain):
        chain.add_campaign()
        with pytest.raises(WalletNotConnected):
            actions.withdraw(chain, None, CAMPAIGN)
