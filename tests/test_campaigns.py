# tests/test_campaigns.py
# SPDX-License-Identifier: Apache-2.0
from dataclasses import replace
from decimal import Decimal

import pytest

from conftest import CAMPAIGN, CAMPAIGN_2, DONOR, OWNER
from services.campaigns import (
    Campaign,
    CampaignStatus,
    check_gas_balance,
    check_token_balance,
    derive_status,
    display_amount,
    eligibility,
    get_all_campaign_details,
    get_all_campaigns,
    get_campaign_details,
    get_user_donation,
    progress_percentage,
)


def make_campaign(**overrides) -> Campaign:
    base = Campaign(
        address=CAMPAIGN,
        owner=OWNER,
        name="Clean Water",
        target=Decimal("1000"),
        raised=Decimal("400"),
        actual_balance=Decimal("400"),
        peak_balance=Decimal("0"),
        time_remaining=0,
        status=CampaignStatus.FAILED,
        reported_status=0,
        ipfs_hash="QmHash",
        is_peak_balance_updated=False,
        is_withdrawn=False,
        is_owner_verified=False,
    )
    return replace(base, **overrides)


class TestDeriveStatus:
    @pytest.mark.parametrize(
        "time_remaining, raised, target, expected",
        [
            (0, 100, 100, CampaignStatus.SUCCESSFUL),
            (0, 99, 100, CampaignStatus.FAILED),
            (1, 0, 100, CampaignStatus.ACTIVE),
            (1, 500, 100, CampaignStatus.ACTIVE),
        ],
    )
    def test_vectors(self, time_remaining, raised, target, expected):
        assert derive_status(time_remaining, raised, target) is expected


class TestGetCampaignDetails:
    def test_normalizes_amounts_and_recomputes_status(self, chain):
        # Contract still reports Active (0) although time has run out.
        chain.add_campaign(
            target=100_000, raised=100_000, balance=120_000, time_remaining=0, status=0
        )
        c = get_campaign_details(chain, CAMPAIGN)

        assert c.target == Decimal("1000")
        assert c.raised == Decimal("1000")
        assert c.actual_balance == Decimal("1200")
        assert c.status is CampaignStatus.SUCCESSFUL
        assert c.reported_status == 0
        assert c.has_external_transfers
        assert c.unrecorded_amount == Decimal("200")
        assert c.ipfs_hash == "QmHash"

    def test_owner_badge_comes_from_registry(self, chain):
        chain.add_campaign()
        chain.registry_verified[OWNER.lower()] = True
        assert get_campaign_details(chain, CAMPAIGN).is_owner_verified is True

    def test_read_failure_propagates(self, chain):
        contract = chain.add_campaign()
        contract.fns["getPeakBalance"] = RuntimeError("node down")
        with pytest.raises(RuntimeError):
            get_campaign_details(chain, CAMPAIGN)

    def test_listing_checks_each_owner_once(self, chain):
        chain.add_campaign(CAMPAIGN)
        chain.add_campaign(CAMPAIGN_2, name="Books")

        campaigns = get_all_campaign_details(chain)

        assert [c.name for c in campaigns] == ["Clean Water", "Books"]
        registry_reads = [r for r in chain.registry_contract.reads if r[0] == "isVerified"]
        assert len(registry_reads) == 1

    def test_get_all_campaigns(self, chain):
        chain.add_campaign(CAMPAIGN)
        assert get_all_campaigns(chain) == [CAMPAIGN]


class TestUserDonation:
    def test_ledger_plus_direct_transfers_in_window(self, chain):
        chain.add_campaign(donations={DONOR: 5_000})
        chain.token_contract.logs["Transfer"] = [
            {"args": {"from": DONOR, "to": CAMPAIGN, "value": 1_000}},
            {"args": {"from": DONOR, "to": CAMPAIGN, "value": 250}},
        ]

        d = get_user_donation(chain, CAMPAIGN, DONOR)

        assert d.attributed == Decimal("50")
        assert d.direct == Decimal("12.5")
        assert d.total == Decimal("62.5")
        assert d.scanned_from_block == 40_000
        query = chain.token_contract.log_queries[0]
        assert query["from_block"] == 40_000
        assert query["to_block"] == 50_000
        assert query["argument_filters"]["from"].lower() == DONOR
        assert query["argument_filters"]["to"].lower() == CAMPAIGN

    def test_window_clamped_at_genesis(self, chain):
        chain._latest = 500
        chain.add_campaign()
        assert get_user_donation(chain, CAMPAIGN, DONOR).scanned_from_block == 0


class TestBalances:
    def test_token_and_gas_balances(self, chain):
        chain.token_contract.fns["balanceOf"] = lambda who: 12_345
        chain.native[DONOR.lower()] = 10**15
        assert check_token_balance(chain, DONOR) == "123.45"
        assert check_gas_balance(chain, DONOR) == "0.001"


class TestDisplayAmount:
    def test_active_shows_live_balance(self):
        c = make_campaign(
            status=CampaignStatus.ACTIVE, time_remaining=60, actual_balance=Decimal("450")
        )
        assert display_amount(c) == Decimal("450")

    def test_successful_never_shrinks_after_withdrawal(self):
        c = make_campaign(
            status=CampaignStatus.SUCCESSFUL, raised=Decimal("1000"), actual_balance=Decimal("0")
        )
        assert display_amount(c) == Decimal("1000")

    def test_failed_prefers_recorded_peak(self):
        c = make_campaign(
            peak_balance=Decimal("700"), is_peak_balance_updated=True, actual_balance=Decimal("0")
        )
        assert display_amount(c) == Decimal("700")

    def test_failed_without_peak(self):
        c = make_campaign(raised=Decimal("400"), actual_balance=Decimal("650"))
        assert display_amount(c) == Decimal("650")


class TestEligibility:
    def test_refund_blocked_for_verified_owner(self):
        c = make_campaign(is_owner_verified=True)
        assert eligibility(c, DONOR, Decimal("500")).can_refund is False

    def test_verified_owner_notice_for_donors_only(self):
        c = make_campaign(is_owner_verified=True)
        assert eligibility(c, DONOR, Decimal("500")).funds_go_to_verified_owner is True
        assert eligibility(c, DONOR, Decimal("0")).funds_go_to_verified_owner is False
        assert eligibility(make_campaign(), DONOR, Decimal("500")).funds_go_to_verified_owner is False
        done = replace(c, status=CampaignStatus.SUCCESSFUL, raised=Decimal("1000"))
        assert eligibility(done, DONOR, Decimal("500")).funds_go_to_verified_owner is False

    def test_refund_for_donor_of_failed_campaign(self):
        c = make_campaign()
        assert eligibility(c, DONOR, Decimal("500")).can_refund is True
        assert eligibility(c, DONOR, Decimal("0")).can_refund is False
        assert eligibility(c, None, Decimal("500")).can_refund is False

    def test_failed_withdraw_flips_with_verification(self):
        c = make_campaign()
        assert eligibility(c, OWNER).can_withdraw is False
        assert eligibility(replace(c, is_owner_verified=True), OWNER).can_withdraw is True

    def test_withdraw_requires_owner_and_end(self):
        c = make_campaign(status=CampaignStatus.SUCCESSFUL, raised=Decimal("1000"))
        assert eligibility(c, OWNER).can_withdraw is True
        assert eligibility(c, DONOR).can_withdraw is False
        active = replace(c, status=CampaignStatus.ACTIVE, time_remaining=10)
        assert eligibility(active, OWNER).can_withdraw is False

    def test_external_transfers_require_peak_first(self):
        c = make_campaign(
            status=CampaignStatus.SUCCESSFUL,
            raised=Decimal("1000"),
            actual_balance=Decimal("1300"),
        )
        gates = eligibility(c, OWNER)
        assert gates.can_update_peak_balance is True
        assert gates.can_withdraw is False

        recorded = replace(c, is_peak_balance_updated=True, peak_balance=Decimal("1300"))
        gates = eligibility(recorded, OWNER)
        assert gates.can_update_peak_balance is False
        assert gates.can_withdraw is True


class TestProgress:
    def test_clamped_and_zero_target(self):
        assert progress_percentage(Decimal("50"), Decimal("200")) == 25.0
        assert progress_percentage(Decimal("500"), Decimal("200")) == 100.0
        assert progress_percentage(Decimal("5"), Decimal("0")) == 0.0
