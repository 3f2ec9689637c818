# backend/scripts/campaign_state.py
# SPDX-License-Identifier: Apache-2.0
#
# Purpose
# -------
# Read-only diagnostics for Verifund campaigns. Prints what the console would
# show for a campaign: the derived status (next to the status the contract
# reports), the display amount, unrecorded direct transfers and the action
# gates for an optional viewer address. `payments` lists gateway mint
# records destined to a campaign.
#
# Output is **human-readable** with ✅/⚠️/❌ markers. No transactions are
# submitted; this is safe to run repeatedly.
#
# Environment (.env)
# ------------------
# RPC_URL, CAMPAIGN_FACTORY_ADDRESS, IDRX_TOKEN_ADDRESS,
# VERIFICATION_REGISTRY_ADDRESS, and IDRX_API_KEY / IDRX_SECRET_KEY for
# `payments`.
#
# Usage
# -----
#   python backend/scripts/campaign_state.py list
#   python backend/scripts/campaign_state.py show 0xCampaign --viewer 0xYou
#   python backend/scripts/campaign_state.py payments 0xCampaign --take 20

from __future__ import annotations

import argparse
import pathlib
import sys

APP_DIR = pathlib.Path(__file__).resolve().parents[2] / "frontend" / "streamlit_app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from core.clients import build_idrx  # noqa: E402
from core.config import settings  # noqa: E402
from core.constants import TOKEN_SYMBOL  # noqa: E402
from core.errors import VerifundError  # noqa: E402
from services.campaigns import (  # noqa: E402
    display_amount,
    eligibility,
    get_all_campaign_details,
    get_campaign_details,
    get_user_donation,
)
from services.chain import build_chain_context  # noqa: E402

# ---------------------------------------------------------------------------
# Pretty printers
# ---------------------------------------------------------------------------


def print_header(title: str) -> None:
    print("\n" + "=" * len(title))
    print(title)
    print("=" * len(title))


def fail(msg: str) -> None:
    print(f"❌ {msg}")


def ok(msg: str) -> None:
    print(f"✅ {msg}")


def warn(msg: str) -> None:
    print(f"⚠️  {msg}")


def flag(value: bool) -> str:
    return "yes" if value else "no"


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def cmd_list(chain) -> int:
    print_header("Campaigns")
    campaigns = get_all_campaign_details(chain)
    if not campaigns:
        warn("Factory has no deployed campaigns.")
        return 0
    for c in campaigns:
        badge = "✅" if c.is_owner_verified else "  "
        print(
            f"{badge} {c.address}  {c.status.label:<10}  "
            f"{display_amount(c)}/{c.target} {TOKEN_SYMBOL}  {c.name}"
        )
    return 0


def cmd_show(chain, address: str, viewer: str | None) -> int:
    c = get_campaign_details(chain, address)
    print_header(f"Campaign {c.name}")
    print(f"Address:      {c.address}")
    print(f"Owner:        {c.owner}  (verified: {flag(c.is_owner_verified)})")
    print(f"Status:       {c.status.label}  (contract reports {c.reported_status})")
    print(f"Time left:    {c.time_remaining}s")
    print(f"Target:       {c.target} {TOKEN_SYMBOL}")
    print(f"Raised:       {c.raised} {TOKEN_SYMBOL} (ledger)")
    print(f"Balance:      {c.actual_balance} {TOKEN_SYMBOL}")
    print(f"Peak:         {c.peak_balance} {TOKEN_SYMBOL} (recorded: {flag(c.is_peak_balance_updated)})")
    print(f"Display:      {display_amount(c)} {TOKEN_SYMBOL}")
    print(f"Withdrawn:    {flag(c.is_withdrawn)}")
    print(f"Metadata:     {c.ipfs_hash or '-'}")

    if c.status != c.reported_status:
        warn("Contract status lags behind time; the derived status is authoritative.")
    if c.has_external_transfers:
        warn(f"{c.unrecorded_amount} {TOKEN_SYMBOL} arrived outside donate() and is not in the ledger.")

    if viewer:
        donation = get_user_donation(chain, address, viewer)
        gates = eligibility(c, viewer, donation.attributed)
        print_header(f"Viewer {viewer}")
        print(
            f"Donated:      {donation.attributed} {TOKEN_SYMBOL} via donate, "
            f"{donation.direct} {TOKEN_SYMBOL} direct since block {donation.scanned_from_block}"
        )
        for label, allowed in (
            ("Record peak balance", gates.can_update_peak_balance),
            ("Withdraw", gates.can_withdraw),
            ("Refund", gates.can_refund),
        ):
            (ok if allowed else fail)(f"{label}: {'allowed' if allowed else 'not allowed'}")
    else:
        print("(pass --viewer to evaluate donor / owner actions)")
    return 0


def cmd_payments(address: str, page: int, take: int) -> int:
    idrx = build_idrx(settings)
    if idrx is None:
        fail("IDRX_API_KEY / IDRX_SECRET_KEY are not set.")
        return 2
    print_header(f"IDRX mints to {address}")
    records = idrx.get_campaign_transactions(address, page, take)
    if not records:
        warn("No matching records on this page (the gateway filters by page, not by address).")
        return 0
    for r in records:
        marker = "✅" if r.payment_status.value == "PAID" else "⚠️ "
        print(
            f"{marker} {r.reference:<24} {r.to_be_minted:>14} {TOKEN_SYMBOL}  "
            f"{r.payment_status.value:<20} {r.user_mint_status.value:<14} {r.created_at}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Verifund campaign diagnostics (read-only)")
    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("list", help="List every campaign with status and amounts")
    s_show = sub.add_parser("show", help="Show one campaign snapshot")
    s_show.add_argument("address")
    s_show.add_argument("--viewer", help="Evaluate actions for this address")
    s_pay = sub.add_parser("payments", help="List gateway mint records for a campaign")
    s_pay.add_argument("address")
    s_pay.add_argument("--page", type=int, default=1)
    s_pay.add_argument("--take", type=int, default=10)
    args = p.parse_args(argv)

    try:
        if args.cmd == "payments":
            return cmd_payments(args.address, args.page, args.take)
        chain = build_chain_context(settings)
        if args.cmd == "list":
            return cmd_list(chain)
        return cmd_show(chain, args.address, args.viewer)
    except (VerifundError, ValueError) as e:
        fail(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
