"""
Credit balance endpoint.

GET /credits/{owner_id} → free/paid/used credits and time until the daily reset.
Reading a balance also applies the daily reset, the same as admission does.
"""

from fastapi import APIRouter, Depends

from accounts.credits import CreditAccount, CreditLedger, format_time_until_reset
from api.dependencies import get_ledger
from api.schemas.credits import CreditAccountResponse

router = APIRouter(prefix="/credits", tags=["credits"])


def to_response(account: CreditAccount) -> CreditAccountResponse:
    return CreditAccountResponse(
        owner_id=account.owner_id,
        free=account.free,
        paid=account.paid,
        used=account.used,
        total=account.total,
        last_reset=account.last_reset,
        resets_in=format_time_until_reset(),
    )


@router.get("/{owner_id}", response_model=CreditAccountResponse)
async def get_credits(
    owner_id: str,
    ledger: CreditLedger = Depends(get_ledger),
) -> CreditAccountResponse:
    account = await ledger.reset_daily_credits(owner_id)
    return to_response(account)
