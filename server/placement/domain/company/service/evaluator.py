"""MOA status evaluation.

Pure functions: no I/O and no clock. Every caller passes ``today`` and the
configured window so the dashboard, the synchronizer and the queries agree.

Status table (days = expiration - today, in whole calendar days):

    no MOA flag or no expiration  -> no-moa         hidden
    days < 0                      -> expired        hidden
    0 <= days <= window           -> expiring-soon  visible
    days > window                 -> valid          visible
"""

from datetime import date, datetime

from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import MoaStatus
from placement.domain.shared.model.value import ValueObject

WINDOW_DAYS = 30


def _plural(n: int) -> str:
    return "" if n == 1 else "s"


class MoaEvaluation(ValueObject):
    status: MoaStatus
    visible: bool
    days_until_expiration: int | None = None

    @property
    def message(self) -> str:
        days = self.days_until_expiration
        if self.status is MoaStatus.NO_MOA or days is None:
            return "No MOA on file"
        if self.status is MoaStatus.EXPIRED:
            return f"MOA expired {-days} day{_plural(-days)} ago"
        if self.status is MoaStatus.EXPIRING_SOON:
            return f"MOA expires in {days} day{_plural(days)}"
        return f"MOA valid for {days} more day{_plural(days)}"


class AssignmentCheck(ValueObject):
    can_assign: bool
    warning: bool = False
    reason: str | None = None


def _as_date(value: date | datetime) -> date:
    # datetime is a subclass of date, so test it first
    if isinstance(value, datetime):
        return value.date()
    return value


def evaluate(
    today: date | datetime,
    moa_present: bool,
    expiration_date: date | datetime | None,
    window_days: int = WINDOW_DAYS,
) -> MoaEvaluation:
    """Classify an MOA on ``today``.

    Both dates are compared at day granularity, so a time-of-day component
    never changes the outcome.
    """
    if not moa_present or expiration_date is None:
        return MoaEvaluation(status=MoaStatus.NO_MOA, visible=False)

    days = (_as_date(expiration_date) - _as_date(today)).days
    if days < 0:
        status = MoaStatus.EXPIRED
    elif days <= window_days:
        status = MoaStatus.EXPIRING_SOON
    else:
        status = MoaStatus.VALID
    return MoaEvaluation(status=status, visible=status.visible, days_until_expiration=days)


def evaluate_company(
    company: Company, today: date | datetime, window_days: int = WINDOW_DAYS
) -> MoaEvaluation:
    return evaluate(today, company.moa_present, company.moa_expiration_date, window_days)


def assignment_check(evaluation: MoaEvaluation) -> AssignmentCheck:
    """Whether students may be assigned to a company with this MOA state."""
    if evaluation.status is MoaStatus.NO_MOA:
        return AssignmentCheck(
            can_assign=False,
            reason=(
                "This company does not have a valid MOA. "
                "Please ensure the MOA is set up before assigning students."
            ),
        )
    if evaluation.status is MoaStatus.EXPIRED:
        days = -(evaluation.days_until_expiration or 0)
        return AssignmentCheck(
            can_assign=False,
            reason=(
                f"This company's MOA expired {days} day{_plural(days)} ago. "
                "Please renew the MOA before assigning students."
            ),
        )
    if evaluation.status is MoaStatus.EXPIRING_SOON:
        days = evaluation.days_until_expiration or 0
        return AssignmentCheck(
            can_assign=True,
            warning=True,
            reason=(
                f"Warning: This company's MOA expires soon ({days} day{_plural(days)}). "
                "Consider renewing it."
            ),
        )
    return AssignmentCheck(can_assign=True)


def summarize(
    companies: list[Company], today: date | datetime, window_days: int = WINDOW_DAYS
) -> dict[MoaStatus, int]:
    """Count companies per MOA status."""
    counts = {status: 0 for status in MoaStatus}
    for company in companies:
        counts[evaluate_company(company, today, window_days).status] += 1
    return counts
