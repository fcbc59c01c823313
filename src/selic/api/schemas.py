"""Request bodies for the correction endpoints.

Amounts arrive as JSON numbers or as text ("1.000,00", "R$ 50,00"); they stay
raw here and are converted explicitly into Money by the routes.
"""

from datetime import date

from pydantic import BaseModel

Amount = str | int | float


class CorrectionRequest(BaseModel):
    """POST /api/selic body."""

    start_date: date | None = None
    end_date: date | None = None
    principal: Amount | None = None


class FineCorrectionRequest(BaseModel):
    """POST /api/fine-correction body."""

    original_value: Amount | None = None
    start_date: date | None = None
    end_date: date | None = None
    fine_percentage: Amount | None = None
