from app.schemas.common import ApiModel

class FinancialSummary(ApiModel):
    total_charges: float = 0
    total_tt: float = 0
    total_duty: float = 0
    total_clearing: float = 0
    total_other_expenses: float = 0
    total_investment: float = 0
