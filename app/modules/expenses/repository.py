# app/modules/expenses/repository.py
from decimal import Decimal
from typing import Dict, Iterable, Optional
from sqlalchemy.orm import Session

from app.shared.database.models import GastoMensual

class ExpensesRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_month(self, mes_ano: str) -> Optional[GastoMensual]:
        return self.db.query(GastoMensual).filter(GastoMensual.mes_ano == mes_ano).first()

    def monthly_totals(self, meses: Iterable[str]) -> Dict[str, Decimal]:
        meses = list(meses)
        if not meses:
            return {}
        rows = self.db.query(GastoMensual).filter(GastoMensual.mes_ano.in_(meses)).all()
        return {row.mes_ano: row.gastos_totales for row in rows}

    def create(self, **data) -> GastoMensual:
        expense = GastoMensual(**data)
        self.db.add(expense)
        self.db.flush()
        return expense
