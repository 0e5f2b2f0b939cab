from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront import schemas
from storefront.auth.dependencies import Actor, require_action
from storefront.db import get_db
from storefront.domain.access.capabilities import Action
from storefront.services.reports import get_dashboard, get_sales_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/dashboard", response_model=schemas.DashboardOut)
def dashboard(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.view_reports)),
):
    return get_dashboard(db)


@router.get("/sales", response_model=schemas.SalesReportOut)
def sales_report(
    start: date = Query(...),
    end: date = Query(...),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_action(Action.view_reports)),
):
    return get_sales_report(db, start, end)
