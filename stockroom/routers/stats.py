from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockroom.core.api_docs import error_responses
from stockroom.core.deps import get_db
from stockroom.schemas.stats import DashboardStatsOut
from stockroom.services.report_service import get_dashboard_stats

router = APIRouter(tags=["dashboard"])


@router.get(
    "/stats",
    response_model=DashboardStatsOut,
    summary="Dashboard statistics",
    responses={
        200: {
            "description": "Inventory KPIs. Monetary values are integer minor units.",
            "content": {
                "application/json": {
                    "example": {
                        "totalProducts": 24,
                        "totalValue": 1874500,
                        "lowStockCount": 3,
                        "outOfStockCount": 1,
                        "categoriesCount": 8,
                        "lowStockProducts": [
                            {
                                "id": 3,
                                "name": "Portable Power Bank 20000mAh",
                                "sku": "ELC-003-SLV",
                                "category": "Electronics",
                                "quantity": 8,
                            }
                        ],
                        "categoryBreakdown": [{"name": "Electronics", "value": 6}],
                    }
                }
            },
        },
        **error_responses(500),
    },
)
def dashboard_stats(db: Session = Depends(get_db)):
    return get_dashboard_stats(db)
