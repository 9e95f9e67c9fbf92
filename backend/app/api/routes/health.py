from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Liveness and database probe")
def healthcheck(db: Session = Depends(get_session)) -> dict[str, str]:
    db.execute(text("SELECT 1"))
    return {"status": "ok", "tax_table": settings.tax_table_version}
