# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: CSV export for the supervisory committee."""
from fastapi import APIRouter, Depends
from starlette.responses import Response

from chama.core.dependencies import get_export_service, require
from chama.schemas import Principal
from chama.services.export_service import ExportService

router = APIRouter(tags=["Export"])


@router.get("/export/{export_type}")
def export_collection(export_type: str,
                      _: Principal = Depends(require("export")),
                      exports: ExportService = Depends(get_export_service)):
    content = exports.to_csv(export_type)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_type}.csv"'},
    )
