from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

from section_planner.schemas.io import ExportRequest
from section_planner.services.export import EXPORT_KINDS, export_csv

router = APIRouter()

EXPORT_FILENAMES = {
    "assignments": "all_assignments.csv",
    "unassigned": "unassigned_students.csv",
    "sections": "section_lists.csv",
}


@router.post("/{kind}")
def export_result(kind: str, payload: ExportRequest) -> Response:
    if kind not in EXPORT_KINDS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown export '{kind}'. Expected one of: {', '.join(EXPORT_KINDS)}",
        )
    content = "\ufeff" + export_csv(kind, payload.result, payload.subjects)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAMES[kind]}"'},
    )
