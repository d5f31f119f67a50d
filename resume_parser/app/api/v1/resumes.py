"""
Resume batch endpoints - upload PDFs for extraction, spreadsheet import/export, session stats.
"""
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from resume_parser.app.core.config import SPREADSHEET_EXPORT_FILENAME, settings
from resume_parser.app.core.dependencies import get_batch_processor, get_session
from resume_parser.app.core.logging_config import get_logger
from resume_parser.app.schemas.candidate import (
    BatchResult,
    ExportRequest,
    SessionStats,
    SpreadsheetLoadResult,
)
from resume_parser.app.services.batch_processor import BatchProcessor, UploadedFile
from resume_parser.app.services.session_store import SessionState
from resume_parser.app.services.spreadsheet import (
    MissingColumnsError,
    merge_rows,
    read_workbook,
    record_from_row,
    write_workbook,
)

logger = get_logger("api.resumes")

router = APIRouter()

PDF_CONTENT_TYPE = "application/pdf"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.post("/upload-resumes", response_model=BatchResult)
async def upload_resumes(
    resumes: List[UploadFile] = File(default=[]),
    apiKey: str = Form(default=""),
    processor: BatchProcessor = Depends(get_batch_processor),
):
    """
    Upload one or more PDF resumes for AI extraction.

    Files whose name and content were already extracted this session are skipped.
    Returns:
        - **successful**: cleaned candidate records
        - **failed**: {filename, error} per file that could not be extracted
        - **alreadyProcessed**: filenames skipped as unchanged re-uploads
    """
    if not apiKey:
        raise HTTPException(status_code=400, detail="API key is required")
    if not resumes:
        raise HTTPException(status_code=400, detail="No files uploaded")

    files: list[UploadedFile] = []
    for upload in resumes:
        if upload.content_type != PDF_CONTENT_TYPE:
            raise HTTPException(status_code=400, detail="Only PDF files are allowed")
        contents = await upload.read()
        if len(contents) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=400,
                detail=f"File too large: {upload.filename}",
            )
        files.append(UploadedFile(upload.filename or "", contents))

    return await processor.process_batch(files, apiKey)


@router.post("/load-excel", response_model=SpreadsheetLoadResult)
async def load_excel(excel: UploadFile | None = File(default=None)):
    """Load an existing spreadsheet database to merge with new extractions."""
    if excel is None:
        raise HTTPException(status_code=400, detail="No Excel file uploaded")
    content = await excel.read()
    try:
        data, columns = read_workbook(content)
    except MissingColumnsError as e:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Missing required columns",
                "missingColumns": e.missing,
                "expectedColumns": e.expected,
            },
        )
    except Exception as e:
        logger.error("Excel load error: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)})

    return SpreadsheetLoadResult(data=data, recordCount=len(data), columns=columns)


@router.post("/export-excel")
def export_excel(
    request: ExportRequest,
    session: SessionState = Depends(get_session),
):
    """
    Export candidate records as xlsx. Without request data the session's records are exported;
    with includeExisting the loaded spreadsheet rows are merged in first.
    """
    if request.data:
        records = [record_from_row(row) for row in request.data]
    else:
        records = session.records.all()
    rows = [record.to_row() for record in records]

    existing = request.existingData if request.includeExisting else None
    content = write_workbook(merge_rows(rows, existing))

    return Response(
        content=content,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename={SPREADSHEET_EXPORT_FILENAME}"},
    )


@router.get("/session-stats", response_model=SessionStats)
def session_stats(session: SessionState = Depends(get_session)):
    return session.stats(settings.session_stats_recent_files)


@router.delete("/clear-session")
def clear_session(session: SessionState = Depends(get_session)):
    session.clear()
    return {"message": "Session data cleared"}
