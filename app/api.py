"""
FastAPI routes for ledger upload, reconciliation results and reminders.
Clean API layer following separation of concerns principle.
"""
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, Request, Response, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from core.config import get_settings
from core.exceptions import (
    NotFoundError,
    NotificationError,
    ParsingError,
    ReconcilerException,
    ValidationError,
)
from core.logger import setup_logger
from core.schema import (
    BankTransaction,
    Employee,
    EmployeeCreate,
    ExpenseRecord,
    NotificationCreate,
    NotificationRequest,
    ReconciliationSummary,
)
from services.reconciliation_service import ReconciliationService

logger = setup_logger(__name__)
settings = get_settings()

ALLOWED_EXTENSIONS = (".csv", ".txt")

# Initialize FastAPI app
app = FastAPI(
    title="Bank Reconciler",
    description="Match bank charges against reported expenses and chase missing receipts",
    version="1.0.0"
)

# In-memory session state (nothing persists across restarts)
reconciliation_service = ReconciliationService()


@app.exception_handler(ReconcilerException)
async def reconciler_exception_handler(request: Request, exc: ReconcilerException):
    """Map domain errors to HTTP status codes."""
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, (ParsingError, ValidationError)):
        status_code = 400
    elif isinstance(exc, NotificationError):
        status_code = 502
    else:
        status_code = 500

    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_details": exc.details}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "bank_reconciler",
        "version": "1.0.0"
    }


def validate_file_extension(filename: Optional[str]) -> None:
    """
    Validate file has correct extension.

    Raises:
        HTTPException: If file extension is invalid
    """
    if not filename or not filename.lower().endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {filename}. Only .csv and .txt are supported."
        )


async def read_upload_text(upload: UploadFile) -> str:
    """Read an uploaded file as UTF-8 text."""
    validate_file_extension(upload.filename)
    content = await upload.read()
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail=f"File is not valid UTF-8: {upload.filename}")


def build_load_response(diagnostics) -> dict:
    return {
        "loaded": len(reconciliation_service.transactions()),
        "diagnostics": [d.model_dump() for d in diagnostics],
        "summary": reconciliation_service.summary().model_dump(mode="json"),
    }


@app.post("/ledgers/bank")
async def upload_bank_statement(file: UploadFile = File(...)):
    """Replace the bank statement and reclassify."""
    logger.info(f"Received bank statement: {file.filename}")
    text = await read_upload_text(file)
    diagnostics = reconciliation_service.load_bank_statement(text)
    return build_load_response(diagnostics)


@app.post("/ledgers/expenses")
async def upload_expense_report(file: UploadFile = File(...)):
    """Replace the expense report and reclassify the bank statement."""
    logger.info(f"Received expense report: {file.filename}")
    text = await read_upload_text(file)
    diagnostics = reconciliation_service.load_expense_report(text)
    response = build_load_response(diagnostics)
    response["loaded"] = len(reconciliation_service.expenses())
    return response


@app.get("/transactions", response_model=List[BankTransaction])
async def list_transactions(unreported_only: bool = False):
    """Classified bank transactions in statement order."""
    return reconciliation_service.transactions(unreported_only=unreported_only)


@app.get("/expenses", response_model=List[ExpenseRecord])
async def list_expenses():
    return reconciliation_service.expenses()


@app.get("/summary", response_model=ReconciliationSummary)
async def get_summary():
    return reconciliation_service.summary()


@app.get("/employees", response_model=List[Employee])
async def list_employees(search: Optional[str] = None):
    return reconciliation_service.directory.list(search)


@app.post("/employees", response_model=Employee, status_code=201)
async def add_employee(body: EmployeeCreate):
    return reconciliation_service.directory.add(body.name, body.phone, body.email)


@app.delete("/employees/{employee_id}", status_code=204)
async def delete_employee(employee_id: str):
    reconciliation_service.directory.remove(employee_id)
    return Response(status_code=204)


@app.post("/notifications", response_model=NotificationRequest)
async def send_notification(body: NotificationCreate):
    """Send a receipt reminder for an unreported transaction."""
    return reconciliation_service.notify(body.transaction_id, body.employee_id)


@app.get("/export")
def export_results():
    """Download the classified bank batch as Excel."""
    output_path = reconciliation_service.export()
    return FileResponse(
        path=output_path,
        filename=Path(output_path).name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
