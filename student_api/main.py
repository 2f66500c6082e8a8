"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the student careers API.
Controllers are intentionally thin: they check path parameters and
bodies, delegate to services, and turn service errors into status codes.
Every error is answered with `{"status", "code", "message"}`.

Endpoints implemented:
- GET /health
- POST /students
- POST /students/{student_email}/careers/{career_id}
- GET /students/{student_email}/careers/{career_id}/subjects
- PUT /students/{student_email}/careers/{career_id}/subjects/{subject_id}
- GET /careers/{career_id}/subjects/{subject_id}
- GET /careers/{career_id}/subjects/{subject_id}/professorships
"""

import json
import logging
import time
import uuid
from http import HTTPStatus

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import services
from .config import settings
from .database import create_db_and_tables, get_session
from .schemas import ErrorOut, StudentIn, SubjectStatusIn
from .services import ErrorKind, ServiceError

app = FastAPI(title="Student Careers API")
logger = logging.getLogger("student_api.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()

_SERVICE_ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STUDENT_ALREADY_EXISTS: 409,
    ErrorKind.CAREER_ALREADY_ASSIGNED: 409,
    ErrorKind.MAX_CAREERS_REACHED: 409,
}


def _status_code_name(status_code: int) -> str:
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "unknown"
    return phrase.lower().replace(" ", "_")


def _error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    body = ErrorOut(status=status_code, code=_status_code_name(status_code), message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception(
            "request_failed %s",
            json.dumps(
                {
                    "request_id": req_id,
                    "path": request.url.path,
                    "method": request.method,
                    "duration_ms": elapsed_ms,
                },
                ensure_ascii=True,
            ),
        )
        raise
    response.headers["X-Request-ID"] = req_id
    elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
    logger.info(
        "request_done %s",
        json.dumps(
            {
                "request_id": req_id,
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
            ensure_ascii=True,
        ),
    )
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def _is_decode_error(error: dict) -> bool:
    # Malformed or empty JSON, or a JSON value of the wrong type for the field.
    if error["type"] == "missing" and tuple(error.get("loc", ())) == ("body",):
        return True
    return error["type"] == "json_invalid" or error["type"].endswith("_type")


def _format_validation_error(error: dict) -> str:
    loc = [str(p) for p in error.get("loc", ()) if p != "body"]
    msg = error.get("msg", "invalid value")
    ctx_error = (error.get("ctx") or {}).get("error")
    if error["type"] == "json_invalid" and ctx_error:
        msg = f"{msg}: {ctx_error}"
        loc = []
    return f"{'.'.join(loc)}: {msg}" if loc else msg


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    status_code = 422 if any(_is_decode_error(e) for e in errors) else 400
    return _error_response(status_code, "; ".join(_format_validation_error(e) for e in errors))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return _error_response(500, str(exc) or exc.__class__.__name__)


def _service_http_error(e: ServiceError) -> HTTPException:
    status_code = _SERVICE_ERROR_STATUS.get(e.kind, 500)
    if status_code == 409:
        logger.info("conflict kind=%s: %s", e.kind.value, e.message)
    return HTTPException(status_code=status_code, detail=e.message)


def _require(value: str, message: str) -> str:
    if value is None or not value.strip():
        raise HTTPException(status_code=400, detail=message)
    return value


def _require_id(value: str, name: str) -> str:
    value = _require(value, f"{name} is required")
    if not (value.isascii() and value.isdigit()):
        raise HTTPException(status_code=400, detail=f"{name} must be numeric")
    return value


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}


@app.post("/students")
def create_student(payload: StudentIn, db: Session = Depends(get_session)):
    """Create a student. Answers 409 when the email is already registered."""
    svc = services.StudentService(db)
    try:
        svc.create_student(payload.name, payload.student_email)
    except ServiceError as e:
        raise _service_http_error(e)
    return Response(status_code=200)


@app.post("/students/{student_email}/careers/{career_id}")
def assign_student_to_career(student_email: str, career_id: str, db: Session = Depends(get_session)):
    """Enroll a student in a career.

    404 when the student or career does not exist; 409 when the student
    is already enrolled in it or already holds the maximum of careers.
    """
    student_email = _require(student_email, "student email is required")
    career_id = _require_id(career_id, "career id")
    svc = services.StudentService(db)
    try:
        svc.assign_student_to_career(student_email, career_id)
    except ServiceError as e:
        raise _service_http_error(e)
    return Response(status_code=200)


@app.get("/students/{student_email}/careers/{career_id}/subjects")
def get_student_subjects(student_email: str, career_id: str, db: Session = Depends(get_session)):
    """Return the student's subjects in a career and their prerequisites."""
    student_email = _require(student_email, "student email is required")
    career_id = _require_id(career_id, "career id")
    svc = services.StudentService(db)
    try:
        return svc.get_student_subjects(student_email, career_id)
    except ServiceError as e:
        raise _service_http_error(e)


@app.put("/students/{student_email}/careers/{career_id}/subjects/{subject_id}")
def update_student_subject(
    student_email: str,
    career_id: str,
    subject_id: str,
    payload: SubjectStatusIn,
    db: Session = Depends(get_session),
):
    """Set the status (and optional description) of one of the student's subjects."""
    student_email = _require(student_email, "student email is required")
    career_id = _require_id(career_id, "career id")
    subject_id = _require_id(subject_id, "subject id")
    svc = services.StudentService(db)
    try:
        svc.update_student_subject(
            services.UpdateStudentSubjectRequest(
                student_email=student_email,
                career_id=career_id,
                subject_id=subject_id,
                status=payload.status,
                description=payload.description,
            )
        )
    except ServiceError as e:
        raise _service_http_error(e)
    return Response(status_code=200)


@app.get("/careers/{career_id}/subjects/{subject_id}")
def get_subject_details(career_id: str, subject_id: str, db: Session = Depends(get_session)):
    career_id = _require_id(career_id, "career id")
    subject_id = _require_id(subject_id, "subject id")
    svc = services.SubjectService(db)
    try:
        return svc.get_subject_details(subject_id, career_id)
    except ServiceError as e:
        raise _service_http_error(e)


@app.get("/careers/{career_id}/subjects/{subject_id}/professorships")
def get_professorships(career_id: str, subject_id: str, db: Session = Depends(get_session)):
    """Return each professorship's weekly schedule, Monday first."""
    career_id = _require_id(career_id, "career id")
    subject_id = _require_id(subject_id, "subject id")
    svc = services.SubjectService(db)
    try:
        return svc.get_professorships(subject_id, career_id)
    except ServiceError as e:
        raise _service_http_error(e)
