from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.api.dependencies import get_container, get_current_user_id
from app.api.schemas import BulletRewriteRequest, DraftRequest, RewriteRequest
from app.container import Container
from app.jobs.models import (
    BulletRewritePayload,
    DraftPayload,
    JobPayload,
    JobStatus,
    RewritePayload,
)

router = APIRouter(prefix="/rewrites", tags=["rewrites"])


def _accepted(container: Container, payload: JobPayload) -> JSONResponse:
    job_id = container.job_service.submit(payload)
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"jobId": job_id})


@router.post("")
def submit_rewrite(
    body: RewriteRequest,
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> JSONResponse:
    """Queue an analyze / rewrite / cover-letter job."""
    payload = RewritePayload(
        user_id=user_id, user_resume=body.user_resume or "", jd=body.jd or ""
    )
    return _accepted(container, payload)


@router.post("/draft")
def submit_draft(
    body: DraftRequest,
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> JSONResponse:
    """Queue a job drafting a resume from up to three job descriptions."""
    return _accepted(container, DraftPayload(user_id=user_id, jds=body.job_descriptions()))


@router.post("/bullet")
def submit_bullet_rewrite(
    body: BulletRewriteRequest,
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> JSONResponse:
    payload = BulletRewritePayload(user_id=user_id, bullet=body.bullet or "", jd=body.jd or "")
    return _accepted(container, payload)


@router.get("/job-status/{job_id}")
def get_job_status(
    job_id: str,
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> JSONResponse:
    view = container.job_service.get_status(job_id, user_id)
    if view.status is JobStatus.COMPLETED:
        return JSONResponse(content={"status": view.status.value, **(view.result or {})})
    if view.status is JobStatus.FAILED:
        return JSONResponse(content={"status": view.status.value, "error": view.error})
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED, content={"status": view.status.value}
    )


@router.get("/doc-collections")
def list_doc_collections(
    user_id: int = Depends(get_current_user_id),
    container: Container = Depends(get_container),
) -> dict:
    collections = container.doc_repo.find_collections_for_user(user_id)
    return {"collections": jsonable_encoder([asdict(c) for c in collections])}
