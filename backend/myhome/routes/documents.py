"""House member document upload/download endpoints.

Uploads arrive as multipart form data in the `memberDocument` field and
are stored as JPEG. Oversized uploads are rejected before decoding.
"""

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..config import settings
from ..database import get_session
from ..errors import FileTooLargeError

router = APIRouter(tags=["documents"], dependencies=[Depends(get_current_user_id)])


def _read_upload(upload: UploadFile) -> bytes:
    max_bytes = settings.FILES_MAX_SIZE_KB * 1024
    payload = upload.file.read(max_bytes + 1)
    if len(payload) > max_bytes:
        raise FileTooLargeError(f"upload exceeds {settings.FILES_MAX_SIZE_KB} KB")
    return payload


@router.get('/members/{member_id}/documents')
def get_house_member_document(member_id: str, db: Session = Depends(get_session)):
    document = services.HouseMemberDocumentService(db).find_house_member_document(member_id)
    if not document:
        raise HTTPException(status_code=404, detail='document not found')
    return Response(
        content=document.document_content,
        media_type="image/jpeg",
        headers={
            "Cache-Control": "no-cache",
            "Content-Disposition": f'inline; filename="{document.document_filename}"',
        },
    )


@router.post('/members/{member_id}/documents', status_code=204)
def upload_house_member_document(
    member_id: str,
    member_document: UploadFile = File(..., alias="memberDocument"),
    db: Session = Depends(get_session),
):
    payload = _read_upload(member_document)
    if not services.HouseMemberDocumentService(db).create_house_member_document(payload, member_id):
        raise HTTPException(status_code=404, detail='member not found or document too large')
    return Response(status_code=204)


@router.put('/members/{member_id}/documents', status_code=204)
def update_house_member_document(
    member_id: str,
    member_document: UploadFile = File(..., alias="memberDocument"),
    db: Session = Depends(get_session),
):
    payload = _read_upload(member_document)
    if not services.HouseMemberDocumentService(db).update_house_member_document(payload, member_id):
        raise HTTPException(status_code=404, detail='member not found or document too large')
    return Response(status_code=204)


@router.delete('/members/{member_id}/documents', status_code=204)
def delete_house_member_document(member_id: str, db: Session = Depends(get_session)):
    if not services.HouseMemberDocumentService(db).delete_house_member_document(member_id):
        raise HTTPException(status_code=404, detail='document not found')
    return Response(status_code=204)
