# pipdesk/routers/learning.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pipdesk import crud, models, schemas
from pipdesk.auth_utils import get_admin_user, get_current_user
from pipdesk.database import get_db

router = APIRouter(tags=["lessons"])


def _get_lesson_or_404(db: Session, lesson_id: int) -> models.Lesson:
    lesson = crud.get_lesson(db, lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson


@router.get("/lessons", response_model=List[schemas.Lesson])
async def read_lessons(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    """Admins see drafts too"""
    if current_user.role == "admin":
        return crud.get_lessons(db)
    return crud.get_published_lessons(db)


@router.get("/lessons/{lesson_id}", response_model=schemas.Lesson)
async def read_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    lesson = _get_lesson_or_404(db, lesson_id)
    if not lesson.is_published and current_user.role != "admin":
        raise HTTPException(status_code=404, detail="Lesson not found")
    return lesson


@router.post("/lessons", response_model=schemas.Lesson, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    payload: schemas.LessonCreate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return crud.create_lesson(db, payload, created_by=admin.id)


@router.put("/lessons/{lesson_id}", response_model=schemas.Lesson)
async def update_lesson(
    lesson_id: int,
    payload: schemas.LessonUpdate,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    return crud.update_lesson(db, _get_lesson_or_404(db, lesson_id), payload)


@router.delete("/lessons/{lesson_id}")
async def delete_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(get_admin_user)
):
    crud.delete_lesson(db, _get_lesson_or_404(db, lesson_id))
    return {"success": True, "message": "Lesson deleted"}


@router.post("/lessons/{lesson_id}/complete", response_model=schemas.UserLesson)
async def complete_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    lesson = _get_lesson_or_404(db, lesson_id)
    if not lesson.is_published and current_user.role != "admin":
        raise HTTPException(status_code=404, detail="Lesson not found")
    return crud.mark_lesson_completed(db, current_user.id, lesson.id)


@router.get("/user/progress", response_model=List[schemas.UserLesson])
async def read_lesson_progress(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user)
):
    return crud.get_user_lesson_progress(db, current_user.id)
