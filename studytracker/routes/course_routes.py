from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from studytracker.auth import UserIdentity, get_current_user
from studytracker.dependencies import get_cache
from studytracker.models.course import CourseStatus
from studytracker.services.cache_service import QueryCache, DASHBOARD_STATS, DASHBOARD_CHARTS
from studytracker.services.course_service import CourseService
from studytracker.supabase_rest import get_store

router = APIRouter(prefix="/api/v1/courses", tags=["Courses"])

class CourseCreate(BaseModel):
    title: str
    platform: Optional[str] = None
    url: Optional[str] = None
    status: CourseStatus = CourseStatus.ACTIVE

class CourseUpdate(BaseModel):
    title: Optional[str] = None
    platform: Optional[str] = None
    url: Optional[str] = None
    status: Optional[CourseStatus] = None

class NoteCreate(BaseModel):
    title: str
    description: Optional[str] = None

class NoteUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None

@router.get("")
async def list_courses(user: UserIdentity = Depends(get_current_user), store=Depends(get_store)):
    try:
        return [c.model_dump(mode="json") for c in CourseService.list_courses(store, user)]
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.post("")
async def create_course(body: CourseCreate, user: UserIdentity = Depends(get_current_user),
                        store=Depends(get_store), cache: QueryCache = Depends(get_cache)):
    try:
        course = CourseService.create_course(store, user, body.model_dump(mode="json"))
        cache.invalidate(DASHBOARD_STATS, user.id)
        return {"status": "success", "data": course.model_dump(mode="json")}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.put("/{course_id}")
async def update_course(course_id: str, body: CourseUpdate, user: UserIdentity = Depends(get_current_user),
                        store=Depends(get_store), cache: QueryCache = Depends(get_cache)):
    try:
        course = CourseService.update_course(store, user, course_id, body.model_dump(mode="json", exclude_unset=True))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    # Titles and status show up in the stats cards and chart legends
    cache.invalidate(DASHBOARD_STATS, user.id)
    cache.invalidate(DASHBOARD_CHARTS, user.id)
    return {"status": "success", "data": course.model_dump(mode="json")}

@router.delete("/{course_id}")
async def delete_course(course_id: str, user: UserIdentity = Depends(get_current_user),
                        store=Depends(get_store), cache: QueryCache = Depends(get_cache)):
    try:
        deleted = CourseService.delete_course(store, user, course_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Course not found")
    cache.invalidate(DASHBOARD_STATS, user.id)
    cache.invalidate(DASHBOARD_CHARTS, user.id)
    return {"status": "success", "message": "Course deleted"}

# ----------- Notes ----------- #

@router.get("/{course_id}/notes")
async def list_notes(course_id: str, user: UserIdentity = Depends(get_current_user), store=Depends(get_store)):
    try:
        return [n.model_dump(mode="json") for n in CourseService.list_notes(store, user, course_id)]
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/{course_id}/notes")
async def add_note(course_id: str, body: NoteCreate, user: UserIdentity = Depends(get_current_user),
                   store=Depends(get_store)):
    try:
        note = CourseService.add_note(store, user, course_id, body.model_dump())
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if note is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return {"status": "success", "data": note.model_dump(mode="json")}

@router.put("/notes/{note_id}")
async def update_note(note_id: str, body: NoteUpdate, user: UserIdentity = Depends(get_current_user),
                      store=Depends(get_store)):
    try:
        note = CourseService.update_note(store, user, note_id, body.model_dump(exclude_unset=True))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return {"status": "success", "data": note.model_dump(mode="json")}

@router.delete("/notes/{note_id}")
async def delete_note(note_id: str, user: UserIdentity = Depends(get_current_user), store=Depends(get_store)):
    try:
        deleted = CourseService.delete_note(store, user, note_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Note not found")
    return {"status": "success", "message": "Note deleted"}
