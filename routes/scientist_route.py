"""FastAPI routes for scientist records."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.scientist_controller import (
    create_scientist,
    delete_scientist,
    get_scientist,
    list_scientists,
    update_scientist,
)
from utils.errors import AppError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/scientists", tags=["scientists"])


class DeleteResponse(BaseModel):
    message: str


def _unexpected(action: str, exc: Exception) -> HTTPException:
    LOGGER.exception("Failed to %s: %s", action, exc)
    return HTTPException(status_code=500, detail=str(exc))


@router.get("")
async def list_scientists_route(request: Request):
    try:
        return await list_scientists(request)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise _unexpected("list scientists", exc)


@router.get("/{scientist_id}")
async def get_scientist_route(request: Request, scientist_id: str):
    try:
        return await get_scientist(request, scientist_id)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise _unexpected("fetch scientist", exc)


@router.post("", status_code=201, summary="Create a scientist with a portrait")
async def create_scientist_route(
    request: Request,
    name: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    color: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    """Create a scientist from multipart form data.

    Args:
        request: The FastAPI request containing application state.
        name: Scientist name (required).
        subject: Field of study (required).
        color: Optional accent color; a palette color is picked when omitted.
        image: Portrait upload (required; jpg, jpeg, png or gif up to 5 MB).

    Returns:
        The stored record with derived `image` and `thumbnail` URLs.
    """
    fields = {"name": name, "subject": subject, "color": color}
    try:
        return await create_scientist(request, fields, image)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise _unexpected("create scientist", exc)


@router.patch("/{scientist_id}", summary="Partially update a scientist")
async def update_scientist_route(
    request: Request,
    scientist_id: str,
    name: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    achievements: Optional[str] = Form(None),
    birthYear: Optional[str] = Form(None),
    deathYear: Optional[str] = Form(None),
    color: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
):
    """Apply only the submitted, non-blank fields; a new `image` replaces the old one."""
    fields = {
        "name": name,
        "subject": subject,
        "title": title,
        "description": description,
        "achievements": achievements,
        "birthYear": birthYear,
        "deathYear": deathYear,
        "color": color,
    }
    try:
        return await update_scientist(request, scientist_id, fields, image)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise _unexpected("update scientist", exc)


@router.delete("/{scientist_id}", response_model=DeleteResponse)
async def delete_scientist_route(request: Request, scientist_id: str):
    try:
        return await delete_scientist(request, scientist_id)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise _unexpected("delete scientist", exc)
