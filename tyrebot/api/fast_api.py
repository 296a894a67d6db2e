"""
FastAPI Router - Chat • Feedback • Knowledge-Base Administration
================================================================

Purpose
-------
Defines the HTTP API for:
- Public chat: one grounded turn per request, and feedback on stored turns
- Admin authentication (bearer JWT)
- Knowledge-base management: list, add, edit, delete, CSV bulk upload, categories
- Conversation analytics and the product catalogue
- Health check

Key Notes
---------
- Input validation via Pydantic models in `tyrebot.api.models`.
- Collaborators (orchestrator, stores, settings) are read from `request.app.state`;
  they are attached by `tyrebot.main.create_app`.
- Pipeline errors (`InputError`, `ServiceError`) propagate to the exception
  handlers registered in `tyrebot.main`.
- A chat turn is cancelled when the client disconnects before it completes.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, Response, UploadFile

from tyrebot.api.csv_rows import KnowledgeCsv
from tyrebot.api.models import (
    AdminCredentials,
    AnalyticsResponse,
    CategoryCount,
    ChatRequest,
    ChatResponse,
    FeedbackRequest,
    FeedbackResponse,
    KnowledgeEntryCreate,
    KnowledgeEntryOut,
    KnowledgeEntryPage,
    KnowledgeEntryUpdate,
    KnowledgeSource,
    ProductCreate,
    ProductOut,
)
from tyrebot.api.utils import TokenFailure, bearer_token, create_access_token, verify_token

logger = logging.getLogger(__name__)

router = APIRouter()
"""Creates the FastAPI router in which we define its routes"""

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499


def require_admin(request: Request) -> dict:
    """Dependency: validate the bearer token and return its claims.

    Responses:
        401 when no token is sent, 403 when it is invalid or expired.
    """
    settings = request.app.state.settings
    verification = verify_token(bearer_token(request.headers.get("authorization")), settings)
    if verification.failure is TokenFailure.MISSING:
        raise HTTPException(status_code=401, detail="Access token required")
    if not verification.valid:
        raise HTTPException(status_code=403, detail="Invalid token")
    return verification.claims


async def run_until_disconnect(request: Request, coro):
    """Await ``coro`` unless the client goes away first, in which case it is cancelled.

    Returns:
        The coroutine's result, or None when the client disconnected.
    """
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected; cancelling turn")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                return None
    except asyncio.CancelledError:
        task.cancel()
        raise


# ============ CHATBOT API ============

@router.post('/api/chat', response_model=ChatResponse)
async def chat(data: ChatRequest, request: Request):
    """Answer one customer message grounded in the knowledge base.

    Request body:
        ChatRequest {message, sessionId?, conversationHistory?}

    Response:
        200: {response, sessionId, sources (at most 2)}
        400: missing/blank message
        500: generation or persistence failure
    """
    orchestrator = request.app.state.orchestrator
    result = await run_until_disconnect(
        request,
        orchestrator.handle_turn(
            data.message,
            session_id=data.sessionId,
            conversation_history=[item.model_dump() for item in data.conversationHistory],
        ),
    )
    if result is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return ChatResponse(
        response=result.response_text,
        sessionId=result.session_id,
        sources=[KnowledgeSource.model_validate(entry) for entry in result.sources],
    )


@router.post('/api/feedback', response_model=FeedbackResponse)
async def feedback(data: FeedbackRequest, request: Request):
    """Attach a feedback label to a stored turn.

    Succeeds whenever the update executes, even if no turn has that id.
    """
    success = await request.app.state.orchestrator.set_feedback(data.conversationId, data.feedback)
    return FeedbackResponse(success=success)


# ============ ADMIN API - KNOWLEDGE BASE MANAGEMENT ============

@router.post('/api/admin/login')
def login(data: AdminCredentials, request: Request):
    """Authenticate an administrator and issue a bearer token (8 hours by default)."""
    profile = request.app.state.admin_store.authenticate(data.username, data.password)
    if profile is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(
        {"sub": profile["username"], "id": profile["id"], "role": profile["role"]},
        request.app.state.settings,
    )
    return {"token": token, "user": profile}


@router.get('/api/admin/knowledge-base', response_model=KnowledgeEntryPage)
def list_knowledge_base(
    request: Request,
    category: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    admin: dict = Depends(require_admin),
):
    """List entries (active and inactive), most recently edited first."""
    return request.app.state.knowledge_store.list_entries(category=category, search=search, page=page, limit=limit)


@router.post('/api/admin/knowledge-base')
def add_knowledge_entry(data: KnowledgeEntryCreate, request: Request, admin: dict = Depends(require_admin)):
    """Add a single entry; it starts at version 1 and active."""
    entry = request.app.state.knowledge_store.add_entry(
        category=data.category,
        question=data.question,
        answer=data.answer,
        keywords=data.keywords,
        created_by=admin["sub"],
    )
    return {"success": True, "data": KnowledgeEntryOut.model_validate(entry)}


@router.put('/api/admin/knowledge-base/{entry_id}')
def update_knowledge_entry(
    entry_id: int, data: KnowledgeEntryUpdate, request: Request, admin: dict = Depends(require_admin)
):
    """Edit an entry and bump its version."""
    entry = request.app.state.knowledge_store.update_entry(entry_id, data.model_dump(exclude_unset=True))
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"success": True, "data": KnowledgeEntryOut.model_validate(entry)}


@router.delete('/api/admin/knowledge-base/{entry_id}')
def delete_knowledge_entry(entry_id: int, request: Request, admin: dict = Depends(require_admin)):
    """Delete an entry. Deleting an unknown id still succeeds."""
    request.app.state.knowledge_store.delete_entry(entry_id)
    return {"success": True}


@router.post('/api/admin/knowledge-base/upload')
def upload_knowledge_base(request: Request, file: UploadFile = File(...), admin: dict = Depends(require_admin)):
    """Insert every row of a CSV file in one transaction.

    Responses:
        200: {'success': True, 'message': 'Successfully uploaded N entries'}
        400: malformed CSV (nothing is inserted)
    """
    rows = KnowledgeCsv(file.file.read())
    insert_count = request.app.state.knowledge_store.bulk_insert(rows, uploaded_by=admin["sub"], file_name=file.filename)
    return {"success": True, "message": f"Successfully uploaded {insert_count} entries"}


@router.get('/api/admin/categories', response_model=List[CategoryCount])
def categories(request: Request, admin: dict = Depends(require_admin)):
    """Distinct categories of active entries with counts."""
    return request.app.state.knowledge_store.categories()


@router.get('/api/admin/analytics', response_model=AnalyticsResponse)
def analytics(
    request: Request,
    startDate: Optional[datetime] = None,
    endDate: Optional[datetime] = None,
    admin: dict = Depends(require_admin),
):
    """Conversation totals, feedback distribution and top questions in an inclusive date range.

    A missing startDate means "since the epoch", a missing endDate means "until now".
    """
    return request.app.state.analytics.summarize(startDate, endDate)


# ============ PRODUCT MANAGEMENT ============

@router.get('/api/admin/products', response_model=List[ProductOut])
def list_products(request: Request, admin: dict = Depends(require_admin)):
    return request.app.state.admin_store.list_products()


@router.post('/api/admin/products')
def add_product(data: ProductCreate, request: Request, admin: dict = Depends(require_admin)):
    product = request.app.state.admin_store.add_product(data.model_dump())
    return {"success": True, "data": ProductOut.model_validate(product)}


@router.get('/health')
async def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
