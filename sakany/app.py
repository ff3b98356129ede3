from __future__ import annotations

import json
import logging

from fastapi import Depends, FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_dashboard
from .analytics.store import MATCH_EVENT, QUIZ_EVENT, SEARCH_EVENT, get_events, record_event
from .auth.dependencies import can_manage, get_current_user, require_admin, require_user
from .auth.models import LoginRequest, RegisterRequest
from .auth.users import authenticate, delete_user, get_user, list_users, register_user
from .config import DEFAULT_MATCHING_CONFIG, DEFAULT_SETTINGS
from .favorites.models import FavoriteCreate
from .favorites.store import (
    add_favorite,
    list_favorites,
    remove_favorite,
    remove_property_favorites,
    remove_user_favorites,
)
from .listings.models import (
    OwnerStatusUpdate,
    PropertyCreate,
    PropertyUpdate,
    SearchFilters,
    SearchPage,
)
from .listings.search import (
    featured_properties,
    listing_metadata,
    recent_properties,
    search_properties,
)
from .listings.seed import load_seed_file
from .listings.store import (
    create_property,
    delete_property,
    delete_user_properties,
    get_property,
    list_properties,
    list_user_properties,
    update_property,
)
from .listings.visibility import (
    InvalidStatusTransition,
    approval_fields,
    derive_display_status,
    filter_by_visibility,
    is_awaiting_review,
    is_publicly_visible,
    owner_status_fields,
    rejection_fields,
)
from .matching.models import QuizPreferences, QuizResult, SimpleQuizMatch, SimpleQuizPreferences
from .matching.scoring import score_quiz
from .matching.strict_filter import apply_strict_filter, to_search_filters
from .messaging.models import ConversationOut, MarkReadRequest, MessageCreate, MessageOut
from .messaging.relay import ConnectionRegistry, route_message
from .messaging.store import (
    create_message,
    delete_user_messages,
    get_conversation,
    get_conversations,
    get_messages,
    mark_messages_as_read,
)
from .reports.models import NotifyOwnerRequest, ReportCreate, ReportReview
from .reports.store import (
    add_feedback,
    create_report,
    get_property_feedback,
    get_report,
    list_reports,
    mark_notification_sent,
    remove_property_feedback,
    review_report,
    unread_feedback,
)

settings = DEFAULT_SETTINGS

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Sakany Real Estate API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=settings.session_secret)

connections = ConnectionRegistry()

if settings.seed_path is not None:
    load_seed_file(settings.seed_path)


def _get_or_404(property_id: str) -> dict:
    prop = get_property(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


def _require_owner(prop: dict, user: dict) -> None:
    if prop.get("user_id") != user["id"]:
        raise HTTPException(status_code=403, detail="Only the owner can change this property")


def _remove_property(property_id: str) -> None:
    delete_property(property_id)
    remove_property_favorites(property_id)
    remove_property_feedback(property_id)


def _delete_account(user_id: str) -> None:
    for property_id in delete_user_properties(user_id):
        remove_property_favorites(property_id)
        remove_property_feedback(property_id)
    remove_user_favorites(user_id)
    delete_user_messages(user_id)
    connections.disconnect(user_id)
    delete_user(user_id)


def search_filters(
    q: str | None = None,
    location: str | None = None,
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    property_type: str | None = None,
    min_bedrooms: int | None = Query(default=None, ge=0),
    min_bathrooms: float | None = Query(default=None, ge=0),
    min_area: float | None = Query(default=None, ge=0),
    max_area: float | None = Query(default=None, ge=0),
    for_sale: bool | None = None,
    for_rent: bool | None = None,
    amenities: list[str] = Query(default=[]),
    sort_by: str = "created_at",
    sort_direction: str = "desc",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.default_page_size, ge=1, le=100),
) -> SearchFilters:
    return SearchFilters(
        q=q,
        location=location,
        min_price=min_price,
        max_price=max_price,
        property_type=property_type,
        min_bedrooms=min_bedrooms,
        min_bathrooms=min_bathrooms,
        min_area=min_area,
        max_area=max_area,
        for_sale=for_sale,
        for_rent=for_rent,
        amenities=amenities,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        page_size=page_size,
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/metadata")
def metadata() -> dict:
    return listing_metadata(list_properties())


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/register", status_code=201)
def register(body: RegisterRequest, request: Request) -> dict:
    user = register_user(body.name, body.email, body.password, body.is_landlord)
    if not user:
        raise HTTPException(status_code=409, detail="E-mail already registered")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


@app.delete("/api/users/self")
def delete_self(request: Request, user: dict = Depends(require_user)) -> dict:
    _delete_account(user["id"])
    request.session.clear()
    return {"status": "deleted"}


# ── Property endpoints ───────────────────────────────────────────────────


@app.get("/api/properties")
def properties(limit: int | None = Query(default=None, ge=1)) -> list[dict]:
    visible = filter_by_visibility(list_properties())
    return visible[:limit] if limit else visible


@app.get("/api/properties/search", response_model=SearchPage)
def property_search(filters: SearchFilters = Depends(search_filters)) -> SearchPage:
    page = search_properties(list_properties(), filters)
    record_event(SEARCH_EVENT, {
        "q": filters.q,
        "location": filters.location,
        "property_type": filters.property_type,
        "total": page.total,
    })
    return page


@app.get("/api/properties/featured")
def featured(limit: int = Query(default=settings.featured_limit, ge=1)) -> list[dict]:
    return featured_properties(list_properties(), limit)


@app.get("/api/properties/recent")
def recent(limit: int = Query(default=settings.recent_limit, ge=1)) -> list[dict]:
    return recent_properties(list_properties(), limit)


@app.get("/api/properties/user")
def my_properties(user: dict = Depends(require_user)) -> list[dict]:
    return [
        {**p, "display_status": derive_display_status(p)}
        for p in list_user_properties(user["id"])
    ]


@app.get("/api/properties/{property_id}")
def property_detail(property_id: str, request: Request) -> dict:
    prop = get_property(property_id)
    if prop is None:
        raise HTTPException(status_code=404, detail="Property not found")
    if is_publicly_visible(prop):
        return prop
    # Hidden listings look missing to everyone but their owner and admins.
    if not can_manage(get_current_user(request), prop.get("user_id")):
        raise HTTPException(status_code=404, detail="Property not found")
    return {**prop, "display_status": derive_display_status(prop)}


@app.post("/api/properties", status_code=201)
def submit_property(body: PropertyCreate, user: dict = Depends(require_user)) -> dict:
    return create_property(user, body.model_dump())


@app.patch("/api/properties/{property_id}")
def edit_property(
    property_id: str, body: PropertyUpdate, user: dict = Depends(require_user)
) -> dict:
    prop = _get_or_404(property_id)
    _require_owner(prop, user)
    return update_property(property_id, body.model_dump(exclude_unset=True))


@app.patch("/api/properties/{property_id}/status")
def change_property_status(
    property_id: str, body: OwnerStatusUpdate, user: dict = Depends(require_user)
) -> dict:
    prop = _get_or_404(property_id)
    _require_owner(prop, user)
    try:
        fields = owner_status_fields(prop, body.status.value)
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    updated = update_property(property_id, fields)
    return {**updated, "display_status": derive_display_status(updated)}


@app.delete("/api/properties/{property_id}")
def remove_property(property_id: str, user: dict = Depends(require_user)) -> dict:
    prop = _get_or_404(property_id)
    if not can_manage(user, prop.get("user_id")):
        raise HTTPException(status_code=403, detail="Not allowed to delete this property")
    _remove_property(property_id)
    return {"status": "deleted", "id": property_id}


@app.get("/api/properties/{property_id}/feedback")
def property_feedback(
    property_id: str,
    mark_as_read: bool = False,
    user: dict = Depends(require_user),
) -> list[dict]:
    prop = _get_or_404(property_id)
    if not can_manage(user, prop.get("user_id")):
        raise HTTPException(status_code=403, detail="Not allowed to view this feedback")
    return get_property_feedback(property_id, mark_as_read=mark_as_read)


@app.get("/api/feedback/unread")
def my_unread_feedback(user: dict = Depends(require_user)) -> dict:
    own_ids = [p["id"] for p in list_user_properties(user["id"])]
    notices = unread_feedback(own_ids)
    return {"feedback": notices, "total_unread": len(notices)}


# ── Lifestyle endpoints ──────────────────────────────────────────────────


@app.post("/api/lifestyle/quiz", response_model=QuizResult)
def lifestyle_quiz(body: QuizPreferences) -> QuizResult:
    result = score_quiz(body, DEFAULT_MATCHING_CONFIG)
    record_event(QUIZ_EVENT, {
        "lifestyle": result.lifestyle,
        "priorities": result.priorities,
    })
    return result


@app.post("/api/lifestyle/match", response_model=SimpleQuizMatch)
def lifestyle_match(body: SimpleQuizPreferences) -> SimpleQuizMatch:
    matches = apply_strict_filter(filter_by_visibility(list_properties()), body)
    record_event(MATCH_EVENT, {
        "residence_type": body.residence_type,
        "family_status": body.family_status,
        "total": len(matches),
    })
    return SimpleQuizMatch(properties=matches, total=len(matches), filters=to_search_filters(body))


# ── Favorites ────────────────────────────────────────────────────────────


@app.get("/api/favorites")
def favorites(user: dict = Depends(require_user)) -> list[dict]:
    out = []
    for fav in list_favorites(user["id"]):
        prop = get_property(fav["property_id"])
        if prop is not None and not (
            is_publicly_visible(prop) or can_manage(user, prop.get("user_id"))
        ):
            prop = None
        out.append({**fav, "property": prop})
    return out


@app.post("/api/favorites", status_code=201)
def save_favorite(body: FavoriteCreate, user: dict = Depends(require_user)) -> dict:
    _get_or_404(body.property_id)
    return add_favorite(user["id"], body.property_id)


@app.delete("/api/favorites/{property_id}")
def unsave_favorite(property_id: str, user: dict = Depends(require_user)) -> dict:
    if not remove_favorite(user["id"], property_id):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"status": "removed", "property_id": property_id}


# ── Messaging ────────────────────────────────────────────────────────────


@app.get("/api/conversations", response_model=list[ConversationOut])
def conversations(user: dict = Depends(require_user)) -> list[dict]:
    out = []
    for conv in get_conversations(user["id"]):
        other = get_user(conv["other_user_id"])
        out.append({**conv, "other_user_name": other["name"] if other else None})
    return out


@app.get("/api/messages/{conversation_id}", response_model=list[MessageOut])
def conversation_messages(conversation_id: int, user: dict = Depends(require_user)) -> list[dict]:
    conv = get_conversation(conversation_id)
    if conv is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    if user["id"] not in (conv["user1_id"], conv["user2_id"]):
        raise HTTPException(status_code=403, detail="Not a participant")
    return get_messages(conversation_id)


@app.post("/api/messages", status_code=201, response_model=MessageOut)
async def send_message(body: MessageCreate, user: dict = Depends(require_user)) -> dict:
    if body.receiver_id == user["id"]:
        raise HTTPException(status_code=400, detail="Cannot message yourself")
    if get_user(body.receiver_id) is None:
        raise HTTPException(status_code=404, detail="Receiver not found")
    message = create_message(user["id"], body.receiver_id, body.content)
    await _forward(body.receiver_id, {"type": "message", "message": message})
    return message


@app.post("/api/messages/read")
def read_messages(body: MarkReadRequest, user: dict = Depends(require_user)) -> dict:
    updated = mark_messages_as_read(body.sender_id, user["id"])
    return {"status": "ok", "updated": updated}


async def _forward(user_id: str, frame: dict) -> None:
    socket = connections.get(user_id)
    if socket is None:
        return
    try:
        await socket.send_json(frame)
    except (RuntimeError, WebSocketDisconnect):
        logger.warning("Dropping stale socket of user %s", user_id)
        connections.disconnect(user_id, socket)


@app.websocket("/ws")
async def chat_socket(websocket: WebSocket) -> None:
    user = websocket.session.get("user")
    if not user:
        await websocket.close(code=1008, reason="Authentication required")
        return

    await websocket.accept()
    connections.connect(user["id"], websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Ignoring malformed frame from user %s", user["id"])
                continue

            if isinstance(payload, dict) and payload.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            delivery = route_message(connections, user["id"], payload)
            if delivery is None:
                continue
            if delivery.receiver_socket is not None:
                await _forward(delivery.message["receiver_id"], {
                    "type": "message",
                    "message": delivery.message,
                })
            await websocket.send_json({"type": "sent", "message": delivery.message})
    except WebSocketDisconnect:
        pass
    finally:
        connections.disconnect(user["id"], websocket)


# ── Reports ──────────────────────────────────────────────────────────────


@app.post("/api/reports", status_code=201)
def report_property(body: ReportCreate, user: dict = Depends(require_user)) -> dict:
    prop = _get_or_404(body.property_id)
    return create_report(prop, user, body.reason, body.details)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/api/admin/users")
def admin_users(user: dict = Depends(require_admin)) -> list[dict]:
    return list_users()


@app.delete("/api/admin/users/{user_id}")
def admin_delete_user(user_id: str, user: dict = Depends(require_admin)) -> dict:
    if get_user(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    _delete_account(user_id)
    return {"status": "deleted", "id": user_id}


@app.get("/api/admin/properties/pending")
def pending_properties(user: dict = Depends(require_admin)) -> list[dict]:
    return [p for p in list_properties() if is_awaiting_review(p)]


@app.post("/api/admin/properties/{property_id}/approve")
def approve_property(property_id: str, user: dict = Depends(require_admin)) -> dict:
    prop = _get_or_404(property_id)
    if not is_awaiting_review(prop):
        raise HTTPException(status_code=409, detail="Property is not awaiting review")
    logger.info("Property %s approved by %s", property_id, user["id"])
    return update_property(property_id, approval_fields())


@app.post("/api/admin/properties/{property_id}/reject")
def reject_property(property_id: str, user: dict = Depends(require_admin)) -> dict:
    prop = _get_or_404(property_id)
    if not is_awaiting_review(prop):
        raise HTTPException(status_code=409, detail="Property is not awaiting review")
    logger.info("Property %s rejected by %s", property_id, user["id"])
    return update_property(property_id, rejection_fields())


@app.get("/api/admin/reports")
def admin_reports(status: str | None = None, user: dict = Depends(require_admin)) -> list[dict]:
    return list_reports(status)


@app.patch("/api/admin/reports/{report_id}")
def admin_review_report(
    report_id: str, body: ReportReview, user: dict = Depends(require_admin)
) -> dict:
    report = review_report(report_id, body.status.value, body.admin_notes, user["id"])
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@app.post("/api/reports/notify-owner")
def notify_owner(body: NotifyOwnerRequest, user: dict = Depends(require_admin)) -> dict:
    report = get_report(body.report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    if not report.get("owner_id"):
        raise HTTPException(status_code=409, detail="Report has no property owner to notify")
    notes = body.admin_notes if body.admin_notes is not None else report["admin_notes"]
    notice = add_feedback(report, notes)
    report = mark_notification_sent(report["id"])
    logger.info("Feedback for report %s sent to owner %s", report["id"], report["owner_id"])
    return {"status": "sent", "feedback": notice, "report": report}


@app.get("/api/admin/dashboard")
def admin_dashboard(user: dict = Depends(require_admin)) -> dict:
    return compute_dashboard(list_properties(), list_users(), list_reports(), get_events())
