from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from services.console.api.rendering import render_page
from services.console.application.forms import FormError, parse_draft_form
from services.console.application.sessions import COOKIE_NAME, ConsoleSession, SessionStore
from shared.core.logging_config import get_logger, set_request_context

logger = get_logger(__name__)

router = APIRouter(tags=["console"])

def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions

def get_session(request: Request, store: SessionStore = Depends(get_session_store)) -> ConsoleSession:
    session = store.resolve(request.cookies.get(COOKIE_NAME))
    set_request_context(session_id=session.session_id)
    if session.is_new:
        logger.info("Console session started")
    return session

def _with_cookie(response: Response, session: ConsoleSession, store: SessionStore) -> Response:
    response.set_cookie(
        COOKIE_NAME,
        session.session_id,
        max_age=int(store.ttl),
        httponly=True,
        samesite="lax",
    )
    return response

def _back_to_page(session: ConsoleSession, store: SessionStore) -> Response:
    return _with_cookie(RedirectResponse("/", status_code=303), session, store)

@router.get("/", response_class=HTMLResponse)
async def page(session: ConsoleSession = Depends(get_session),
               store: SessionStore = Depends(get_session_store)):
    """Mount the session's views and render the page"""
    await session.console.mount()
    response = HTMLResponse(render_page(session.console), headers={"Cache-Control": "no-store"})
    return _with_cookie(response, session, store)

@router.post("/customers")
async def create_customer(
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    session: ConsoleSession = Depends(get_session),
    store: SessionStore = Depends(get_session_store),
):
    form = session.console.customer_form
    form.update(name=name, email=email, phone=phone, address=address)
    await session.console.directory.ensure_loaded()
    await form.submit()
    return _back_to_page(session, store)

@router.post("/customers/{customer_id:path}/select")
async def select_customer(customer_id: str,
                          session: ConsoleSession = Depends(get_session),
                          store: SessionStore = Depends(get_session_store)):
    session.console.builder.select_customer(customer_id)
    return _back_to_page(session, store)

@router.post("/orders/draft")
async def update_draft(request: Request,
                       session: ConsoleSession = Depends(get_session),
                       store: SessionStore = Depends(get_session_store)):
    """Apply the submitted draft fields, then run the requested action"""
    builder = session.console.builder
    form = await request.form()
    try:
        submission = parse_draft_form(form, len(builder.items))
    except FormError as exc:
        builder.error = str(exc)
        return _back_to_page(session, store)

    builder.error = ""
    builder.apply(submission)
    if submission.action == "add_item":
        builder.add_item()
    elif submission.action == "remove_item":
        builder.remove_item(submission.index)
    elif submission.action == "create":
        await builder.create()
    return _back_to_page(session, store)

@router.post("/orders/refresh")
async def refresh_orders(session: ConsoleSession = Depends(get_session),
                         store: SessionStore = Depends(get_session_store)):
    session.console.request_refresh()
    return _back_to_page(session, store)
