# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from refman.auth.session import SessionClaims, issue_token, load_secret
from refman.auth.users import get_user, register, verify_credentials
from refman.core.articles import SEARCH_FIELDS
from refman.core.log import setup_logging
from refman.errors import AuthenticationError, NotFoundError, RefmanError, ValidationError
from refman.permissions import (
    claims_optional,
    cleared_cookie_kwargs,
    perimeter_redirect,
    require_claims,
    session_cookie_kwargs,
)
from refman.services import article_service
from refman.services.export_service import export_articles

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    setup_logging()
    # A missing secret must stop the process here, not fail per request.
    load_secret()
    logger.info("refman started")
    yield


app = FastAPI(title="refman", lifespan=_lifespan)


@app.middleware("http")
async def _perimeter_middleware(request: Request, call_next):
    redirect = perimeter_redirect(request)
    if redirect is not None:
        return redirect
    return await call_next(request)


BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


# ------------------ Errors ------------------


@app.exception_handler(RefmanError)
async def _refman_error_handler(request: Request, exc: RefmanError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies and wrong field types are client errors: 400, not 422.
    return JSONResponse({"message": "Datos de la petición no válidos"}, status_code=400)


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"message": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers)


async def json_body(request: Request) -> Dict[str, Any]:
    """Article payloads as a plain dict: partial updates need to know which keys were sent."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError("El cuerpo de la petición no es JSON válido")
    if not isinstance(data, dict):
        raise ValidationError("El cuerpo de la petición debe ser un objeto JSON")
    return data


def _render(request: Request, template_name: str, ctx: Optional[dict] = None):
    """TemplateResponse wrapper injecting the current session."""
    base_ctx = {"current_user": claims_optional(request)}
    return templates.TemplateResponse(request, template_name, {**base_ctx, **(ctx or {})})


# ------------------ Pages ------------------


@app.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    if claims_optional(request):
        return RedirectResponse(url="/", status_code=303)
    return _render(request, "login.html")


@app.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request):
    if claims_optional(request):
        return RedirectResponse(url="/", status_code=303)
    return _render(request, "signup.html")


@app.get("/", response_class=HTMLResponse)
def home(request: Request, term: str = "", searchBy: str = "title", claims: SessionClaims = Depends(require_claims)):
    term = term.strip()
    if searchBy not in SEARCH_FIELDS:
        searchBy = "title"
    if term:
        articles = article_service.search_articles(claims.subject_id, term, searchBy)
    else:
        articles = article_service.list_articles(claims.subject_id)
    return _render(
        request,
        "index.html",
        {"articles": articles, "term": term, "search_by": searchBy, "search_fields": SEARCH_FIELDS},
    )


@app.get("/articles/new", response_class=HTMLResponse)
def new_article_page(request: Request, claims: SessionClaims = Depends(require_claims)):
    return _render(request, "article_form.html", {"article": None})


@app.get("/articles/edit/{article_id}", response_class=HTMLResponse)
def edit_article_page(request: Request, article_id: str, claims: SessionClaims = Depends(require_claims)):
    try:
        article = article_service.get_article(claims.subject_id, article_id)
    except NotFoundError:
        return RedirectResponse(url="/", status_code=303)
    return _render(request, "article_form.html", {"article": article})


# ------------------ Auth API ------------------


class SignupBody(BaseModel):
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    password: str = ""


class LoginBody(BaseModel):
    username: str = ""
    password: str = ""


@app.post("/auth/signup", status_code=201)
def signup(body: SignupBody):
    user = register(
        first_name=body.first_name,
        last_name=body.last_name,
        username=body.username,
        password=body.password,
    )
    return {"message": "Usuario registrado correctamente", "id": user.id, "username": user.username}


@app.post("/auth/login")
def login(body: LoginBody):
    username = body.username.strip()
    password = body.password
    if not username or not password:
        raise ValidationError("Faltan credenciales")
    try:
        user = verify_credentials(username, password)
    except (NotFoundError, AuthenticationError) as e:
        logger.info("Failed login for %s (%s)", username, type(e).__name__)
        raise
    resp = JSONResponse({"message": "Sesión iniciada", "id": user.id, "username": user.username})
    resp.set_cookie(**session_cookie_kwargs(issue_token(user.as_token_subject())))
    logger.info("User %s logged in", user.username)
    return resp


@app.post("/auth/logout")
def logout(claims: SessionClaims = Depends(require_claims)):
    # Clears the client credential only; the token itself is not revoked.
    resp = JSONResponse({"message": "Sesión cerrada"})
    resp.set_cookie(**cleared_cookie_kwargs())
    logger.info("User %s logged out", claims.username)
    return resp


@app.get("/profile")
def profile(claims: SessionClaims = Depends(require_claims)):
    out = {"id": claims.subject_id, "username": claims.username}
    user = get_user(claims.subject_id)
    if user is not None:
        out.update(first_name=user.first_name, last_name=user.last_name)
    return out


# ------------------ Articles API ------------------


def _require_id(article_id: Optional[str]) -> str:
    aid = str(article_id or "").strip()
    if not aid:
        raise ValidationError("Se requiere el ID del artículo", field="id")
    return aid


@app.get("/articles")
def articles_get(id: Optional[str] = None, claims: SessionClaims = Depends(require_claims)):
    if id:
        return article_service.get_article(claims.subject_id, id)
    return article_service.list_articles(claims.subject_id)


@app.post("/articles", status_code=201)
def articles_post(payload: Dict[str, Any] = Depends(json_body), claims: SessionClaims = Depends(require_claims)):
    return article_service.create_article(claims.subject_id, payload)


@app.put("/articles")
def articles_put(
    id: Optional[str] = None,
    payload: Dict[str, Any] = Depends(json_body),
    claims: SessionClaims = Depends(require_claims),
):
    return article_service.update_article(claims.subject_id, _require_id(id), payload)


@app.delete("/articles")
def articles_delete(id: Optional[str] = None, claims: SessionClaims = Depends(require_claims)):
    article_service.delete_article(claims.subject_id, _require_id(id))
    return {"message": "Artículo eliminado correctamente"}


@app.get("/articles/export.{fmt}")
def articles_export(fmt: str, claims: SessionClaims = Depends(require_claims)):
    return export_articles(claims.subject_id, fmt)


@app.get("/search")
def search(term: str = "", searchBy: str = "", claims: SessionClaims = Depends(require_claims)):
    if not term.strip() or not searchBy.strip():
        raise ValidationError("Faltan parámetros de búsqueda")
    found = article_service.search_articles(claims.subject_id, term, searchBy)
    if not found:
        raise NotFoundError("No se encontraron artículos")
    return found
