# services/role_admin.py
"""
Role administration: list users with profile/role, and set a user's role.

Stateless per request. The caller's bearer token is verified first, then the
admin role is checked against user_roles on every call (nothing cached).
Errors are raised as RoleAdminError subclasses; `handle()` turns them (and
anything unexpected) into `(status_code, {"error": ...})`.
"""
import json
import logging
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError
from sqlalchemy.orm import Session

from deps.auth import user_from_token
from deps.authz import has_role
from models import User, Profile, UserRole, ROLE_ADMIN, ROLE_EMPLOYEE
from schemas import ManagedUserOut, SetRoleIn

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

MSG_UNAUTHORIZED = "Não autorizado"
MSG_FORBIDDEN = "Acesso negado. Apenas administradores."
MSG_INVALID = "Dados inválidos"
MSG_SELF_DEMOTE = "Você não pode remover seu próprio papel de admin."
MSG_NOT_FOUND = "Ação não encontrada"


class RoleAdminError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(RoleAdminError):
    status_code = 401


class Forbidden(RoleAdminError):
    status_code = 403


class ValidationFailed(RoleAdminError):
    status_code = 400


class ActionNotFound(RoleAdminError):
    status_code = 404


def bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise Unauthorized(MSG_UNAUTHORIZED)
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized(MSG_UNAUTHORIZED)
    return token.strip()


def authorize_admin(verify_db: Session, admin_db: Session, authorization: Optional[str]) -> User:
    """
    401 ถ้าไม่มี/ใช้ token ไม่ได้, 403 ถ้าไม่ใช่ admin.

    `verify_db` is only used to resolve the token to an identity,
    `admin_db` for the role lookup and everything after it.
    """
    token = bearer_token(authorization)
    user = user_from_token(verify_db, token)
    if user is None:
        raise Unauthorized(MSG_UNAUTHORIZED)
    if not has_role(admin_db, user.id, ROLE_ADMIN):
        raise Forbidden(MSG_FORBIDDEN)
    return user


def list_users(db: Session) -> List[ManagedUserOut]:
    # ตารางเล็ก อ่านทั้งตาราง แล้ว merge ในหน่วยความจำ
    users = db.query(User).order_by(User.created_at.asc(), User.email.asc()).all()
    names = {p.user_id: p.full_name for p in db.query(Profile).all()}
    roles = {r.user_id: r.role for r in db.query(UserRole).all()}

    return [
        ManagedUserOut(
            id=u.id,
            email=u.email,
            full_name=names.get(u.id) or "",
            role=roles.get(u.id) or ROLE_EMPLOYEE,
            created_at=u.created_at,
        )
        for u in users
    ]


def parse_set_role(body: Any) -> SetRoleIn:
    if isinstance(body, (bytes, bytearray, str)):
        try:
            body = json.loads(body or b"null")
        except ValueError:
            raise ValidationFailed(MSG_INVALID)
    if not isinstance(body, dict):
        raise ValidationFailed(MSG_INVALID)
    try:
        return SetRoleIn.model_validate(body)
    except ValidationError:
        raise ValidationFailed(MSG_INVALID)


def set_role(db: Session, caller: User, body: Any) -> dict:
    payload = parse_set_role(body)

    if payload.user_id == caller.id and payload.role != ROLE_ADMIN:
        raise ValidationFailed(MSG_SELF_DEMOTE)

    if db.get(User, payload.user_id) is None:
        raise ValidationFailed(MSG_INVALID)

    # upsert: มีแถวอยู่แล้ว -> update, ไม่มี -> insert (commit ครั้งเดียว)
    existing = db.query(UserRole).filter(UserRole.user_id == payload.user_id).first()
    if existing:
        existing.role = payload.role
    else:
        db.add(UserRole(user_id=payload.user_id, role=payload.role))
    db.commit()

    logger.info("role of user %s set to %s by %s", payload.user_id, payload.role, caller.id)
    return {"success": True}


def handle(
    db: Session,
    *,
    method: str,
    action: Optional[str],
    authorization: Optional[str],
    body: Any = None,
    verify_db: Optional[Session] = None,
) -> Tuple[int, Any]:
    """Run one request; returns (status_code, json_body)."""
    method = (method or "").upper()
    if method == "OPTIONS":
        return 200, "ok"

    try:
        caller = authorize_admin(verify_db or db, db, authorization)

        if method == "GET" and action == "list":
            return 200, [u.model_dump(mode="json") for u in list_users(db)]

        if method == "POST" and action == "set-role":
            return 200, set_role(db, caller, body)

        raise ActionNotFound(MSG_NOT_FOUND)
    except RoleAdminError as e:
        db.rollback()
        return e.status_code, {"error": e.message}
    except Exception as e:
        db.rollback()
        logger.exception("manage-users failed")
        return 500, {"error": str(e)}
