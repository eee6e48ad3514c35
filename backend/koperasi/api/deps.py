import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from koperasi.db.session import SessionLocal
from koperasi.core.security import decode_token

bearer = HTTPBearer()

def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

def current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> dict:
    """Token claims: ``sub`` (username), ``role`` and ``uid`` (member id)."""
    try:
        claims = decode_token(creds.credentials)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="invalid_token")
    if claims.get("uid") is None:
        raise HTTPException(status_code=401, detail="invalid_token")
    return claims

def require_admin(u: dict = Depends(current_user)) -> dict:
    if u.get("role") != "admin":
        raise HTTPException(status_code=403, detail="admin_only")
    return u

def require_self_or_admin(member_id: int, u: dict) -> None:
    # members only see their own loans, savings and SHU rows
    if u.get("role") != "admin" and u.get("uid") != member_id:
        raise HTTPException(status_code=403, detail="forbidden")
