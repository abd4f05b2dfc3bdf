from fastapi import APIRouter
from pydantic import BaseModel

from shopfloor.api.deps import UserAuthDep
from shopfloor.domain.terminal.ports import AuthResult
from shopfloor.domain.terminal.value_objects.enums import Role

router = APIRouter(prefix="/users", tags=["users"])


class AuthenticateRequest(BaseModel):
    employee_id: str
    role: Role


@router.post("/authenticate", response_model=AuthResult)
def authenticate_user(request: AuthenticateRequest, authenticator: UserAuthDep) -> AuthResult:
    """Check a badge against one permission flag. Failures are reported in the body."""
    return authenticator.authenticate(request.employee_id, request.role)
