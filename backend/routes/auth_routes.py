from fastapi import APIRouter, Depends

from backend.auth.dependencies import Identity, get_current_identity

router = APIRouter(tags=['auth'])


@router.get("/me")
def me(identity: Identity = Depends(get_current_identity)):
    return {
        "user_id": identity.user_id,
        "email": identity.email,
        "role": identity.role,
        "tenant_id": identity.tenant_id,
    }
