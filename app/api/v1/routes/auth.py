# app/api/v1/routes/auth.py
from fastapi import APIRouter, Response, status

router = APIRouter(tags=["Authentication"])

@router.post("/jwt/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response):
    """
    Stateless logout: bearer tokens expire on their own, so this only
    clears the access token cookie if the client stored one there.
    """
    response.delete_cookie(key="access_token")
    return {"detail": "Successfully logged out"}
