"""
Users router - profile and notification preference endpoints.
All endpoints here require a session (cookie or Authorization header).
"""

from fastapi import APIRouter, Depends

from app.deps import AuthContext, get_auth_context, get_credential_store, get_current_user
from app.models.user import UserCredential
from app.schemas.user import NotificationPreferences, ProfileUpdate, UserOut
from app.services.credential_store import CredentialStore

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/users", tags=["users"])


# ---------------------------------------------------------------------------
# GET /users/me - Get the current user's profile
# ---------------------------------------------------------------------------
@router.get("/me", response_model=UserOut)
def read_current_user(current_user: UserCredential = Depends(get_current_user)):
    """
    Get the signed-in user's profile.

    The frontend calls this on load to decide between the dashboard and
    the login page. Tokens are never part of the response.
    """
    return UserOut.model_validate(current_user)


# ---------------------------------------------------------------------------
# PATCH /users/me - Update the display name
# ---------------------------------------------------------------------------
@router.patch("/me", response_model=UserOut)
def update_current_user(
    payload: ProfileUpdate,
    current_user: UserCredential = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Update the user's display name.

    The next login overwrites it again with the name Google reports.
    """
    user = store.update_profile(current_user.id, payload.display_name)
    return UserOut.model_validate(user)


# ---------------------------------------------------------------------------
# GET/PUT /users/me/notifications - Notification switches
# ---------------------------------------------------------------------------
@router.get("/me/notifications", response_model=NotificationPreferences)
def read_notification_preferences(current_user: UserCredential = Depends(get_current_user)):
    return NotificationPreferences.model_validate(current_user)


@router.put("/me/notifications", response_model=NotificationPreferences)
def update_notification_preferences(
    payload: NotificationPreferences,
    ctx: AuthContext = Depends(get_auth_context),
    current_user: UserCredential = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Replace both notification switches."""
    user = store.update_notification_preferences(
        ctx.user_id,
        email_notifications=payload.email_notifications,
        push_notifications=payload.push_notifications,
    )
    return NotificationPreferences.model_validate(user)
