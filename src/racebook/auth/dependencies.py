"""FastAPI dependencies for authentication."""

from typing import Annotated

from fastapi import Depends

from racebook.auth.supabase_auth import get_user_context
from racebook.models.accounts import UserContext

CurrentUser = Annotated[UserContext, Depends(get_user_context)]
