# app/models/user.py
# The User table is declared next to its fastapi-users manager in core/auth.py;
# it is re-exported here so model imports stay in one package.
from app.core.auth import User

__all__ = ["User"]
