"""HTTP schema exports."""

from .account import AccountOut, AuthResponse, LoginRequest, RegisterRequest
from .script import GenerateScriptRequest, MessageResponse, ScriptListResponse, ScriptOut

__all__ = [
    "AccountOut",
    "AuthResponse",
    "GenerateScriptRequest",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "ScriptListResponse",
    "ScriptOut",
]
