from dataclasses import dataclass

from fastapi import Request


@dataclass(frozen=True)
class RequestContext:
    user_id: str | None
    username: str | None
    role: str | None
    trace_id: str


def trace_id_of(request: Request) -> str:
    return getattr(request.state, "trace_id", "")


def bind_identity(request: Request, *, user_id=None, username=None, role=None) -> RequestContext:
    """Record who is calling on ``request.state`` for logs, errors and audit."""
    request.state.user_id = user_id
    request.state.username = username
    request.state.role = role
    context = RequestContext(user_id=user_id, username=username, role=role, trace_id=trace_id_of(request))
    request.state.context = context
    return context


def get_request_context(request: Request) -> RequestContext:
    context = getattr(request.state, "context", None)
    if isinstance(context, RequestContext):
        return context
    return RequestContext(
        user_id=getattr(request.state, "user_id", None),
        username=getattr(request.state, "username", None),
        role=getattr(request.state, "role", None),
        trace_id=trace_id_of(request),
    )
