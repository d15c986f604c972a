"""Services layer for the practice client."""

from .auth_service import AuthContext, AuthService, check_access, check_route, dashboard_route_for
from .practice_service import PracticeService, QUESTION_BANK, PRACTICE_CARDS
from .response_session import ResponseSession, SessionStatus, SESSION_TOPIC
from .submission_service import Submitter, ResponsePayload, DeliveryStrategy, build_delivery_plan

__all__ = [
    "AuthContext",
    "AuthService",
    "check_access",
    "check_route",
    "dashboard_route_for",
    "PracticeService",
    "QUESTION_BANK",
    "PRACTICE_CARDS",
    "ResponseSession",
    "SessionStatus",
    "SESSION_TOPIC",
    "Submitter",
    "ResponsePayload",
    "DeliveryStrategy",
    "build_delivery_plan",
]
