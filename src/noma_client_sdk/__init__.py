from .access_gate import (
    DEFAULT_SUBSCRIPTION_ROUTES,
    AccessGate,
    NavItem,
    RouteAction,
    RouteDecision,
    RouteGateConfig,
    evaluate_route,
)
from .auth_store import AuthStore
from .config import ClientConfig, ConfigError, load_config
from .credentials import CredentialVerifier
from .exceptions import (
    ApiError,
    AuthError,
    CredentialError,
    ForbiddenError,
    NotFoundError,
    ReauthenticationRequired,
    RenewalError,
    SessionError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .http_client import HttpClient, RequestSpec
from .models import (
    OrderPermission,
    Panel,
    Product,
    Role,
    SessionData,
    Subscription,
    SubscriptionStatus,
    Tenant,
    TenantSettings,
    TokenResponse,
    User,
)
from .permissions import BlockMode, GateDecision, RoleGateInput, resolve_role_gate
from .renewal import RenewalCoordinator, RenewalState
from .roles import ActorContext, RoleBinding, landing_path
from .routes import RoutePattern, is_route_match
from .session import ApiSession
from .storage import DeviceStorage
from .subscription import SubscriptionState, resolve_subscription
from .workspace import Workspace, WorkspaceDataSource

__all__ = [
    "AccessGate",
    "ActorContext",
    "ApiError",
    "ApiSession",
    "AuthError",
    "AuthStore",
    "BlockMode",
    "ClientConfig",
    "ConfigError",
    "CredentialError",
    "CredentialVerifier",
    "DEFAULT_SUBSCRIPTION_ROUTES",
    "DeviceStorage",
    "ForbiddenError",
    "GateDecision",
    "HttpClient",
    "NavItem",
    "NotFoundError",
    "OrderPermission",
    "Panel",
    "Product",
    "ReauthenticationRequired",
    "RenewalCoordinator",
    "RenewalError",
    "RenewalState",
    "RequestSpec",
    "Role",
    "RoleBinding",
    "RoleGateInput",
    "RouteAction",
    "RouteDecision",
    "RouteGateConfig",
    "RoutePattern",
    "SessionData",
    "SessionError",
    "Subscription",
    "SubscriptionState",
    "SubscriptionStatus",
    "Tenant",
    "TenantSettings",
    "TokenResponse",
    "TransportError",
    "UnauthorizedError",
    "User",
    "ValidationError",
    "Workspace",
    "WorkspaceDataSource",
    "evaluate_route",
    "is_route_match",
    "landing_path",
    "load_config",
    "resolve_role_gate",
    "resolve_subscription",
]
