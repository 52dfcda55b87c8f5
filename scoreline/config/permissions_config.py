"""
Permissions and Roles Configuration
Defines which permissions each application role (users.role) carries.
Used by require_permission() and by /auth/me to describe the caller's capabilities.
"""

ROLE_ADMIN = "ADMIN"
ROLE_PLAYER = "PLAYER"
ROLE_VISITOR = "VISITOR"

ROLES = [ROLE_ADMIN, ROLE_PLAYER, ROLE_VISITOR]

# Define modules and their actions
MODULES = {
    "rounds": {"resource": "rounds", "actions": ["read", "manage"]},
    "fixtures": {"resource": "fixtures", "actions": ["manage"]},
    "predictions": {"resource": "predictions", "actions": ["submit", "read_points"]},
    "standings": {"resource": "standings", "actions": ["read"]},
    "leagues": {"resource": "leagues", "actions": ["create", "join"]},
    "users": {"resource": "users", "actions": ["manage"]},
    "news": {"resource": "news", "actions": ["manage"]},
}

# Permissions granted per role
ROLE_PERMISSIONS = {
    ROLE_ADMIN: {
        "rounds": ["read", "manage"],
        "fixtures": ["manage"],
        "predictions": ["read_points"],
        "standings": ["read"],
        "leagues": ["create", "join"],
        "users": ["manage"],
        "news": ["manage"],
    },
    ROLE_PLAYER: {
        "rounds": ["read"],
        "predictions": ["submit", "read_points"],
        "standings": ["read"],
        "leagues": ["create", "join"],
    },
    ROLE_VISITOR: {
        "rounds": ["read"],
        "standings": ["read"],
    },
}


def get_permission_matrix():
    """
    Returns the sorted "resource:action" permissions of each role
    Format: {"PLAYER": ["leagues:create", "predictions:submit", ...], ...}
    Actions a module does not declare are ignored.
    """
    matrix = {}
    for role in ROLES:
        role_permissions = []
        for module_name, actions in ROLE_PERMISSIONS.get(role, {}).items():
            resource = MODULES[module_name]["resource"]
            for action in actions:
                if action in MODULES[module_name]["actions"]:
                    role_permissions.append(f"{resource}:{action}")
        matrix[role] = sorted(role_permissions)
    return matrix


PERMISSION_MATRIX = get_permission_matrix()


def get_role_permissions(role: str):
    return PERMISSION_MATRIX.get(role, [])


def role_has_permission(role: str, permission: str) -> bool:
    return permission in get_role_permissions(role)
